"""Error recovery for request handlers.

A Mend maps every recoverable error kind to a fallback response. Coverage
is checked when the Mend is built: a kind without a fallback is a
construction error, never a runtime surprise.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from aiohttp import web

from invariant.errors import ContentError, InvalidPath, RenderError, ResourceNotFound
from invariant.views import PageTemplates

E = TypeVar("E", bound=BaseException)

Fallback = Callable[[E, web.Request], web.Response]
Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@dataclass(frozen=True)
class ErrorContext:
    """Logger and optional sink receiving every error seen by the server."""

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("invariant.errors"))
    sink: Callable[[BaseException], None] | None = None

    def recovered(self, error: ContentError, request: web.Request) -> None:
        self.logger.warning(f"{request.method} {request.path}: {error}")
        if self.sink is not None:
            self.sink(error)

    def unexpected(self, error: Exception, request: web.Request) -> None:
        self.logger.error(f"{request.method} {request.path}: unexpected error", exc_info=error)
        if self.sink is not None:
            self.sink(error)


def error_kinds(base: type[E]) -> list[type[E]]:
    """Return every subclass of base, recursively, in definition order."""
    kinds: list[type[E]] = []
    for kind in base.__subclasses__():
        kinds.append(kind)
        kinds.extend(error_kinds(kind))
    return kinds


class Mend(Generic[E]):
    """Total mapping from the error kinds under a base class to fallbacks."""

    def __init__(self, base: type[E], fallbacks: Mapping[type[E], Fallback[E]]) -> None:
        """Initialize and check coverage.

        Args:
            base: Root of the recoverable error hierarchy
            fallbacks: Fallback per error kind; a fallback registered for a
                       class also covers its subclasses

        Raises:
            TypeError: If a kind has no fallback, base itself is mapped, or a
                       mapped class is outside the hierarchy
        """
        if base in fallbacks:
            raise TypeError(f"{base.__name__} must not have a catch-all fallback")

        outside = [kind for kind in fallbacks if not issubclass(kind, base)]
        if outside:
            names = ", ".join(kind.__name__ for kind in outside)
            raise TypeError(f"Fallbacks registered for kinds outside {base.__name__}: {names}")

        missing = [kind for kind in error_kinds(base) if self._lookup(kind, base, fallbacks) is None]
        if missing:
            names = ", ".join(kind.__name__ for kind in missing)
            raise TypeError(f"No fallback for {base.__name__} kinds: {names}")

        self._base = base
        self._fallbacks = dict(fallbacks)

    @property
    def base(self) -> type[E]:
        return self._base

    def recover(self, error: E, request: web.Request) -> web.Response:
        """Build the fallback response for an error."""
        fallback = self._lookup(type(error), self._base, self._fallbacks)
        if fallback is None:
            raise TypeError(f"{type(error).__name__} is not a {self._base.__name__} kind")
        return fallback(error, request)

    @staticmethod
    def _lookup(
        kind: type[E], base: type[E], fallbacks: Mapping[type[E], Fallback[E]]
    ) -> Fallback[E] | None:
        for ancestor in kind.__mro__:
            if ancestor is base:
                return None
            if ancestor in fallbacks:
                return fallbacks[ancestor]
        return None


def create_content_mend(templates: PageTemplates) -> Mend[ContentError]:
    """Create the error pages for every content error kind."""

    def html(text: str) -> web.Response:
        return web.Response(text=text, content_type="text/html")

    def bad_markdown(error: RenderError, request: web.Request) -> web.Response:
        return html(templates.error(f"Bad markdown: {error.detail}"))

    def not_found(error: ResourceNotFound, request: web.Request) -> web.Response:
        return html(templates.error(f"Path {error.path} not found", path=request.path))

    def invalid_path(error: InvalidPath, request: web.Request) -> web.Response:
        return html(templates.error(f"{error.path} is not valid: {error.reason}"))

    fallbacks: dict[type[ContentError], Fallback] = {
        RenderError: bad_markdown,
        ResourceNotFound: not_found,
        InvalidPath: invalid_path,
    }
    return Mend(ContentError, fallbacks)


def create_recovery_middleware(mend: Mend, context: ErrorContext):
    """Create middleware turning recoverable errors into fallback pages.

    HTTP exceptions pass through untouched. Any other error is reported as
    unexpected and re-raised.
    """

    @web.middleware
    async def recovery_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        try:
            return await handler(request)
        except web.HTTPException:
            raise
        except Exception as exc:
            if not isinstance(exc, mend.base):
                context.unexpected(exc, request)
                raise
            context.recovered(exc, request)
            return mend.recover(exc, request)

    return recovery_middleware
