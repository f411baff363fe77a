"""Error kinds raised while producing content.

Every subclass of ContentError is recoverable: the server answers with an
error page instead of failing the request. Anything else is unexpected.
"""


class ContentError(Exception):
    """Base class for recoverable content errors."""


class ResourceNotFound(ContentError):
    """No resource exists at a logical path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Resource not found: {path}")
        self.path = path


class InvalidPath(ContentError):
    """A path segment cannot be turned into a safe resource lookup."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid path {path!r}: {reason}")
        self.path = path
        self.reason = reason


class RenderError(ContentError):
    """A document could not be parsed."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Render error: {detail}")
        self.detail = detail
