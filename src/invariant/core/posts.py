"""Post library.

Builds post pages and the home page from the content root. Rendered post
pages and post metadata are cached separately, each computed at most once
per post for the lifetime of the library.
"""

import logging
from dataclasses import dataclass
from datetime import date

from invariant.core.cache import ContentCache
from invariant.core.renderer import Blogpost, read_blogpost, render_document
from invariant.core.resources import ResourceLoader
from invariant.core.types import POST_SUFFIX, POSTS_DIR, ContentKey
from invariant.errors import ContentError, RenderError
from invariant.views import PageTemplates, PostSummary

logger = logging.getLogger(__name__)

HOME_RESOURCE = "home.md"


@dataclass(frozen=True)
class RenderedPage:
    """Fully assembled HTML page."""

    title: str
    html: str
    published: date | None = None


@dataclass(frozen=True)
class CheckResult:
    """Outcome of rendering one post during a content check."""

    slug: str
    error: ContentError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PostLibrary:
    """Serves posts from a resource loader through the content caches."""

    def __init__(
        self,
        loader: ResourceLoader,
        templates: PageTemplates,
        *,
        posts: list[str] | None = None,
    ) -> None:
        """Initialize library.

        Args:
            loader: Source of post, page and asset resources
            templates: Page templates for assembling full pages
            posts: Slugs to list on the home page; None lists every post
                   found under posts/
        """
        self._loader = loader
        self._templates = templates
        self._posts = posts
        self._pages: ContentCache[ContentKey, RenderedPage] = ContentCache(
            self._render_post, name="page"
        )
        self._metadata: ContentCache[ContentKey, Blogpost] = ContentCache(
            self._read_metadata, name="metadata"
        )

    @property
    def loader(self) -> ResourceLoader:
        return self._loader

    @property
    def templates(self) -> PageTemplates:
        return self._templates

    def page(self, key: ContentKey) -> RenderedPage:
        """Return the rendered page of a post, rendering it on first use.

        Raises:
            ResourceNotFound: If the post source doesn't exist
            InvalidPath: If the post path can't be resolved safely
            RenderError: If the post can't be parsed
        """
        return self._pages.get(key)

    def metadata(self, key: ContentKey) -> Blogpost:
        """Return the front matter metadata of a post."""
        return self._metadata.get(key)

    def slugs(self) -> list[str]:
        """Slugs of the posts to list, configured or discovered."""
        if self._posts is not None:
            return list(self._posts)
        return self._loader.names(POSTS_DIR, POST_SUFFIX)

    def listing(self) -> list[PostSummary]:
        """Return listed posts, newest first.

        Posts published on the same day are ordered by title.
        """
        summaries = [
            PostSummary(slug=slug, post=self.metadata(ContentKey(slug))) for slug in self.slugs()
        ]
        summaries.sort(key=lambda summary: summary.post.title)
        summaries.sort(key=lambda summary: summary.post.date, reverse=True)
        return summaries

    def home(self) -> RenderedPage:
        """Assemble the home page from home.md and the post listing."""
        intro = render_document(self._loader.load(HOME_RESOURCE))
        html = self._templates.home(intro, self.listing())
        return RenderedPage(title="Home", html=html)

    def check(self) -> list[CheckResult]:
        """Render every listed post, collecting failures instead of raising."""
        results: list[CheckResult] = []
        for slug in self.slugs():
            try:
                self.page(ContentKey(slug))
            except ContentError as exc:
                results.append(CheckResult(slug=slug, error=exc))
            else:
                results.append(CheckResult(slug=slug))
        return results

    def _render_post(self, key: ContentKey) -> RenderedPage:
        logger.info(f"Rendering post {key}")
        document = render_document(
            self._loader.load(key.resource_path),
            require_front_matter=True,
        )
        post = document.post
        if post is None:
            raise RenderError(f"post {key} has no front matter")
        return RenderedPage(
            title=post.title,
            html=self._templates.post(document),
            published=post.date,
        )

    def _read_metadata(self, key: ContentKey) -> Blogpost:
        return read_blogpost(self._loader.load(key.resource_path))
