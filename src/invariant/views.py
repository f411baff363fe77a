"""Page templates.

Wraps content in the site layout using Jinja2 templates bundled with the
package. Rendering is thread safe and may run on worker threads.
"""

from dataclasses import dataclass

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from invariant.config import SiteConfig
from invariant.core.renderer import Blogpost, Document


@dataclass(frozen=True)
class PostSummary:
    """Home page listing entry."""

    slug: str
    post: Blogpost


class PageTemplates:
    """Renders full HTML pages for the site."""

    def __init__(self, site: SiteConfig) -> None:
        self._site = site
        self._env = Environment(
            loader=PackageLoader("invariant", "templates"),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.globals["site"] = site
        self._env.globals["menu"] = [("Home", "/"), ("About", "/about"), ("Contact", "/contact")]

    def home(self, intro: Document, posts: list[PostSummary]) -> str:
        return self._render("home.html", intro=Markup(intro.html), posts=posts)

    def post(self, document: Document) -> str:
        """Render a post page with its outline in the side panel."""
        return self._render(
            "post.html",
            post=document.post,
            toc=document.toc,
            content=Markup(document.html),
        )

    def about(self) -> str:
        return self._render("about.html")

    def contact(self) -> str:
        return self._render("contact.html")

    def not_found(self, path: str) -> str:
        return self._render("not_found.html", path=path)

    def error(self, heading: str, message: str | None = None, path: str | None = None) -> str:
        """Render an error page.

        Args:
            heading: Main heading of the page
            message: Optional explanation below the heading
            path: Optional requested URL path to show
        """
        return self._render("error.html", heading=heading, message=message, path=path)

    def _render(self, name: str, **context: object) -> str:
        return self._env.get_template(name).render(**context)
