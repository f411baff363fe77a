"""Markdown document rendering.

A document is Markdown text optionally preceded by front matter. The front
matter is a block of `key value` lines, closed by a line consisting of `##`:

    title Effective Error Handling
    date 2024-07-16
    description The first in a series
      about error handling.
    ##
    # Effective Error Handling
    ...

Rendering is pure: the same text always yields an equal Document.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime

import mistune
from mistune.toc import add_toc_hook

from invariant.errors import RenderError

SEPARATOR = "##"

KEY_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")

DATE_FORMATS = ("%Y-%m-%d", "%d %B %Y", "%d %b %Y", "%d-%b-%Y")

MARKDOWN_PLUGINS = ["table", "strikethrough", "footnotes", "url"]


@dataclass(frozen=True)
class TocEntry:
    """Table of contents entry for a heading."""

    level: int
    title: str
    id: str


@dataclass(frozen=True)
class Blogpost:
    """Metadata of a post, parsed from its front matter."""

    title: str
    date: date
    description: str | None = None
    author: str | None = None

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> "Blogpost":
        """Build metadata from front matter fields.

        Args:
            fields: Parsed front matter

        Returns:
            Blogpost instance

        Raises:
            RenderError: If title or date is missing, or the date is malformed
        """
        title = fields.get("title")
        if not title:
            raise RenderError("front matter has no title")
        raw_date = fields.get("date")
        if not raw_date:
            raise RenderError("front matter has no date")
        return cls(
            title=title,
            date=parse_date(raw_date),
            description=fields.get("description"),
            author=fields.get("author"),
        )


@dataclass(frozen=True)
class RenderedMarkdown:
    """HTML fragment and outline of a Markdown body."""

    html: str
    toc: tuple[TocEntry, ...]


@dataclass(frozen=True)
class Document:
    """A parsed and rendered document."""

    html: str
    toc: tuple[TocEntry, ...]
    fields: dict[str, str] = field(default_factory=dict)
    post: Blogpost | None = None


def parse_date(value: str) -> date:
    """Parse a publish date.

    Raises:
        RenderError: If the value matches none of the accepted formats
    """
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise RenderError(f"'{value}' is not a valid date")


def split_document(text: str) -> tuple[list[str] | None, str]:
    """Split a document into front matter lines and body.

    Args:
        text: Document text

    Returns:
        Front matter lines (None when there is no separator) and body text
    """
    lines = text.splitlines()
    for index, line in enumerate(lines):
        if line.rstrip() == SEPARATOR:
            return lines[:index], "\n".join(lines[index + 1 :])
    return None, text


def parse_front_matter(lines: list[str]) -> dict[str, str]:
    """Parse `key value` front matter lines.

    Lines starting with whitespace continue the value of the previous key.

    Raises:
        RenderError: On a malformed line, invalid or duplicate key
    """
    fields: dict[str, str] = {}
    current: str | None = None
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        if line[0].isspace():
            if current is None:
                raise RenderError(f"front matter line {number} continues no field")
            fields[current] = f"{fields[current]} {line.strip()}"
            continue

        key, _, value = line.partition(" ")
        value = value.strip()
        if not KEY_PATTERN.match(key):
            raise RenderError(f"front matter line {number} has invalid key '{key}'")
        if not value:
            raise RenderError(f"front matter field '{key}' has no value")
        if key in fields:
            raise RenderError(f"front matter field '{key}' is repeated")
        fields[key] = value
        current = key
    return fields


def slugify(text: str) -> str:
    """Turn heading text into an anchor id."""
    slug = re.sub(r"<[^>]+>", "", text).lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    return re.sub(r"[\s_-]+", "-", slug).strip("-")


def render_markdown(body: str) -> RenderedMarkdown:
    """Render a Markdown body to HTML with an outline of its headings.

    Args:
        body: Markdown text

    Returns:
        RenderedMarkdown with HTML and ToC entries for levels 1 to 3
    """
    seen: dict[str, int] = {}

    def heading_id(token: dict, index: int) -> str:
        base = slugify(token.get("text", "")) or f"section-{index + 1}"
        count = seen.get(base, 0)
        seen[base] = count + 1
        return base if count == 0 else f"{base}-{count}"

    markdown = mistune.create_markdown(plugins=MARKDOWN_PLUGINS)
    add_toc_hook(markdown, min_level=1, max_level=3, heading_id=heading_id)
    html, state = markdown.parse(body)

    toc = tuple(
        TocEntry(level=level, title=title, id=anchor)
        for level, anchor, title in state.env.get("toc_items", [])
    )
    return RenderedMarkdown(html=str(html), toc=toc)


def render_document(source: bytes | str, *, require_front_matter: bool = False) -> Document:
    """Render a document with optional front matter.

    Args:
        source: Raw document, bytes must be UTF-8
        require_front_matter: Fail unless the document has front matter
                              describing a valid Blogpost

    Returns:
        Document with fields, post metadata (when present), HTML and ToC

    Raises:
        RenderError: If the document cannot be decoded or parsed
    """
    header, body = split_document(_decode(source))
    if header is None:
        if require_front_matter:
            raise RenderError(f"document has no '{SEPARATOR}' line after its front matter")
        fields: dict[str, str] = {}
    else:
        fields = parse_front_matter(header)
    post = Blogpost.from_fields(fields) if require_front_matter else None

    rendered = render_markdown(body)
    return Document(html=rendered.html, toc=rendered.toc, fields=fields, post=post)


def read_blogpost(source: bytes | str) -> Blogpost:
    """Parse only the front matter of a post.

    Raises:
        RenderError: If the front matter is missing or malformed
    """
    header, _ = split_document(_decode(source))
    if header is None:
        raise RenderError(f"document has no '{SEPARATOR}' line after its front matter")
    return Blogpost.from_fields(parse_front_matter(header))


def _decode(source: bytes | str) -> str:
    if isinstance(source, str):
        return source
    try:
        return source.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RenderError(f"document is not valid UTF-8 at byte {exc.start}") from None
