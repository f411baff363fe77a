"""Core type definitions."""

import unicodedata
from dataclasses import dataclass

from invariant.errors import InvalidPath

MAX_SEGMENT_LENGTH = 255

POSTS_DIR = "posts"
POST_SUFFIX = ".md"


def validate_segment(segment: str) -> str:
    """Check that a URL path segment is safe to use as a resource name.

    Args:
        segment: Decoded path segment (e.g., "error-handling")

    Returns:
        The segment unchanged

    Raises:
        InvalidPath: If the segment is empty, too long, contains separators
                     or control characters, or starts with a dot
    """
    if not segment:
        raise InvalidPath(segment, "it is empty")
    if len(segment) > MAX_SEGMENT_LENGTH:
        raise InvalidPath(segment, f"it is longer than {MAX_SEGMENT_LENGTH} characters")
    if "/" in segment or "\\" in segment:
        raise InvalidPath(segment, "it contains a path separator")
    if any(unicodedata.category(char) == "Cc" for char in segment):
        raise InvalidPath(segment, "it contains a control character")
    if segment.startswith("."):
        raise InvalidPath(segment, "it starts with '.'")
    return segment


@dataclass(frozen=True)
class ContentKey:
    """Validated identifier of a post, derived from a URL path segment."""

    slug: str

    def __post_init__(self) -> None:
        validate_segment(self.slug)

    @property
    def resource_path(self) -> str:
        """Logical resource path of the post source (e.g., "posts/guide.md")."""
        return f"{POSTS_DIR}/{self.slug}{POST_SUFFIX}"

    def __str__(self) -> str:
        return self.slug
