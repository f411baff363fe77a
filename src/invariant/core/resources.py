"""Resource loading for blog content.

Locates posts, pages and assets by logical path (e.g., "posts/guide.md")
relative to a content root, which defaults to the content bundled into the
invariant package.
"""

import errno
from importlib.resources import files
from pathlib import Path
from typing import Protocol

from invariant.errors import InvalidPath, ResourceNotFound


class ResourceLoader(Protocol):
    """Source of raw content bytes addressed by logical path."""

    def load(self, path: str) -> bytes: ...

    def names(self, directory: str, suffix: str) -> list[str]: ...


def get_content_dir() -> Path:
    """Return path to bundled blog content.

    Returns:
        Path to the content directory shipped with the package.

    Raises:
        FileNotFoundError: If the content directory is missing from the install.
    """
    content = files("invariant").joinpath("content")
    if not content.is_dir():
        msg = "Bundled content not found. Reinstall the invariant package."
        raise FileNotFoundError(msg)
    return Path(str(content))


class DirectoryLoader:
    """Loads resources from a directory on disk.

    Logical paths are resolved against the root; anything that resolves
    outside of it is rejected.
    """

    def __init__(self, root: Path) -> None:
        """Initialize loader.

        Args:
            root: Directory containing home.md, posts/, images/ and styles.css
        """
        self._root = root.resolve()

    @property
    def root(self) -> Path:
        """Content root directory."""
        return self._root

    def load(self, path: str) -> bytes:
        """Read a resource.

        Args:
            path: Logical path relative to the root (e.g., "posts/guide.md")

        Returns:
            Raw resource bytes

        Raises:
            ResourceNotFound: If no file exists at the path
            InvalidPath: If the path escapes the content root or its name is too long
        """
        target = self._resolve(path)
        try:
            return target.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise ResourceNotFound(path) from None
        except OSError as exc:
            if exc.errno == errno.ENAMETOOLONG:
                raise InvalidPath(path, "it is too long") from None
            raise

    def names(self, directory: str, suffix: str) -> list[str]:
        """List resource names in a directory, without the suffix.

        Args:
            directory: Logical directory path (e.g., "posts")
            suffix: File suffix to match (e.g., ".md")

        Returns:
            Sorted names of matching files, empty if the directory is missing
        """
        target = self._resolve(directory)
        if not target.is_dir():
            return []
        return sorted(
            child.name.removesuffix(suffix)
            for child in target.iterdir()
            if child.is_file() and child.name.endswith(suffix) and not child.name.startswith(".")
        )

    def _resolve(self, path: str) -> Path:
        candidate = (self._root / path).resolve()
        if not candidate.is_relative_to(self._root):
            raise InvalidPath(path, "it escapes the content root")
        return candidate
