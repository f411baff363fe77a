"""Shared test fixtures."""

import threading
import time
from collections import Counter
from pathlib import Path

import pytest
from invariant.config import Config, ContentConfig, LoggingConfig, ServerConfig, SiteConfig
from invariant.core.resources import DirectoryLoader

POST_TEMPLATE = """title {title}
date {date}
description {description}
##
# {title}

{body}
"""


def write_post(
    content_dir: Path,
    slug: str,
    *,
    title: str,
    date: str,
    body: str = "Some content.",
    description: str = "A post.",
) -> Path:
    """Write a post with front matter into a content directory."""
    path = content_dir / "posts" / f"{slug}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        POST_TEMPLATE.format(title=title, date=date, description=description, body=body),
        encoding="utf-8",
    )
    return path


class CountingLoader:
    """DirectoryLoader wrapper recording every load, optionally slowed down."""

    def __init__(self, root: Path, *, delay: float = 0.0) -> None:
        self._inner = DirectoryLoader(root)
        self._delay = delay
        self._lock = threading.Lock()
        self.loads: Counter[str] = Counter()

    def load(self, path: str) -> bytes:
        with self._lock:
            self.loads[path] += 1
        if self._delay:
            time.sleep(self._delay)
        return self._inner.load(path)

    def names(self, directory: str, suffix: str) -> list[str]:
        return self._inner.names(directory, suffix)


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Create a content directory with a home page, one post and assets."""
    content = tmp_path / "content"
    (content / "images").mkdir(parents=True)
    (content / "home.md").write_text("Welcome to the **test** blog.\n", encoding="utf-8")
    (content / "styles.css").write_text("body { margin: 0; }\n", encoding="utf-8")
    (content / "images" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\nfake")
    write_post(
        content,
        "error-handling",
        title="Effective Error Handling",
        date="2024-07-16",
        body="## What is an error?\n\nAn error is not a bug.",
    )
    return content


@pytest.fixture
def test_config(content_dir: Path) -> Config:
    """Create a test configuration serving content_dir."""
    return Config(
        server=ServerConfig(workers=4),
        content=ContentConfig(root=content_dir),
        site=SiteConfig(),
        logging=LoggingConfig(),
    )
