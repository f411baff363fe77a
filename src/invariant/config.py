"""Configuration management for Invariant.

Supports TOML configuration format with auto-discovery.
"""

import logging
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "invariant.toml"

NOT_FOUND_STATUSES = (200, 404)


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080
    workers: int = 8
    not_found_status: int = 404


@dataclass
class ContentConfig:
    """Content configuration.

    A root of None means the content bundled with the package. Posts of None
    means every posts/*.md under the root.
    """

    root: Path | None = None
    posts: list[str] | None = None


@dataclass
class SiteConfig:
    """Site presentation configuration."""

    title: str = "Invariant.blog"
    author: str = "Jon Pretty"
    email: str | None = "jon.pretty@propensive.com"
    about: str = "Invariant.blog is a blog about invariance."
    copyright: str = "2024 Jon Pretty & Propensive"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    content: ContentConfig = field(default_factory=ContentConfig)
    site: SiteConfig = field(default_factory=SiteConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for invariant.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise ValueError(f"Invalid TOML in {path}: {exc}") from exc

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            content=cls._parse_content(data.get("content"), config_dir),
            site=cls._parse_site(data.get("site")),
            logging=cls._parse_logging(data.get("logging")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        workers = data.get("workers", 8)
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
            raise ValueError("server.workers must be a positive integer")

        not_found_status = data.get("not_found_status", 404)
        if (
            not isinstance(not_found_status, int)
            or isinstance(not_found_status, bool)
            or not_found_status not in NOT_FOUND_STATUSES
        ):
            raise ValueError("server.not_found_status must be 200 or 404")

        return ServerConfig(
            host=host,
            port=port,
            workers=workers,
            not_found_status=not_found_status,
        )

    @classmethod
    def _parse_content(cls, data: object, config_dir: Path) -> ContentConfig:
        """Parse content configuration section.

        Args:
            data: Raw content section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            ContentConfig instance
        """
        if data is None:
            return ContentConfig()

        if not isinstance(data, dict):
            raise ValueError("content section must be a dictionary")

        root = data.get("root")
        if root is not None and not isinstance(root, str):
            raise ValueError("content.root must be a string")

        posts_raw = data.get("posts")
        posts: list[str] | None = None
        if posts_raw is not None:
            if not isinstance(posts_raw, list):
                raise ValueError("content.posts must be a list")
            posts = []
            for item in posts_raw:
                if not isinstance(item, str):
                    raise ValueError("content.posts items must be strings")
                posts.append(item)

        return ContentConfig(
            root=config_dir / root if root is not None else None,
            posts=posts,
        )

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        if data is None:
            return SiteConfig()

        if not isinstance(data, dict):
            raise ValueError("site section must be a dictionary")

        defaults = SiteConfig()
        values: dict[str, str | None] = {}
        for key in ("title", "author", "email", "about", "copyright"):
            value = data.get(key, getattr(defaults, key))
            if value is not None and not isinstance(value, str):
                raise ValueError(f"site.{key} must be a string")
            values[key] = value

        return replace(defaults, **values)

    @classmethod
    def _parse_logging(cls, data: object) -> LoggingConfig:
        if data is None:
            return LoggingConfig()

        if not isinstance(data, dict):
            raise ValueError("logging section must be a dictionary")

        level = data.get("level", "INFO")
        if not isinstance(level, str) or level.upper() not in logging.getLevelNamesMapping():
            raise ValueError("logging.level must be a logging level name")

        return LoggingConfig(level=level.upper())

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        content_root: Path | None = None,
        log_level: str | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            content_root: Override content.root
            log_level: Override logging.level

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        content = self.content
        if content_root is not None:
            content = replace(self.content, root=content_root)

        logging_config = self.logging
        if log_level is not None:
            logging_config = replace(self.logging, level=log_level.upper())

        return replace(self, server=server, content=content, logging=logging_config)
