"""aiohttp server for Invariant.

Application factory and route registration.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from aiohttp import web

from invariant.app_keys import config_key, executor_key, library_key, templates_key
from invariant.config import Config
from invariant.core.posts import PostLibrary
from invariant.core.resources import DirectoryLoader, ResourceLoader, get_content_dir
from invariant.recovery import ErrorContext, create_content_mend, create_recovery_middleware
from invariant.routes import create_routes
from invariant.views import PageTemplates

logger = logging.getLogger(__name__)


def create_library(config: Config, loader: ResourceLoader | None = None) -> PostLibrary:
    """Create the post library for a configuration.

    Args:
        config: Application configuration
        loader: Resource loader; defaults to the configured content root,
                or the bundled content when none is configured

    Returns:
        PostLibrary with empty caches
    """
    if loader is None:
        root = config.content.root if config.content.root is not None else get_content_dir()
        loader = DirectoryLoader(root)
    templates = PageTemplates(config.site)
    return PostLibrary(loader, templates, posts=config.content.posts)


def create_app(
    config: Config,
    *,
    loader: ResourceLoader | None = None,
    errors: ErrorContext | None = None,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        loader: Optional resource loader overriding the configured content root
        errors: Error context receiving recovered and unexpected errors

    Returns:
        Configured aiohttp application

    Raises:
        TypeError: If a content error kind has no error page
    """
    library = create_library(config, loader)
    templates = library.templates
    mend = create_content_mend(templates)

    app = web.Application(
        middlewares=[create_recovery_middleware(mend, errors or ErrorContext())],
    )
    app[config_key] = config
    app[library_key] = library
    app[templates_key] = templates
    app[executor_key] = ThreadPoolExecutor(
        max_workers=config.server.workers,
        thread_name_prefix="invariant-render",
    )

    app.router.add_routes(create_routes())
    app.on_cleanup.append(_shutdown_executor)

    return app


async def _shutdown_executor(app: web.Application) -> None:
    """Stop worker threads on application cleanup."""
    app[executor_key].shutdown(wait=True)


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    logger.info(f"Listening on {config.server.host}:{config.server.port}")
    web.run_app(app, host=config.server.host, port=config.server.port, print=None)
