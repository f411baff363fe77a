"""Request handlers.

Routes are matched in registration order. Pipeline work (loading,
rendering, cache lookups) runs on the application's worker threads.
"""

import asyncio
import mimetypes
from collections.abc import Callable
from hashlib import md5
from typing import TypeVar

from aiohttp import web

from invariant.app_keys import config_key, executor_key, library_key, templates_key
from invariant.core.types import ContentKey, validate_segment

T = TypeVar("T")


def create_routes() -> list[web.RouteDef]:
    return [
        web.get("/", get_home),
        web.get("/about", get_about),
        web.get("/contact", get_contact),
        web.get("/images/{name}", get_image),
        web.get("/styles.css", get_stylesheet),
        web.get("/{slug}", get_post),
        web.get("/{path:.*}", get_not_found),
    ]


async def _run(request: web.Request, func: Callable[..., T], *args: object) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(request.app[executor_key], func, *args)


def _html(text: str, *, status: int = 200) -> web.Response:
    return web.Response(text=text, status=status, content_type="text/html")


async def get_home(request: web.Request) -> web.Response:
    library = request.app[library_key]
    page = await _run(request, library.home)
    return _html(page.html)


async def get_about(request: web.Request) -> web.Response:
    return _html(request.app[templates_key].about())


async def get_contact(request: web.Request) -> web.Response:
    return _html(request.app[templates_key].contact())


async def get_image(request: web.Request) -> web.Response:
    name = validate_segment(request.match_info["name"])
    return await _asset(request, f"images/{name}")


async def get_stylesheet(request: web.Request) -> web.Response:
    return await _asset(request, "styles.css")


async def get_post(request: web.Request) -> web.Response:
    key = ContentKey(request.match_info["slug"])
    library = request.app[library_key]
    page = await _run(request, library.page, key)

    etag = _compute_etag(page.html)
    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304, headers={"ETag": etag})

    return web.Response(
        text=page.html,
        content_type="text/html",
        headers={
            "ETag": etag,
            "Cache-Control": "private, max-age=60",
        },
    )


async def get_not_found(request: web.Request) -> web.Response:
    templates = request.app[templates_key]
    status = request.app[config_key].server.not_found_status
    return _html(templates.not_found(request.path), status=status)


async def _asset(request: web.Request, path: str) -> web.Response:
    loader = request.app[library_key].loader
    body = await _run(request, loader.load, path)
    content_type, _ = mimetypes.guess_type(path)
    return web.Response(body=body, content_type=content_type or "application/octet-stream")


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) are enough to tell page versions apart
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
