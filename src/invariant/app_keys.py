"""Application keys for type-safe app configuration access."""

from concurrent.futures import ThreadPoolExecutor

from aiohttp import web

from invariant.config import Config
from invariant.core.posts import PostLibrary
from invariant.views import PageTemplates

config_key = web.AppKey("config", Config)
library_key = web.AppKey("library", PostLibrary)
templates_key = web.AppKey("templates", PageTemplates)
executor_key = web.AppKey("executor", ThreadPoolExecutor)
