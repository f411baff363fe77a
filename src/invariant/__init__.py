"""Invariant - a Markdown blog server."""

__version__ = "0.1.0"
