"""Text handling and transport utilities for the LLM translator.

This package provides the blacklist filter, the render pipeline stage wrapping host draw
routines, and asynchronous HTTP communication.
"""

from handlers.async_comm import AsyncCommError, AsyncCommInvalidContentTypeError, AsyncCommTimeoutError, AsyncHttp
from handlers.blacklist_filter import BlacklistFilter
from handlers.render_pipeline import RenderCategory, should_translate, translating_draw

__all__: list[str] = [
    "AsyncCommError",
    "AsyncCommInvalidContentTypeError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
    "BlacklistFilter",
    "RenderCategory",
    "should_translate",
    "translating_draw",
]
