"""A tiny static-page and form-submission HTTP server on AnyIO."""

from .app import MAX_BODY_SIZE, BodyAccumulator, PayloadTooLarge, handle_request, handle_submit
from .config import ServerConfig
from .http import HttpRequest, HttpResponse, HttpServer
from .pages import create_page, sanitize

__all__ = [
    # Handler
    "handle_request",
    "handle_submit",
    "BodyAccumulator",
    "PayloadTooLarge",
    "MAX_BODY_SIZE",
    # Pages
    "create_page",
    "sanitize",
    # Transport
    "HttpRequest",
    "HttpResponse",
    "HttpServer",
    # Configuration
    "ServerConfig",
]
