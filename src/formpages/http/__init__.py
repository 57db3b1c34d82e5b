"""HTTP transport for formpages.

A small HTTP/1.1 server implemented with AnyIO sockets that hands every
request to one async handler.
"""

from .server import HttpRequest, HttpResponse, HttpServer

__all__ = [
    "HttpRequest",
    "HttpResponse",
    "HttpServer",
]
