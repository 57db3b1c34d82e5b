"""Request handler: fixed pages plus the `/submit` form endpoint.

Every request ends in exactly one `HttpResponse`. Errors never escape
`handle_request`; they are mapped to a status at the point they happen, and
anything unexpected becomes a generic 500.
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

from .http import HttpRequest, HttpResponse
from .pages import (
    BAD_REQUEST_BODY,
    FORM_PAGE,
    METHOD_NOT_ALLOWED_BODY,
    PAYLOAD_TOO_LARGE_BODY,
    SERVER_ERROR_BODY,
    create_page,
    sanitize,
    submitted_page,
)


logger = logging.getLogger(__name__)

MAX_BODY_SIZE = 1 * 1024 * 1024  # 1 MiB

_PAGES: dict[str, tuple[str, str]] = {
    "/": ("Home", "Welcome to the Home Page"),
    "/about": ("About", "Learn more about us"),
    "/contact": ("Contact", "Get in touch"),
}


class PayloadTooLarge(Exception):
    """Raised by `BodyAccumulator.feed` once the running total passes the limit."""


@dataclass(slots=True)
class BodyAccumulator:
    """Running byte count and decoded text for one request body."""

    limit: int = MAX_BODY_SIZE
    received: int = field(default=0, init=False)
    _parts: list[str] = field(default_factory=list, init=False, repr=False)
    _decoder: Any = field(
        default_factory=lambda: codecs.getincrementaldecoder("utf-8")(errors="replace"),
        init=False,
        repr=False,
    )

    def feed(self, chunk: bytes) -> None:
        self.received += len(chunk)
        if self.received > self.limit:
            raise PayloadTooLarge(self.received)
        self._parts.append(self._decoder.decode(chunk))

    def text(self) -> str:
        return "".join(self._parts) + self._decoder.decode(b"", final=True)


def not_found() -> HttpResponse:
    return HttpResponse.html(create_page("404", "Page Not Found"), status=404)


async def handle_request(request: HttpRequest) -> HttpResponse:
    """Route `request` and build its response. Never raises."""
    try:
        return await _dispatch(request)
    except Exception:
        logger.exception("error handling %s %s", request.method, request.path)
        return HttpResponse.html(SERVER_ERROR_BODY, status=500)


async def _dispatch(request: HttpRequest) -> HttpResponse:
    match request.method, request.path:
        case "GET", "/submit":
            return HttpResponse.html(FORM_PAGE)
        case "GET", path if path in _PAGES:
            title, description = _PAGES[path]
            return HttpResponse.html(create_page(title, description))
        case "GET", _:
            return not_found()
        case "POST", "/submit":
            return await handle_submit(request)
        case "POST", _:
            return not_found()
        case _:
            return HttpResponse.html(METHOD_NOT_ALLOWED_BODY, status=405)


async def handle_submit(request: HttpRequest, *, limit: int = MAX_BODY_SIZE) -> HttpResponse:
    """
    Read the form body chunk by chunk and confirm the submission.

    Stops reading as soon as more than `limit` bytes have arrived and answers
    413 with `close_connection` set, so the rest of the body is never read.
    """
    body = BodyAccumulator(limit=limit)
    try:
        async for chunk in request.body:
            body.feed(chunk)
    except PayloadTooLarge:
        logger.warning("request body over %d bytes, closing connection", limit)
        return HttpResponse.html(PAYLOAD_TOO_LARGE_BODY, status=413, close_connection=True)

    try:
        fields = parse_qs(body.text(), keep_blank_values=True)
        name = sanitize(_first(fields, "name"))
        email = sanitize(_first(fields, "email"))
    except Exception:
        logger.exception("could not parse form body")
        return HttpResponse.html(SERVER_ERROR_BODY, status=500)

    if not name or not email:
        return HttpResponse.html(BAD_REQUEST_BODY, status=400)
    return HttpResponse.html(submitted_page(name, email))


def _first(fields: dict[str, list[str]], key: str) -> str:
    values = fields.get(key)
    return values[0] if values else ""
