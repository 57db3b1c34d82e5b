"""Tiny HTTP/1.1 server built on AnyIO.

Turns each incoming connection into an `HttpRequest` and hands it to a single
async handler.

Features:
- HTTP/1.1 request line + headers parsing
- Optional Content-Length body streamed to the handler in chunks (no chunked encoding)
- One request per connection (Connection: close)
- Fully AnyIO, every connection runs in the listener's TaskGroup
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping
from urllib.parse import urlsplit

import anyio
from anyio.abc import SocketAttribute, SocketStream, TaskStatus
from anyio.streams.buffered import BufferedByteReceiveStream

from ..pages import MALFORMED_REQUEST_BODY, SERVER_ERROR_BODY


logger = logging.getLogger(__name__)

HeaderMap = dict[str, str]
Handler = Callable[["HttpRequest"], Awaitable["HttpResponse"]]

CHUNK_SIZE = 4096


async def _no_body() -> AsyncIterator[bytes]:
    return
    yield


@dataclass(frozen=True, slots=True)
class HttpRequest:
    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: HeaderMap = field(default_factory=dict)
    body: AsyncIterator[bytes] = field(default_factory=_no_body)


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int = 200
    headers: Mapping[str, str] | None = None
    body: bytes = b""
    # Drop the connection after writing, without reading any more input.
    close_connection: bool = False

    @staticmethod
    def html(
        markup: str,
        *,
        status: int = 200,
        close_connection: bool = False,
    ) -> "HttpResponse":
        """Encode `markup` as UTF-8 with the fixed HTML header set."""
        body = markup.encode("utf-8")
        headers = {
            "content-type": "text/html; charset=utf-8",
            "content-length": str(len(body)),
            "x-content-type-options": "nosniff",
        }
        return HttpResponse(status=status, headers=headers, body=body, close_connection=close_connection)


_STATUS_TEXT: dict[int, str] = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Payload Too Large",
    500: "Internal Server Error",
}


def _status_line(status: int) -> str:
    text = _STATUS_TEXT.get(status, "OK")
    return f"HTTP/1.1 {status} {text}\r\n"


def _normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    return {k.lower(): v for k, v in headers.items()}


def _parse_headers(block: bytes) -> tuple[str, str, str, HeaderMap]:
    # block contains request line + headers, without the final \r\n\r\n
    head = block.decode("iso-8859-1")

    lines = head.split("\r\n")
    if not lines or not lines[0]:
        raise ValueError("missing request line")

    parts = lines[0].split(" ")
    if len(parts) != 3:
        raise ValueError("invalid request line")
    method, target, version = parts
    if not version.startswith("HTTP/"):
        raise ValueError("invalid request line")

    headers: HeaderMap = {}
    for line in lines[1:]:
        if line == "":
            break
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        headers[k.strip().lower()] = v.strip()
    return method, urlsplit(target).path, version, headers


def _content_length(headers: HeaderMap) -> int:
    raw = headers.get("content-length", "0") or "0"
    if not raw.isdigit():
        raise ValueError("invalid content-length")
    return int(raw)


async def _iter_body(reader: BufferedByteReceiveStream, length: int) -> AsyncIterator[bytes]:
    """Yield at most `length` body bytes, one receive at a time."""
    remaining = length
    while remaining > 0:
        try:
            chunk = await reader.receive(min(CHUNK_SIZE, remaining))
        except anyio.EndOfStream:
            return
        remaining -= len(chunk)
        yield chunk


async def _drain(body: AsyncIterator[bytes], limit: int) -> None:
    """Discard up to `limit` unread body bytes before the connection closes."""
    drained = 0
    async for chunk in body:
        drained += len(chunk)
        if drained > limit:
            return


async def _write_response(stream: SocketStream, response: HttpResponse) -> None:
    headers = _normalize_headers(response.headers)
    body = response.body or b""

    # Default headers
    headers.setdefault("content-length", str(len(body)))
    headers.setdefault("connection", "close")

    start = _status_line(response.status).encode("ascii")
    head = b"".join(f"{k}: {v}\r\n".encode("ascii") for k, v in headers.items())

    await stream.send(start + head + b"\r\n" + body)


class HttpServer:
    """HTTP server.

    - Opens a TCP listener in serve() and reports the bound port to the caller
    - Accepts connections and handles each one in its own task
    - Passes every parsed request to `handler` and writes back its response
    """

    def __init__(
        self,
        handler: Handler,
        *,
        host: str = "127.0.0.1",
        port: int = 0,
        max_header_bytes: int = 64 * 1024,
        max_drain_bytes: int = 1 * 1024 * 1024,
    ):
        self._handler = handler
        self._host = host
        self._port = port
        self._max_header_bytes = max_header_bytes
        self._max_drain_bytes = max_drain_bytes

    async def serve(self, *, task_status: TaskStatus[int] = anyio.TASK_STATUS_IGNORED) -> None:
        """
        Serve incoming connections until cancelled.

        Use with `TaskGroup.start()` to learn the bound port, which matters
        when listening on port 0.
        """
        listener: Any = await anyio.create_tcp_listener(local_host=self._host, local_port=self._port)
        async with listener:
            port = listener.extra(SocketAttribute.local_port)
            task_status.started(port)
            async with anyio.create_task_group() as tg:
                await listener.serve(self._handle_client, task_group=tg)

    async def _handle_client(self, stream: SocketStream) -> None:
        async with stream:
            try:
                await self._serve_request(stream)
            except (anyio.BrokenResourceError, anyio.ClosedResourceError):
                logger.debug("client went away before the response was written")
            except Exception:
                logger.exception("unhandled error while serving connection")

    async def _serve_request(self, stream: SocketStream) -> None:
        reader = BufferedByteReceiveStream(stream)
        try:
            header_block = await reader.receive_until(b"\r\n\r\n", self._max_header_bytes)
        except anyio.IncompleteRead:
            return
        except anyio.DelimiterNotFound:
            await _write_response(stream, HttpResponse.html(MALFORMED_REQUEST_BODY, status=400))
            return

        try:
            method, path, version, headers = _parse_headers(header_block)
            content_length = _content_length(headers)
        except ValueError as e:
            logger.info("rejecting malformed request: %s", e)
            await _write_response(stream, HttpResponse.html(MALFORMED_REQUEST_BODY, status=400))
            return

        body = _iter_body(reader, content_length)
        req = HttpRequest(method=method, path=path, version=version, headers=headers, body=body)
        try:
            try:
                resp = await self._handler(req)
            except Exception:
                logger.exception("handler failed for %s %s", method, path)
                resp = HttpResponse.html(SERVER_ERROR_BODY, status=500)

            logger.info("%s %s -> %d", method, path, resp.status)
            await _write_response(stream, resp)
            if not resp.close_connection:
                await _drain(body, self._max_drain_bytes)
        finally:
            await body.aclose()
