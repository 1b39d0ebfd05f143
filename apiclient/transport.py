import asyncio
import ssl
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

import h11

from ._version import __version__
from .errors import RequestError, ResponseError
from .formdata import FormData
from .logging import get_logger
from .request import Request
from .response import Response

READ_BUFFER_SIZE = 65536

# Browser fetch flags; there is no CORS or cookie policy to apply outside a browser.
_IGNORED_OPTIONS = ("mode", "credentials")


@lru_cache(maxsize=2)
def _get_ssl_context(verify: bool = True) -> ssl.SSLContext:
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def _fold_headers(headers: Mapping[str, Any]) -> Dict[str, str]:
    """One entry per case-insensitive name; the last value wins and keeps its spelling."""
    folded: Dict[str, Tuple[str, str]] = {}
    for name, value in headers.items():
        folded.pop(str(name).lower(), None)
        folded[str(name).lower()] = (str(name), str(value))
    return dict(folded.values())


class Transport(Protocol):
    """Anything able to perform one HTTP request for a URL and a set of options."""

    async def send(self, url: str, options: Mapping[str, Any]) -> Response:
        ...


class H11Transport:
    """
    HTTP/1.1 transport built on asyncio streams and h11.

    Every call opens its own connection, reads the full response and closes
    the connection again. Understood options are ``method``, ``headers`` and
    ``body``; ``mode`` and ``credentials`` are accepted and ignored.
    """

    def __init__(
        self,
        verify: bool = True,
        ssl_context: Optional[ssl.SSLContext] = None,
        user_agent: Optional[str] = None,
        logger=None,
    ) -> None:
        self.verify = verify
        self.ssl_context = ssl_context
        self.user_agent = user_agent or f"apiclient/{__version__}"
        self.logger = logger or get_logger()

    async def send(self, url: str, options: Mapping[str, Any]) -> Response:
        request = await self.build_request(url, options)
        conn = _Connection(request, self._ssl_for(request))
        try:
            return await conn.exchange()
        finally:
            await conn.close()

    async def build_request(self, url: str, options: Mapping[str, Any]) -> Request:
        ignored = [name for name in _IGNORED_OPTIONS if name in options]
        if ignored:
            self.logger.debug("Ignoring browser-only options: %s", ", ".join(ignored))

        headers = _fold_headers(options.get("headers") or {})
        body = options.get("body")
        if isinstance(body, FormData):
            headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}
            headers["Content-Type"] = body.content_type
            content: Optional[bytes] = await body.read()
        elif isinstance(body, str):
            content = body.encode("utf-8")
        elif isinstance(body, (bytes, bytearray, memoryview)):
            content = bytes(body)
        elif body is None:
            content = None
        else:
            raise RequestError(f"Unsupported body type: {type(body).__name__}")

        if "user-agent" not in {k.lower() for k in headers}:
            headers["User-Agent"] = self.user_agent
        return Request(
            method=str(options.get("method") or "GET"),
            url=url,
            headers=headers,
            content=content,
        )

    def _ssl_for(self, request: Request) -> Optional[ssl.SSLContext]:
        if request.scheme != "https":
            return None
        return self.ssl_context or _get_ssl_context(self.verify)

    async def close(self) -> None:
        return None


class _Connection:
    """Single request/response exchange over one socket."""

    def __init__(self, request: Request, ssl_context: Optional[ssl.SSLContext]) -> None:
        self.request = request
        self.ssl_context = ssl_context
        self.h11_conn = h11.Connection(h11.CLIENT)
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

    async def exchange(self) -> Response:
        try:
            self.reader, self.writer = await asyncio.open_connection(
                self.request.host,
                self.request.port,
                ssl=self.ssl_context,
            )
            await self._send_event(
                h11.Request(
                    method=self.request.method.encode("ascii"),
                    target=self.request.target.encode("ascii"),
                    headers=self.request.h11_headers(),
                )
            )
            if self.request.content:
                await self._send_event(h11.Data(data=self.request.content))
            await self._send_event(h11.EndOfMessage())
        except (OSError, UnicodeEncodeError, h11.LocalProtocolError) as exc:
            raise RequestError(f"Failed to send request: {exc}") from exc

        try:
            return await self._read_response()
        except h11.RemoteProtocolError as exc:
            raise ResponseError(f"Malformed response: {exc}") from exc
        except OSError as exc:
            raise ResponseError(f"Failed to read response: {exc}") from exc

    async def _send_event(self, event: h11.Event) -> None:
        data = self.h11_conn.send(event)
        if data:
            self.writer.write(data)
            await self.writer.drain()

    async def _read_event(self) -> h11.Event:
        while True:
            event = self.h11_conn.next_event()
            if event is h11.NEED_DATA:
                chunk = await self.reader.read(READ_BUFFER_SIZE)
                self.h11_conn.receive_data(chunk)
                continue
            return event

    async def _read_response(self) -> Response:
        status_code = 0
        reason = b""
        headers: List[Tuple[bytes, bytes]] = []
        body_chunks: List[bytes] = []

        while True:
            event = await self._read_event()
            if isinstance(event, h11.Response):
                status_code = event.status_code
                reason = event.reason
                headers.extend(event.headers)
                break
            if isinstance(event, h11.ConnectionClosed):
                raise ResponseError("Connection closed before response")

        while True:
            event = await self._read_event()
            if isinstance(event, h11.Data):
                body_chunks.append(bytes(event.data))
            elif isinstance(event, (h11.EndOfMessage, h11.ConnectionClosed)):
                break

        return Response(
            status_code=status_code,
            headers={k.decode("latin-1"): v.decode("latin-1") for k, v in headers},
            content=b"".join(body_chunks),
            reason=reason.decode("latin-1") if isinstance(reason, (bytes, bytearray)) else str(reason),
            url=self.request.url,
        )

    async def close(self) -> None:
        if self.writer is None:
            return
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except OSError:
            pass


__all__ = ["H11Transport", "Transport"]
