import gzip
import json
import re
import zlib
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Mapping, Optional, TypeVar

from .errors import ResponseError

T = TypeVar("T")

_CHARSET_REGEX = re.compile(r'charset=([^;,\s]+)', re.IGNORECASE)
_DEFAULT_BLOB_TYPE = "application/octet-stream"


def _decode_gzip(payload: bytes) -> bytes:
    return gzip.decompress(payload)


def _decode_deflate(payload: bytes) -> bytes:
    """Decode deflate payload with automatic zlib/raw fallback."""
    try:
        return zlib.decompress(payload)
    except zlib.error:
        return zlib.decompress(payload, -zlib.MAX_WBITS)


_DECOMPRESS_HANDLERS: Dict[str, Callable[[bytes], bytes]] = {
    "gzip": _decode_gzip,
    "x-gzip": _decode_gzip,
    "deflate": _decode_deflate,
}


@dataclass(frozen=True)
class Blob:
    """Binary response body together with its media type."""

    content: bytes
    content_type: str = _DEFAULT_BLOB_TYPE

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class Response:
    """
    Raw response returned by a transport.
    """
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None
    reason: Optional[str] = None
    url: Optional[str] = None

    _decoded_cache: Optional[bytes] = field(default=None, init=False, repr=False)
    _header_cache: Optional[Dict[str, str]] = field(default=None, init=False, repr=False)

    @classmethod
    def empty(cls) -> "Response":
        """Placeholder for calls whose transport never produced a response."""
        return cls(status_code=0, headers={}, content=None, reason="")

    def _get_header(self, name: str, default: str = "") -> str:
        if self._header_cache is None:
            self._header_cache = {k.lower(): v for k, v in self.headers.items()}
        return self._header_cache.get(name.lower(), default)

    @property
    def status(self) -> int:
        return self.status_code

    @property
    def status_text(self) -> str:
        return self.reason or ""

    @property
    def ok(self) -> bool:
        """True if status code is in the 200-299 range."""
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> Optional[str]:
        return self._get_header("Content-Type") or None

    @property
    def encoding(self) -> str:
        """Charset from the Content-Type header, utf-8 when absent."""
        match = _CHARSET_REGEX.search(self._get_header("Content-Type", ""))
        if match:
            charset_value = match.group(1).strip('"\'').strip()
            if charset_value:
                return charset_value
        return "utf-8"

    def _decoded_content(self) -> Optional[bytes]:
        if self.content is None:
            return None
        if self._decoded_cache is not None:
            return self._decoded_cache

        encoding = self._get_header("Content-Encoding", "").lower()
        data = self.content
        for enc in (e.strip() for e in encoding.split(",")):
            handler = _DECOMPRESS_HANDLERS.get(enc)
            if handler is None:
                continue
            try:
                data = handler(data)
            except (OSError, EOFError, zlib.error) as exc:
                raise ResponseError(f"Failed to decode {enc} content: {exc}") from exc

        self._decoded_cache = data
        return data

    def text(self, encoding: Optional[str] = None) -> str:
        data = self._decoded_content()
        if not data:
            return ""
        try:
            return data.decode(encoding or self.encoding)
        except (UnicodeDecodeError, LookupError):
            return data.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """
        Decode response content as JSON.
        Raises ResponseError if content is empty or not valid JSON.
        """
        text_content = self.text()
        if not text_content.strip():
            raise ResponseError("Response content is empty, cannot parse JSON")
        try:
            return json.loads(text_content)
        except json.JSONDecodeError as e:
            raise ResponseError(f"Failed to parse JSON: {e}") from e

    def blob(self) -> Blob:
        content_type = (self.content_type or _DEFAULT_BLOB_TYPE).split(";")[0].strip()
        return Blob(content=self._decoded_content() or b"", content_type=content_type)

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}] url={self.url!r} reason={self.reason!r}>"


def decode_json_or_none(response: Response) -> Any:
    """Parsed JSON body, or ``None`` when the body is empty or not JSON."""
    try:
        return response.json()
    except ResponseError:
        return None


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """
    Normalized response: the raw response metadata plus the decoded body.

    ``data`` is ``None`` for 204 responses and for bodies that are not JSON
    when JSON decoding was requested.
    """

    status: int
    status_text: str
    ok: bool
    headers: Mapping[str, str]
    url: Optional[str]
    data: Optional[T]

    @classmethod
    def from_response(cls, response: Response, data: Optional[T]) -> "ApiResponse[T]":
        return cls(
            status=response.status,
            status_text=response.status_text,
            ok=response.ok,
            headers=dict(response.headers),
            url=response.url,
            data=data,
        )

    @classmethod
    def from_mock(cls, data: Optional[T]) -> "ApiResponse[T]":
        return cls(status=200, status_text="", ok=True, headers={}, url=None, data=data)


__all__ = ["ApiResponse", "Blob", "Response", "decode_json_or_none"]
