from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import quote, urlsplit

from .errors import RequestError

_PATH_SAFE = "/:@!$&'()*+,;=%"
_QUERY_SAFE = _PATH_SAFE + "?"


@dataclass
class Request:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        parsed = urlsplit(self.url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise RequestError(f"Invalid URL: {self.url!r}")
        self.scheme = parsed.scheme
        self.host = parsed.hostname
        self.port = parsed.port or (443 if parsed.scheme == "https" else 80)
        self.target = quote(parsed.path, safe=_PATH_SAFE) or "/"
        if parsed.query:
            self.target += "?" + quote(parsed.query, safe=_QUERY_SAFE)
        self._normalize_headers()

    def _normalize_headers(self) -> None:
        lower_keys = {k.lower() for k in self.headers}
        if "host" not in lower_keys:
            host_hdr = self.host
            if self.port not in (80, 443):
                host_hdr = f"{host_hdr}:{self.port}"
            self.headers["Host"] = host_hdr
        if self.content is not None and "content-length" not in lower_keys:
            self.headers["Content-Length"] = str(len(self.content))
        elif self.content is None and self.method in ("POST", "PUT", "PATCH") and "content-length" not in lower_keys:
            self.headers["Content-Length"] = "0"
        # One request per connection.
        self.headers = {k: v for k, v in self.headers.items() if k.lower() != "connection"}
        self.headers["Connection"] = "close"

    def h11_headers(self):
        try:
            return [(k.encode("ascii"), str(v).encode("latin-1")) for k, v in self.headers.items()]
        except UnicodeEncodeError as exc:
            raise RequestError(f"Header not encodable for HTTP/1.1: {exc}") from exc
