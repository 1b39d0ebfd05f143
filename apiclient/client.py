import logging
from typing import Any, Optional

from .errors import HTTPStatusError
from .hooks import (
    AfterRequestHook,
    BeforeRequestHook,
    OnRequestErrorHook,
    identity_before_request,
    noop_after_request,
    noop_on_request_error,
)
from .logging import get_logger
from .options import (
    ControlOptions,
    RequestOptions,
    default_base_options,
    merge_options,
    resolve_mock,
    serialize_body,
)
from .response import ApiResponse, Response, decode_json_or_none
from .transport import H11Transport, Transport


class ApiClient:
    """
    Async API client that returns normalized responses.

    Every verb method merges its options onto ``base_options``, runs the
    ``before_request`` hook, sends the request, raises ``HTTPStatusError`` for
    a non-success status and decodes the body into ``ApiResponse.data``.
    ``after_request`` observes successful calls and ``on_request_error``
    observes failed ones before the error is re-raised.

    Example:
        async with ApiClient("https://api.example.com") as client:
            resp = await client.get("/users")
            users = resp.data
    """

    def __init__(
        self,
        base_url: str = "",
        base_options: Optional[RequestOptions] = None,
        *,
        transport: Optional[Transport] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._base_url = base_url
        self._base_options = base_options if base_options is not None else default_base_options()
        self.transport = transport or H11Transport(logger=logger)
        self.logger = logger or get_logger()
        self._before_request: BeforeRequestHook = identity_before_request
        self._after_request: AfterRequestHook = noop_after_request
        self._on_request_error: OnRequestErrorHook = noop_on_request_error

    @property
    def endpoint(self) -> str:
        return self._base_url

    @endpoint.setter
    def endpoint(self, url: str) -> None:
        self._base_url = url

    @property
    def base_options(self) -> RequestOptions:
        return self._base_options

    @property
    def before_request(self) -> BeforeRequestHook:
        return self._before_request

    @before_request.setter
    def before_request(self, hook: BeforeRequestHook) -> None:
        self._before_request = hook

    @property
    def after_request(self) -> AfterRequestHook:
        return self._after_request

    @after_request.setter
    def after_request(self, hook: AfterRequestHook) -> None:
        self._after_request = hook

    @property
    def on_request_error(self) -> OnRequestErrorHook:
        return self._on_request_error

    @on_request_error.setter
    def on_request_error(self, hook: OnRequestErrorHook) -> None:
        self._on_request_error = hook

    async def _perform_request(
        self,
        url: str,
        fetch_options: Optional[RequestOptions] = None,
        control: Optional[ControlOptions] = None,
    ) -> ApiResponse:
        control = control or ControlOptions()
        if control.mock is not None:
            self.logger.debug("Mocked response for %s", url)
            return ApiResponse.from_mock(await resolve_mock(control.mock))

        merged = merge_options(self._base_options, fetch_options)
        options = self._before_request(merged, control)

        response = Response.empty()
        try:
            full_url = f"{self._base_url}{url}"
            self.logger.debug("%s %s", options.get("method", "GET"), full_url)
            response = await self.transport.send(full_url, options)
            if not response.ok:
                raise HTTPStatusError.from_response(response)

            if response.status_code == 204:
                data: Any = None
            elif control.response_type == "blob":
                data = response.blob()
            else:
                data = decode_json_or_none(response)
                if data is None:
                    self.logger.debug("No JSON body in response from %s", full_url)

            self._after_request(options, control, response)
            return ApiResponse.from_response(response, data)
        except Exception as exc:
            self.logger.warning("Request to %s%s failed: %s", self._base_url, url, exc)
            self._on_request_error(options, control, response, exc)
            raise

    async def fetch(self, url: str, options: Optional[RequestOptions] = None) -> Response:
        """Send a request straight to the transport, skipping merge, hooks and decoding."""
        return await self.transport.send(f"{self._base_url}{url}", dict(options or {}))

    async def get(
        self,
        url: str,
        fetch_options: Optional[RequestOptions] = None,
        control: Optional[ControlOptions] = None,
    ) -> ApiResponse:
        return await self._perform_request(url, {**(fetch_options or {}), "method": "GET"}, control)

    async def delete(
        self,
        url: str,
        fetch_options: Optional[RequestOptions] = None,
        control: Optional[ControlOptions] = None,
    ) -> ApiResponse:
        return await self._perform_request(url, {**(fetch_options or {}), "method": "DELETE"}, control)

    async def head(
        self,
        url: str,
        fetch_options: Optional[RequestOptions] = None,
        control: Optional[ControlOptions] = None,
    ) -> ApiResponse:
        return await self._perform_request(url, {**(fetch_options or {}), "method": "HEAD"}, control)

    async def options(
        self,
        url: str,
        fetch_options: Optional[RequestOptions] = None,
        control: Optional[ControlOptions] = None,
    ) -> ApiResponse:
        return await self._perform_request(url, {**(fetch_options or {}), "method": "OPTIONS"}, control)

    async def post(
        self,
        url: str,
        body: Any = None,
        fetch_options: Optional[RequestOptions] = None,
        control: Optional[ControlOptions] = None,
    ) -> ApiResponse:
        return await self._send_with_body("POST", url, body, fetch_options, control)

    async def put(
        self,
        url: str,
        body: Any = None,
        fetch_options: Optional[RequestOptions] = None,
        control: Optional[ControlOptions] = None,
    ) -> ApiResponse:
        return await self._send_with_body("PUT", url, body, fetch_options, control)

    async def patch(
        self,
        url: str,
        body: Any = None,
        fetch_options: Optional[RequestOptions] = None,
        control: Optional[ControlOptions] = None,
    ) -> ApiResponse:
        return await self._send_with_body("PATCH", url, body, fetch_options, control)

    async def _send_with_body(
        self,
        method: str,
        url: str,
        body: Any,
        fetch_options: Optional[RequestOptions],
        control: Optional[ControlOptions],
    ) -> ApiResponse:
        options = {**(fetch_options or {}), "body": serialize_body(body), "method": method}
        return await self._perform_request(url, options, control)

    async def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


__all__ = ["ApiClient"]
