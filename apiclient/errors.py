from typing import Optional


class ApiClientError(Exception):
    """Base exception for the apiclient package."""


class RequestError(ApiClientError):
    """Raised when request building or sending fails."""


class ResponseError(ApiClientError):
    """Raised when response reading or parsing fails."""


class HTTPStatusError(ResponseError):
    """Raised when the transport reports a non-success status."""

    def __init__(
        self,
        message: str,
        response: Optional[object] = None,
        *,
        status_code: int = 0,
        status_text: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.response = response
        self.status_code = status_code
        self.status_text = status_text

    @classmethod
    def from_response(cls, response) -> "HTTPStatusError":
        status = response.status_code
        reason = response.status_text
        return cls(
            f"Response finished with status {status} - {reason}",
            response,
            status_code=status,
            status_text=reason,
        )
