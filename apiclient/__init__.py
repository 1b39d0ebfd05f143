from ._version import __version__
from .client import ApiClient
from .response import ApiResponse, Blob, Response
from .formdata import FormData
from .options import ControlOptions, MockProducer, StaticMock, default_base_options, merge_options
from .transport import H11Transport, Transport
from .sync import SyncApiClient
from .errors import (
    ApiClientError,
    RequestError,
    ResponseError,
    HTTPStatusError,
)

__all__ = [
    "ApiClient",
    "SyncApiClient",
    "ApiResponse",
    "Blob",
    "Response",
    "FormData",
    "ControlOptions",
    "StaticMock",
    "MockProducer",
    "default_base_options",
    "merge_options",
    "H11Transport",
    "Transport",
    "ApiClientError",
    "RequestError",
    "ResponseError",
    "HTTPStatusError",
    "__version__",
]
