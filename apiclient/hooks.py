from typing import Callable

from .options import ControlOptions, RequestOptions
from .response import Response

BeforeRequestHook = Callable[[RequestOptions, ControlOptions], RequestOptions]
AfterRequestHook = Callable[[RequestOptions, ControlOptions, Response], None]
OnRequestErrorHook = Callable[[RequestOptions, ControlOptions, Response, BaseException], None]


def identity_before_request(options: RequestOptions, control: ControlOptions) -> RequestOptions:
    return options


def noop_after_request(options: RequestOptions, control: ControlOptions, response: Response) -> None:
    return None


def noop_on_request_error(
    options: RequestOptions,
    control: ControlOptions,
    response: Response,
    error: BaseException,
) -> None:
    return None


__all__ = [
    "AfterRequestHook",
    "BeforeRequestHook",
    "OnRequestErrorHook",
    "identity_before_request",
    "noop_after_request",
    "noop_on_request_error",
]
