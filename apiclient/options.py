import inspect
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Literal, Mapping, Optional, Union

from .formdata import FormData

RequestOptions = Dict[str, Any]
ResponseType = Literal["json", "blob"]
BodyType = Optional[Union[str, bytes, FormData]]


def default_base_options() -> RequestOptions:
    return {
        "mode": "cors",
        "headers": {"Content-Type": "application/json"},
    }


def merge_options(base: Optional[Mapping[str, Any]], *overrides: Optional[Mapping[str, Any]]) -> RequestOptions:
    """
    Deep-merge option mappings into a new dict.

    Later mappings win at each leaf. Nested mappings (such as ``headers``)
    merge key by key; any other value, lists and ``None`` included, replaces
    what was there. Inputs are never mutated.
    """
    merged: RequestOptions = _copy_mapping(base or {})
    for override in overrides:
        if override:
            _merge_into(merged, override)
    return merged


def _merge_into(target: Dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        current = target.get(key)
        if isinstance(value, Mapping):
            if isinstance(current, dict):
                _merge_into(current, value)
            else:
                target[key] = _copy_mapping(value)
        else:
            target[key] = value


def _copy_mapping(value: Mapping[str, Any]) -> Dict[str, Any]:
    # Only mappings are copied; bodies like FormData keep their identity.
    return {k: _copy_mapping(v) if isinstance(v, Mapping) else v for k, v in value.items()}


def serialize_body(body: Any) -> BodyType:
    """Form payloads pass through, ``None`` means no body, anything else becomes JSON."""
    if isinstance(body, FormData):
        return body
    if body is None:
        return None
    return json.dumps(body, separators=(",", ":"))


@dataclass(frozen=True)
class StaticMock:
    """Mock whose value is returned as the response data."""

    value: Any


@dataclass(frozen=True)
class MockProducer:
    """Mock whose zero-argument factory is called (and awaited if needed) on every call."""

    factory: Callable[[], Union[Any, Awaitable[Any]]]

    async def produce(self) -> Any:
        result = self.factory()
        if inspect.isawaitable(result):
            result = await result
        return result


Mock = Union[StaticMock, MockProducer]


async def resolve_mock(mock: Mock) -> Any:
    if isinstance(mock, MockProducer):
        return await mock.produce()
    return mock.value


@dataclass(frozen=True)
class ControlOptions:
    """
    Per-call directives to the request pipeline, never sent over the wire.

    ``guest`` is reserved and not read by the pipeline.
    """

    mock: Optional[Mock] = None
    guest: Optional[bool] = None
    response_type: ResponseType = "json"


__all__ = [
    "BodyType",
    "ControlOptions",
    "Mock",
    "MockProducer",
    "RequestOptions",
    "ResponseType",
    "StaticMock",
    "default_base_options",
    "merge_options",
    "resolve_mock",
    "serialize_body",
]
