import pytest

from apiclient import ControlOptions, FormData, MockProducer, StaticMock
from apiclient.options import default_base_options, merge_options, resolve_mock, serialize_body


def test_default_base_options():
    assert default_base_options() == {"mode": "cors", "headers": {"Content-Type": "application/json"}}
    first = default_base_options()
    first["headers"]["X"] = "1"
    assert "X" not in default_base_options()["headers"]


def test_merge_is_recursive_and_later_values_win():
    base = {"headers": {"A": "1", "C": "base"}, "mode": "cors", "cache": {"policy": {"ttl": 1}}}
    merged = merge_options(base, {"headers": {"B": "2", "C": "call"}, "cache": {"policy": {"stale": True}}})
    assert merged == {
        "headers": {"A": "1", "B": "2", "C": "call"},
        "mode": "cors",
        "cache": {"policy": {"ttl": 1, "stale": True}},
    }


def test_merge_does_not_mutate_inputs():
    base = {"headers": {"A": "1"}}
    override = {"headers": {"B": "2"}}
    merged = merge_options(base, override)
    merged["headers"]["C"] = "3"
    assert base == {"headers": {"A": "1"}}
    assert override == {"headers": {"B": "2"}}


def test_merge_replaces_lists_scalars_and_none():
    base = {"tags": [1, 2, 3], "mode": "cors", "headers": {"A": "1"}}
    merged = merge_options(base, {"tags": [9], "mode": None, "headers": "raw"})
    assert merged == {"tags": [9], "mode": None, "headers": "raw"}


def test_merge_keeps_body_identity():
    form = FormData({"a": "b"})
    merged = merge_options({"body": None}, {"body": form})
    assert merged["body"] is form


def test_merge_accepts_missing_mappings():
    assert merge_options(None, None, {"a": 1}) == {"a": 1}


def test_serialize_body():
    form = FormData()
    assert serialize_body(form) is form
    assert serialize_body(None) is None
    assert serialize_body({"a": 1}) == '{"a":1}'
    assert serialize_body("text") == '"text"'
    assert serialize_body(0) == "0"
    assert serialize_body(False) == "false"


def test_control_options_defaults():
    control = ControlOptions()
    assert control.mock is None
    assert control.guest is None
    assert control.response_type == "json"


@pytest.mark.asyncio
async def test_resolve_mock_variants():
    assert await resolve_mock(StaticMock({"a": 1})) == {"a": 1}
    assert await resolve_mock(StaticMock(None)) is None
    assert await resolve_mock(MockProducer(lambda: [1, 2])) == [1, 2]

    async def produce():
        return "async"

    assert await resolve_mock(MockProducer(produce)) == "async"
