import pytest

from apiclient import FormData, H11Transport, RequestError


@pytest.mark.asyncio
async def test_path_params_and_query_are_kept():
    request = await H11Transport().build_request("http://example.invalid/items;v=2?x=1", {})
    assert request.target == "/items;v=2?x=1"


@pytest.mark.asyncio
async def test_non_ascii_target_is_percent_encoded():
    request = await H11Transport().build_request("http://example.invalid/café?q=é&r=%20", {})
    assert request.target == "/caf%C3%A9?q=%C3%A9&r=%20"


@pytest.mark.asyncio
async def test_empty_path_targets_root():
    request = await H11Transport().build_request("https://example.invalid", {})
    assert request.target == "/"
    assert request.port == 443


@pytest.mark.asyncio
async def test_header_names_fold_case_insensitively():
    headers = {"Content-Type": "application/json", "X-Trace": "1", "content-type": "text/plain"}
    request = await H11Transport().build_request(
        "http://example.invalid/x",
        {"method": "post", "headers": headers, "body": "hi"},
    )
    content_types = [v for k, v in request.headers.items() if k.lower() == "content-type"]
    assert content_types == ["text/plain"]
    assert request.headers["X-Trace"] == "1"
    assert request.method == "POST"
    assert request.headers["Content-Length"] == "2"


@pytest.mark.asyncio
async def test_form_data_sets_multipart_content_type():
    form = FormData({"a": "b"})
    request = await H11Transport().build_request(
        "http://example.invalid/upload",
        {"headers": {"content-type": "application/json"}, "body": form},
    )
    content_types = [v for k, v in request.headers.items() if k.lower() == "content-type"]
    assert content_types == [form.content_type]


@pytest.mark.asyncio
async def test_header_outside_latin1_raises_request_error():
    request = await H11Transport().build_request("http://example.invalid/x", {"headers": {"X-Name": "Łukasz"}})
    with pytest.raises(RequestError):
        request.h11_headers()


@pytest.mark.asyncio
async def test_unsupported_body_raises_request_error():
    with pytest.raises(RequestError):
        await H11Transport().build_request("http://example.invalid/x", {"body": object()})
