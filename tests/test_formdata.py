import io
from pathlib import Path

import pytest

from apiclient import FormData


@pytest.mark.asyncio
async def test_fields_and_files_are_encoded():
    form = FormData({"title": "report", "empty": None}, boundary="XBOUNDARY")
    form.append("tag", 7)
    form.append_file("notes", b"hello", filename="notes.txt")
    body = await form.read()

    assert form.content_type == "multipart/form-data; boundary=XBOUNDARY"
    assert body.startswith(b"--XBOUNDARY\r\n")
    assert body.endswith(b"--XBOUNDARY--\r\n")
    assert b'Content-Disposition: form-data; name="title"\r\n\r\nreport\r\n' in body
    assert b'name="empty"\r\n\r\n\r\n' in body
    assert b'name="tag"\r\n\r\n7\r\n' in body
    assert b'name="notes"; filename="notes.txt"\r\nContent-Type: text/plain\r\n\r\nhello\r\n' in body


@pytest.mark.asyncio
async def test_file_object_and_explicit_content_type():
    form = FormData(files={"upload": ("data.bin", io.BytesIO(b"\x00\x01"), "application/x-custom")})
    body = await form.read()
    assert b"Content-Type: application/x-custom\r\n\r\n\x00\x01\r\n" in body


@pytest.mark.asyncio
async def test_path_content(tmp_path: Path):
    target = tmp_path / "page.html"
    target.write_text("<p>hi</p>", encoding="utf-8")
    form = FormData()
    form.append_file("page", target)
    body = await form.read()
    assert b'filename="page.html"' in body
    assert b"Content-Type: text/html" in body
    assert b"<p>hi</p>" in body


def test_bad_file_tuple():
    with pytest.raises(ValueError):
        FormData(files={"x": ("only-name",)})
