import asyncio
import mimetypes
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, BinaryIO, List, Mapping, Optional, Sequence, Tuple, Union

BytesLike = Union[bytes, bytearray, memoryview]
FileContent = Union[BytesLike, str, Path, BinaryIO, AsyncIterator[bytes]]
FileTuple = Union[
    Tuple[str, FileContent],
    Tuple[str, FileContent, str],
]
FieldsType = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]
FilesType = Union[
    Mapping[str, Union[FileContent, FileTuple]],
    Sequence[Tuple[str, Union[FileContent, FileTuple]]],
]

_DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"
_TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
_DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class FilePart:
    field_name: str
    file_name: str
    content_type: str
    data: Any
    is_stream: bool
    close_after: bool = False


class FormData:
    """
    Multipart/form-data payload.

    Passed as a request body it is sent as-is, never JSON-serialized. The
    transport reads it with :meth:`read` and uses :attr:`content_type` as the
    request's Content-Type so the boundary always matches the payload.

    Example:
        form = FormData({"title": "report"})
        form.append_file("upload", Path("report.pdf"))
        await client.post("/documents", form)
    """

    def __init__(
        self,
        fields: Optional[FieldsType] = None,
        files: Optional[FilesType] = None,
        *,
        boundary: Optional[str] = None,
        chunk_size: int = _DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.boundary = boundary or uuid.uuid4().hex
        self._boundary_line = f"--{self.boundary}\r\n".encode("ascii")
        self._closing_boundary = f"--{self.boundary}--\r\n".encode("ascii")
        self.fields: List[Tuple[str, Any]] = self._normalize_fields(fields)
        self.file_parts: List[FilePart] = self._normalize_files(files)
        self.chunk_size = max(chunk_size, 1024)

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def append(self, name: str, value: Any) -> None:
        self.fields.append((str(name), "" if value is None else value))

    def append_file(
        self,
        name: str,
        content: FileContent,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> None:
        if filename is None:
            value: Union[FileContent, FileTuple] = content
        elif content_type is None:
            value = (filename, content)
        else:
            value = (filename, content, content_type)
        self.file_parts.append(self._coerce_file_part(str(name), value))

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        for name, value in self.fields:
            yield self._boundary_line
            yield f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode("utf-8")
            yield _coerce_bytes(value)
            yield b"\r\n"

        for part in self.file_parts:
            yield self._boundary_line
            yield self._render_file_headers(part)
            async for chunk in self._yield_file_data(part):
                if chunk:
                    yield chunk
            yield b"\r\n"

        yield self._closing_boundary

    async def read(self) -> bytes:
        """Render the whole payload into memory."""
        return b"".join([chunk async for chunk in self.iter_bytes()])

    def _render_file_headers(self, part: FilePart) -> bytes:
        headers = (
            f'Content-Disposition: form-data; name="{part.field_name}"; '
            f'filename="{part.file_name}"\r\n'
            f"Content-Type: {part.content_type}\r\n\r\n"
        )
        return headers.encode("utf-8")

    async def _yield_file_data(self, part: FilePart) -> AsyncIterator[bytes]:
        data = part.data
        if not part.is_stream:
            yield _coerce_bytes(data)
            return

        if hasattr(data, "__aiter__"):
            async for chunk in data:
                yield _coerce_bytes(chunk)
            return

        reader: BinaryIO = data
        try:
            while True:
                chunk = await asyncio.to_thread(reader.read, self.chunk_size)
                if not chunk:
                    break
                yield _coerce_bytes(chunk)
        finally:
            if part.close_after:
                await asyncio.to_thread(reader.close)

    @staticmethod
    def _normalize_fields(fields: Optional[FieldsType]) -> List[Tuple[str, Any]]:
        if not fields:
            return []
        items = fields.items() if isinstance(fields, Mapping) else fields
        return [(str(name), "" if value is None else value) for name, value in items]

    def _normalize_files(self, files: Optional[FilesType]) -> List[FilePart]:
        if not files:
            return []
        items = files.items() if isinstance(files, Mapping) else files
        return [self._coerce_file_part(str(field_name), value) for field_name, value in items]

    def _coerce_file_part(self, field_name: str, value: Union[FileContent, FileTuple]) -> FilePart:
        file_name: Optional[str] = None
        content_type: Optional[str] = None
        data: Any = value

        if isinstance(value, (tuple, list)):
            if len(value) < 2 or len(value) > 3:
                raise ValueError("file tuples must be (filename, data[, content_type])")
            file_name = str(value[0])
            data = value[1]
            if len(value) == 3 and value[2]:
                content_type = str(value[2])

        close_after = False
        is_stream = False

        if isinstance(data, Path):
            data = data.open("rb")
            is_stream = True
            close_after = True
        elif hasattr(data, "__aiter__") or hasattr(data, "read"):
            is_stream = True
        else:
            data = _coerce_bytes(data)

        inferred_name = None
        name_attr = getattr(data, "name", None)
        if isinstance(name_attr, str):
            inferred_name = os.path.basename(name_attr)

        final_name = file_name or inferred_name or f"{field_name}.bin"

        if content_type is None:
            content_type = mimetypes.guess_type(final_name)[0] or _DEFAULT_FILE_CONTENT_TYPE
        if not is_stream and content_type == _DEFAULT_FILE_CONTENT_TYPE and _looks_like_text(data):
            content_type = _TEXT_CONTENT_TYPE

        return FilePart(
            field_name=field_name,
            file_name=final_name,
            content_type=content_type,
            data=data,
            is_stream=is_stream,
            close_after=close_after,
        )

    def __repr__(self) -> str:
        return f"<FormData fields={len(self.fields)} files={len(self.file_parts)}>"


def _coerce_bytes(value: Any) -> bytes:
    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    if isinstance(value, bytearray):
        return bytes(value)
    if isinstance(value, memoryview):
        return value.tobytes()
    if isinstance(value, str):
        return value.encode("utf-8")
    return str(value).encode("utf-8")


def _looks_like_text(data: bytes) -> bool:
    try:
        data.decode("utf-8")
        return True
    except UnicodeDecodeError:
        return False


__all__ = ["FieldsType", "FilesType", "FormData"]
