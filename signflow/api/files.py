"""Conversions between HTTP file payloads and application file objects."""

from typing import Literal
from urllib.parse import quote

from fastapi import Response, UploadFile

from signflow.application.services.uploads import FileContent, UploadedFile


async def read_upload(file: UploadFile | None) -> UploadedFile | None:
    """Read a multipart upload fully into memory."""
    if file is None:
        return None
    data = await file.read()
    return UploadedFile(
        file_name=file.filename or "",
        data=data,
        content_type=file.content_type,
    )


def content_disposition(
    file_name: str, disposition: Literal["attachment", "inline"] = "attachment"
) -> str:
    """Content-Disposition with an ASCII fallback and an RFC 5987 UTF-8 name."""
    ascii_name = file_name.encode("ascii", "replace").decode("ascii").replace("?", "_")
    ascii_name = ascii_name.replace('"', "_").replace("\\", "_")
    return f"{disposition}; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(file_name)}"


def file_response(
    content: FileContent, disposition: Literal["attachment", "inline"] = "attachment"
) -> Response:
    return Response(
        content=content.data,
        media_type=content.content_type,
        headers={
            "Content-Disposition": content_disposition(content.file_name, disposition),
            "Cache-Control": "no-store",
        },
    )
