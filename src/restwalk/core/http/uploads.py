"""File upload request and response types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from pydantic import BaseModel


@dataclass
class UploadRequest:
    """A single file to send as multipart form data."""

    file_name: str
    stream: BinaryIO | bytes
    field_name: str = "file"


class Upload(BaseModel):
    """Response returned by the service after a file upload."""

    url: str
    alt: str | None = None
    full_path: str | None = None
    markdown: str | None = None
