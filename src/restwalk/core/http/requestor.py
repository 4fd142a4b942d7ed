"""
Rate-limited HTTP requestor using httpx.

Every verb goes through the same sequence:
- acquire an admission permit (release is scheduled, not awaited)
- issue the request
- raise RemoteError on a non-success status
- deserialize the body with the injected serializer
"""

from __future__ import annotations

import logging
import time
from typing import Any, TypeVar

import httpx

from .errors import RemoteError
from .serialization import JsonSerializer
from .throttling import AdmissionGate
from .uploads import Upload, UploadRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json"


class Requestor:
    """Issue rate-limited, typed requests against a REST API.

    The admission gate is owned by the requestor; every request made
    through this instance, from any number of concurrent tasks, shares it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        serializer: JsonSerializer | None = None,
        gate: AdmissionGate | None = None,
    ):
        """Initialize requestor.

        Args:
            client: Transport used for all requests
            serializer: Payload serializer (default: JsonSerializer)
            gate: Admission gate (default: a new gate with default limits)
        """
        self._client = client
        self.serializer = serializer or JsonSerializer()
        self.gate = gate or AdmissionGate()

    @property
    def max_requests_per_second(self) -> int:
        """Rate ceiling applied from the next granted permit onward."""
        return self.gate.max_requests_per_second

    @max_requests_per_second.setter
    def max_requests_per_second(self, value: int) -> None:
        self.gate.max_requests_per_second = value

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        await self.gate.acquire()
        response = await self._client.request(method, url, **kwargs)
        self._ensure_success(response)
        return response

    async def get(self, url: str, result_type: type[T] = Any) -> T:
        """GET ``url`` and deserialize the body into ``result_type``."""
        response = await self._send("GET", url)
        return self._read_response(response, result_type)

    async def get_with_headers(
        self,
        url: str,
        result_type: type[T] = Any,
    ) -> tuple[T, httpx.Headers]:
        """GET ``url`` and return the deserialized body with the response headers."""
        response = await self._send("GET", url)
        return self._read_response(response, result_type), response.headers

    async def post(
        self,
        url: str,
        data: Any = None,
        result_type: type[T] | None = None,
    ) -> T | None:
        """POST ``data`` as JSON.

        Returns:
            Body deserialized into ``result_type``, or None when no
            result type is given (the body is discarded)
        """
        content, headers = self.serialize_content(data)
        response = await self._send("POST", url, content=content, headers=headers)
        if result_type is None:
            return None
        return self._read_response(response, result_type)

    async def put(
        self,
        url: str,
        data: Any,
        result_type: type[T] | None = None,
    ) -> T | None:
        """PUT ``data`` as JSON. Same result handling as :meth:`post`."""
        content, headers = self.serialize_content(data)
        response = await self._send("PUT", url, content=content, headers=headers)
        if result_type is None:
            return None
        return self._read_response(response, result_type)

    async def delete(self, url: str) -> None:
        await self._send("DELETE", url)

    async def post_file(self, url: str, upload: UploadRequest) -> Upload:
        """Upload a single file as multipart form data.

        Args:
            url: Upload endpoint
            upload: File name and content to send

        Returns:
            Upload description returned by the service
        """
        boundary = f"Upload----{time.time_ns()}"
        headers = {"Content-Type": f"multipart/form-data; boundary={boundary}"}
        files = {upload.field_name: (upload.file_name, upload.stream)}

        response = await self._send("POST", url, files=files, headers=headers)
        return self._read_response(response, Upload)

    def serialize_content(self, data: Any) -> tuple[bytes, dict[str, str]]:
        """Serialize a request payload.

        A None payload produces an empty body; the content type is
        JSON either way.
        """
        text = self.serializer.serialize(data) if data is not None else ""
        return text.encode("utf-8"), {"Content-Type": JSON_CONTENT_TYPE}

    def _ensure_success(self, response: httpx.Response) -> None:
        if response.is_success:
            return

        url = str(response.request.url)
        try:
            body = response.text or ""
        except (httpx.ResponseNotRead, UnicodeDecodeError):
            body = ""

        logger.warning(
            "%s %s failed with status %d",
            response.request.method,
            url,
            response.status_code,
            extra={"url": url, "status_code": response.status_code},
        )
        raise RemoteError(response.status_code, body, url=url)

    def _read_response(self, response: httpx.Response, result_type: type[T]) -> T:
        return self.serializer.deserialize(response.content, result_type)
