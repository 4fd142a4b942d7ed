"""
Unit tests - rate-limited requestor verbs, errors and payloads.
"""

import io
import json

import httpx
import pytest
from pydantic import BaseModel, ValidationError

from restwalk.core.http import (
    AdmissionGate,
    RemoteError,
    Requestor,
    Upload,
    UploadRequest,
)

BASE_URL = "https://api.test/"


class Project(BaseModel):
    id: int
    name: str


def make_requestor(handler, **kwargs) -> tuple[Requestor, httpx.AsyncClient]:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    kwargs.setdefault("gate", AdmissionGate(max_requests_per_second=1000))
    return Requestor(client, **kwargs), client


class TestRequestorGet:
    """Requestor.get / get_with_headers"""

    @pytest.mark.asyncio
    async def test_get_deserializes_into_type(self):
        def handler(request):
            return httpx.Response(200, json=[{"id": 1, "name": "alpha"}, {"id": 2, "name": "beta"}])

        requestor, client = make_requestor(handler)
        async with client:
            projects = await requestor.get("projects", list[Project])

        assert projects == [Project(id=1, name="alpha"), Project(id=2, name="beta")]

    @pytest.mark.asyncio
    async def test_get_without_type_returns_plain_json(self):
        requestor, client = make_requestor(lambda r: httpx.Response(200, json={"ok": True}))
        async with client:
            assert await requestor.get("status") == {"ok": True}

    @pytest.mark.asyncio
    async def test_get_with_headers_returns_response_headers(self):
        def handler(request):
            return httpx.Response(200, json=[], headers={"X-Total-Pages": "7"})

        requestor, client = make_requestor(handler)
        async with client:
            result, headers = await requestor.get_with_headers("projects")

        assert result == []
        assert headers["X-Total-Pages"] == "7"

    @pytest.mark.asyncio
    async def test_every_request_takes_a_permit(self):
        gate = AdmissionGate(max_requests_per_second=1000)
        requestor, client = make_requestor(lambda r: httpx.Response(200, json=[]), gate=gate)
        async with client:
            await requestor.get("a")
            await requestor.get_with_headers("b")
            await requestor.delete("c")

        assert gate.stats()["granted"] == 3


class TestRequestorErrors:
    """Non-success statuses and pass-through failures."""

    @pytest.mark.asyncio
    async def test_non_success_raises_remote_error(self):
        def handler(request):
            return httpx.Response(403, text='{"message": "403 Forbidden"}')

        requestor, client = make_requestor(handler)
        async with client:
            with pytest.raises(RemoteError) as exc_info:
                await requestor.get("projects/1")

        error = exc_info.value
        assert error.status_code == 403
        assert error.body == '{"message": "403 Forbidden"}'
        assert error.url == "https://api.test/projects/1"

    @pytest.mark.asyncio
    async def test_empty_error_body(self):
        requestor, client = make_requestor(lambda r: httpx.Response(404))
        async with client:
            with pytest.raises(RemoteError) as exc_info:
                await requestor.delete("projects/1")

        assert exc_info.value.status_code == 404
        assert exc_info.value.body == ""

    @pytest.mark.asyncio
    async def test_no_retry_on_server_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, text="unavailable")

        requestor, client = make_requestor(handler)
        async with client:
            with pytest.raises(RemoteError):
                await requestor.get("projects")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_transport_error_passes_through(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        requestor, client = make_requestor(handler)
        async with client:
            with pytest.raises(httpx.ConnectError):
                await requestor.get("projects")

    @pytest.mark.asyncio
    async def test_validation_error_passes_through(self):
        requestor, client = make_requestor(lambda r: httpx.Response(200, json=[{"id": "x"}]))
        async with client:
            with pytest.raises(ValidationError):
                await requestor.get("projects", list[Project])


class TestRequestorWrites:
    """Requestor.post / put / delete / post_file"""

    @pytest.mark.asyncio
    async def test_post_serializes_model_and_returns_result(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["content_type"] = request.headers["content-type"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": 9, "name": "created"})

        requestor, client = make_requestor(handler)
        async with client:
            project = await requestor.post(
                "projects", Project(id=0, name="created"), result_type=Project
            )

        assert project == Project(id=9, name="created")
        assert seen == {
            "method": "POST",
            "content_type": "application/json",
            "body": {"id": 0, "name": "created"},
        }

    @pytest.mark.asyncio
    async def test_post_without_payload_sends_empty_json_body(self):
        seen = {}

        def handler(request):
            seen["content"] = request.content
            seen["content_type"] = request.headers["content-type"]
            return httpx.Response(202, text="accepted, not json")

        requestor, client = make_requestor(handler)
        async with client:
            result = await requestor.post("projects/1/archive")

        assert result is None
        assert seen == {"content": b"", "content_type": "application/json"}

    @pytest.mark.asyncio
    async def test_put_discards_body_without_result_type(self):
        def handler(request):
            assert request.method == "PUT"
            assert json.loads(request.content) == {"name": "renamed"}
            return httpx.Response(200, text="<not json>")

        requestor, client = make_requestor(handler)
        async with client:
            assert await requestor.put("projects/1", {"name": "renamed"}) is None

    @pytest.mark.asyncio
    async def test_put_with_result_type(self):
        handler = lambda r: httpx.Response(200, json={"id": 1, "name": "renamed"})  # noqa: E731
        requestor, client = make_requestor(handler)
        async with client:
            project = await requestor.put("projects/1", {"name": "renamed"}, Project)

        assert project.name == "renamed"

    @pytest.mark.asyncio
    async def test_post_file_sends_multipart_upload(self):
        seen = {}

        def handler(request):
            seen["content_type"] = request.headers["content-type"]
            seen["content"] = request.content
            return httpx.Response(
                201,
                json={
                    "alt": "notes",
                    "url": "/uploads/abc/notes.txt",
                    "full_path": "/group/project/uploads/abc/notes.txt",
                    "markdown": "[notes](/uploads/abc/notes.txt)",
                },
            )

        requestor, client = make_requestor(handler)
        upload = UploadRequest(file_name="notes.txt", stream=io.BytesIO(b"hello world"))
        async with client:
            result = await requestor.post_file("projects/1/uploads", upload)

        assert isinstance(result, Upload)
        assert result.url == "/uploads/abc/notes.txt"
        assert result.markdown == "[notes](/uploads/abc/notes.txt)"

        assert seen["content_type"].startswith("multipart/form-data; boundary=Upload----")
        boundary = seen["content_type"].split("boundary=", 1)[1]
        assert f"--{boundary}".encode() in seen["content"]
        assert b'name="file"; filename="notes.txt"' in seen["content"]
        assert b"hello world" in seen["content"]


class TestRequestorRateCeiling:
    """Requestor.max_requests_per_second"""

    def test_proxies_gate(self):
        gate = AdmissionGate(max_requests_per_second=10)
        requestor = Requestor(httpx.AsyncClient(), gate=gate)

        requestor.max_requests_per_second = 4
        assert gate.max_requests_per_second == 4
        assert requestor.max_requests_per_second == 4

    def test_serialize_content_of_none(self):
        requestor = Requestor(httpx.AsyncClient())
        content, headers = requestor.serialize_content(None)
        assert content == b""
        assert headers == {"Content-Type": "application/json"}
