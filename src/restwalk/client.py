"""
API client facade.

Owns the httpx client and wires one Requestor (and so one admission
gate) into the paginated fetch engine. Two ApiClient instances are
rate limited independently of each other.
"""

from __future__ import annotations

from typing import Any

import httpx

from restwalk import __app_name__, __version__
from restwalk.core.config.models import ClientConfig
from restwalk.core.http import (
    AdmissionGate,
    JsonSerializer,
    PagedRequestor,
    Requestor,
)
from restwalk.core.http.throttling import DEFAULT_MAX_REQUESTS_PER_SECOND

USER_AGENT = f"{__app_name__}/{__version__}"


class ApiClient:
    """Rate-limited client for a paginated REST API.

    Usage:
        async with ApiClient("https://gitlab.example.com/api/v4") as api:
            api.max_requests_per_second = 5
            projects = await api.pages.fetch_all("projects")
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        max_requests_per_second: int = DEFAULT_MAX_REQUESTS_PER_SECOND,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        window_size: int | None = None,
        serializer: JsonSerializer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize API client.

        Args:
            base_url: Base URL for relative resource URLs
            max_requests_per_second: Rate ceiling of the remote service
            timeout: Request timeout in seconds
            headers: Headers sent with every request
            window_size: Concurrent page fetches for known-total collections
            serializer: Payload serializer (default: JsonSerializer)
            transport: Custom httpx transport
        """
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
                **(headers or {}),
            },
            transport=transport,
        )
        self.requestor = Requestor(
            self._http,
            serializer=serializer,
            gate=AdmissionGate(max_requests_per_second),
        )
        self.pages = PagedRequestor(self.requestor, window_size=window_size)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ApiClient":
        """Build a client from validated configuration."""
        return cls(
            config.base_url,
            max_requests_per_second=config.max_requests_per_second,
            timeout=config.timeout_seconds,
            headers=config.headers,
            window_size=config.window_size,
            transport=transport,
        )

    @property
    def max_requests_per_second(self) -> int:
        return self.requestor.max_requests_per_second

    @max_requests_per_second.setter
    def max_requests_per_second(self, value: int) -> None:
        self.requestor.max_requests_per_second = value

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if not self._http.is_closed:
            await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
