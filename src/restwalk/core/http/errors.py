"""
Error types raised by the HTTP layer.

Transport failures (httpx) and payload validation failures (pydantic)
are not wrapped; they reach the caller as raised.
"""

from __future__ import annotations


class RestwalkError(Exception):
    """Base exception for restwalk errors."""
    pass


class RemoteError(RestwalkError):
    """The remote service answered with a non-success status code."""

    def __init__(
        self,
        status_code: int,
        body: str = "",
        url: str | None = None,
    ):
        message = f"Remote service returned status {status_code}"
        if url:
            message = f"{message} for {url}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.url = url


class InvalidArgumentError(RestwalkError, ValueError):
    """Invalid pagination arguments supplied by the caller."""

    def __init__(self, argument: str, message: str):
        super().__init__(f"{argument}: {message}")
        self.argument = argument


class UnknownStrategyError(RestwalkError, RuntimeError):
    """Fetch strategy outside of the known set."""
    pass
