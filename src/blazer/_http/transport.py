"""HTTP transport implementation for the blocking B2 client."""

from __future__ import annotations

import abc
import threading
from dataclasses import dataclass
from typing import Any

import httpx

from .config import HTTPConfig


@dataclass(frozen=True, slots=True)
class JSONBody:
    """JSON request body - automatically sets Content-Type to application/json."""

    data: Any


@dataclass(frozen=True, slots=True)
class BytesBody:
    """Raw bytes request body with explicit content type."""

    data: bytes
    content_type: str = "application/octet-stream"


RequestBody = JSONBody | BytesBody | None


class BaseTransport(abc.ABC):
    """Abstract base class for HTTP transports."""

    def __init__(self, config: HTTPConfig) -> None:
        self._config = config

    @property
    def config(self) -> HTTPConfig:
        return self._config

    def _resolve_url(self, path: str) -> str:
        # B2 hands out absolute URLs for uploads and per-account API hosts
        if path.startswith(("http://", "https://")):
            return path
        return self._config.base_url.rstrip("/") + path

    @abc.abstractmethod
    def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        authorization: str | None = None,
        auth: tuple[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send an HTTP request and return the response."""
        ...

    @abc.abstractmethod
    def close(self) -> None:
        """Close any underlying resources."""
        ...


class BlockingTransport(BaseTransport):
    """
    Synchronous HTTP transport using httpx.Client.

    A single client is shared by every thread using the transport; upload
    workers reuse its connection pool across parts.
    """

    def __init__(self, config: HTTPConfig, *, client: httpx.Client | None = None) -> None:
        super().__init__(config)
        self._client = client
        self._owns_client = client is None
        self._lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        with self._lock:
            if self._client is None:
                self._client = httpx.Client(timeout=httpx.Timeout(self._config.timeout))
            return self._client

    def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        authorization: str | None = None,
        auth: tuple[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a synchronous HTTP request."""
        url = self._resolve_url(path)
        effective_timeout = timeout if timeout is not None else self._config.timeout
        request_headers = self._config.get_headers(authorization)
        if headers:
            request_headers.update(headers)

        # Unpack content based on type
        json_data: Any | None = None
        raw_content: bytes | None = None
        if isinstance(body, JSONBody):
            json_data = body.data
        elif isinstance(body, BytesBody):
            raw_content = body.data
            request_headers["content-type"] = body.content_type

        return self._get_client().request(
            method,
            url,
            params=params or None,
            json=json_data,
            content=raw_content,
            headers=request_headers,
            auth=auth,
            timeout=httpx.Timeout(effective_timeout),
        )

    def close(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        with self._lock:
            if self._client is not None and self._owns_client:
                self._client.close()
            self._client = None


__all__ = [
    "BaseTransport",
    "BlockingTransport",
    "JSONBody",
    "BytesBody",
    "RequestBody",
]
