"""HTTP transport implementations for sync and async clients."""

from __future__ import annotations

import abc

import httpx

from .config import HTTPConfig


class BaseTransport(abc.ABC):
    """Abstract base class for HTTP transports.

    A transport only moves bytes: it receives fully signed headers and a
    scheme-less URI and hands back the raw ``httpx.Response``. Network failures
    surface as ``httpx.TransportError`` and are never interpreted here.
    """

    def __init__(self, config: HTTPConfig) -> None:
        self._config = config

    @property
    def config(self) -> HTTPConfig:
        return self._config

    @abc.abstractmethod
    async def send(
        self,
        method: str,
        uri: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
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

    Methods are declared async but don't actually await anything,
    allowing them to be executed via iter_coroutine().
    """

    def __init__(self, config: HTTPConfig, client: httpx.Client | None = None) -> None:
        super().__init__(config)
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=httpx.Timeout(self._config.timeout))
        return self._client

    async def send(
        self,
        method: str,
        uri: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send a synchronous HTTP request (wrapped as async for iter_coroutine)."""
        url = self._config.build_url(uri)
        effective_timeout = timeout if timeout is not None else self._config.timeout
        return self._get_client().request(
            method,
            url,
            content=content,
            headers=self._config.get_headers(headers),
            timeout=effective_timeout,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and self._owns_client:
            self._client.close()
        self._client = None


class AsyncTransport(BaseTransport):
    """Asynchronous HTTP transport using httpx.AsyncClient."""

    def __init__(self, config: HTTPConfig, client: httpx.AsyncClient | None = None) -> None:
        super().__init__(config)
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._config.timeout))
        return self._client

    async def send(
        self,
        method: str,
        uri: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send an asynchronous HTTP request."""
        url = self._config.build_url(uri)
        effective_timeout = timeout if timeout is not None else self._config.timeout
        return await self._get_client().request(
            method,
            url,
            content=content,
            headers=self._config.get_headers(headers),
            timeout=effective_timeout,
        )

    def close(self) -> None:
        """Drop the client reference; use ``aclose`` to release connections."""
        self._client = None

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None


__all__ = [
    "BaseTransport",
    "BlockingTransport",
    "AsyncTransport",
]
