from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from .._http import AsyncTransport, BlockingTransport, HTTPConfig, iter_coroutine
from ._core import BlobRequestClient
from .canonical import API_VERSION
from .credentials import CredentialSet
from .errors import BlobClientClosedError
from .ops import MAX_UNIQUE_NAME_ATTEMPTS, blob_exists, resolve_unique_name
from .types import AsyncProgressCallback, SyncProgressCallback, UploadBlobResult
from .upload import upload_block_blob, upload_block_blob_async, validate_max_concurrency
from .utils import build_cache_control, quote_blob_name, validate_blob_name


class _BaseBlobClient:
    def __init__(
        self,
        credentials: CredentialSet | None,
        *,
        config: HTTPConfig | None,
        cname: str | None,
        max_concurrency: int,
        cache_control_max_age: int | None,
        version: str,
    ) -> None:
        self._credentials = credentials if credentials is not None else CredentialSet.from_env()
        self._config = config if config is not None else HTTPConfig.from_env()
        self._cname = cname.rstrip("/") if cname else None
        self._max_concurrency = validate_max_concurrency(max_concurrency)
        self._cache_control_max_age = cache_control_max_age
        self._closed = False
        self._requests: BlobRequestClient

    @property
    def credentials(self) -> CredentialSet:
        return self._credentials

    def _ensure_open(self) -> None:
        if self._closed:
            raise BlobClientClosedError()

    def get_uri(self, blob_name: str = "", parameters: Mapping[str, str] | None = None) -> str:
        return self._requests.get_uri(blob_name, parameters)

    def blob_url(self, blob_name: str) -> str:
        """Public URL of ``blob_name``, served from the CNAME when one is configured."""
        validate_blob_name(blob_name)
        path = f"{self._credentials.container}/{quote_blob_name(blob_name)}"
        if self._cname:
            base = self._cname if "://" in self._cname else f"{self._config.scheme}://{self._cname}"
            return f"{base}/{path}"
        host = self._config.host_for(self._credentials.account)
        return f"{self._config.scheme}://{host}/{path}"

    def _cache_control(self, cache_control: str | None) -> str | None:
        return build_cache_control(cache_control, self._cache_control_max_age)


class BlobClient(_BaseBlobClient):
    """Synchronous client for one storage container."""

    def __init__(
        self,
        credentials: CredentialSet | None = None,
        *,
        config: HTTPConfig | None = None,
        cname: str | None = None,
        max_concurrency: int = 1,
        cache_control_max_age: int | None = None,
        version: str = API_VERSION,
        http_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(
            credentials,
            config=config,
            cname=cname,
            max_concurrency=max_concurrency,
            cache_control_max_age=cache_control_max_age,
            version=version,
        )
        self._transport = BlockingTransport(self._config, http_client)
        self._requests = BlobRequestClient(self._transport, self._credentials, version=version)

    def blob_exists(self, blob_name: str) -> bool:
        self._ensure_open()
        return iter_coroutine(blob_exists(self._requests, blob_name))

    def resolve_unique_name(
        self, blob_name: str, *, max_attempts: int = MAX_UNIQUE_NAME_ATTEMPTS
    ) -> str:
        self._ensure_open()
        return iter_coroutine(
            resolve_unique_name(self._requests, blob_name, max_attempts=max_attempts)
        )

    def upload_block_blob(
        self,
        blob_name: str,
        source: Any,
        content_type: str | None = None,
        cache_control: str | None = None,
        content_md5: str | None = None,
        *,
        max_concurrency: int | None = None,
        on_upload_progress: SyncProgressCallback | None = None,
    ) -> UploadBlobResult:
        self._ensure_open()
        return upload_block_blob(
            self._requests,
            blob_name,
            source,
            content_type,
            self._cache_control(cache_control),
            content_md5,
            url=self.blob_url(blob_name),
            max_concurrency=(
                self._max_concurrency if max_concurrency is None else max_concurrency
            ),
            on_upload_progress=on_upload_progress,
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._transport.close()

    def __enter__(self) -> BlobClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class AsyncBlobClient(_BaseBlobClient):
    """Asynchronous client for one storage container."""

    def __init__(
        self,
        credentials: CredentialSet | None = None,
        *,
        config: HTTPConfig | None = None,
        cname: str | None = None,
        max_concurrency: int = 1,
        cache_control_max_age: int | None = None,
        version: str = API_VERSION,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(
            credentials,
            config=config,
            cname=cname,
            max_concurrency=max_concurrency,
            cache_control_max_age=cache_control_max_age,
            version=version,
        )
        self._transport = AsyncTransport(self._config, http_client)
        self._requests = BlobRequestClient(self._transport, self._credentials, version=version)

    async def blob_exists(self, blob_name: str) -> bool:
        self._ensure_open()
        return await blob_exists(self._requests, blob_name)

    async def resolve_unique_name(
        self, blob_name: str, *, max_attempts: int = MAX_UNIQUE_NAME_ATTEMPTS
    ) -> str:
        self._ensure_open()
        return await resolve_unique_name(self._requests, blob_name, max_attempts=max_attempts)

    async def upload_block_blob(
        self,
        blob_name: str,
        source: Any,
        content_type: str | None = None,
        cache_control: str | None = None,
        content_md5: str | None = None,
        *,
        max_concurrency: int | None = None,
        on_upload_progress: AsyncProgressCallback | None = None,
    ) -> UploadBlobResult:
        self._ensure_open()
        return await upload_block_blob_async(
            self._requests,
            blob_name,
            source,
            content_type,
            self._cache_control(cache_control),
            content_md5,
            url=self.blob_url(blob_name),
            max_concurrency=(
                self._max_concurrency if max_concurrency is None else max_concurrency
            ),
            on_upload_progress=on_upload_progress,
        )

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._transport.aclose()

    async def __aenter__(self) -> AsyncBlobClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


__all__ = ["BlobClient", "AsyncBlobClient"]
