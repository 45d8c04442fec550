from __future__ import annotations

import base64
import hashlib
import inspect
import mimetypes
import os
import threading
from collections.abc import Awaitable, Callable, Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from contextlib import contextmanager
from typing import Any, cast

import anyio

from .._http import iter_coroutine
from ._core import BlobRequestClient
from .blocklist import BlockList, commit_block_list
from .credentials import MAX_BLOCK_COUNT, CredentialSet
from .errors import BlobConfigurationError, BlobSizingError
from .types import (
    AsyncProgressCallback,
    SyncProgressCallback,
    UploadBlobResult,
    UploadProgressEvent,
)
from .utils import (
    BlobSource,
    compute_source_size,
    debug,
    iter_chunks,
    make_block_id,
    validate_blob_name,
)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
MAX_CONCURRENCY = 16

SyncStageFn = Callable[[bytes], str]
AsyncStageFn = Callable[[bytes], Awaitable[str]]


# ---------------------------------------------------------------------------
# Pre-flight checks
# ---------------------------------------------------------------------------


def validate_max_concurrency(max_concurrency: int) -> int:
    if isinstance(max_concurrency, bool) or not isinstance(max_concurrency, int):
        raise BlobConfigurationError("max_concurrency", "must be an integer")
    if max_concurrency < 1 or max_concurrency > MAX_CONCURRENCY:
        raise BlobConfigurationError(
            "max_concurrency", f"must be between 1 and {MAX_CONCURRENCY}, got {max_concurrency}"
        )
    return max_concurrency


def check_blob_size(size: int, credentials: CredentialSet) -> None:
    """Reject sources that could never fit in ``MAX_BLOCK_COUNT`` blocks."""
    limit = credentials.max_blob_size
    if size > limit:
        raise BlobSizingError(
            f"Source is {size} bytes but at most {limit} bytes fit in {MAX_BLOCK_COUNT} "
            f"blocks of {credentials.block_size} bytes",
            size=size,
            limit=limit,
        )


def resolve_content_type(blob_name: str, content_type: str | None) -> str:
    if content_type:
        return content_type
    guessed, _ = mimetypes.guess_type(blob_name)
    return guessed or DEFAULT_CONTENT_TYPE


@contextmanager
def open_source(source: BlobSource) -> Iterator[Any]:
    """Yield a readable for ``source``; files opened here are closed on every exit path."""
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as fh:
            yield fh
    else:
        yield source


class _ChunkReader:
    """Iterates block-sized chunks while hashing the whole stream."""

    def __init__(self, stream: Any, block_size: int) -> None:
        self._chunks = iter_chunks(stream, block_size)
        self._md5 = hashlib.md5()
        self.count = 0

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self._chunks:
            if self.count >= MAX_BLOCK_COUNT:
                raise BlobSizingError(f"Source produced more than {MAX_BLOCK_COUNT} blocks")
            self._md5.update(chunk)
            self.count += 1
            yield chunk

    def content_md5(self) -> str:
        return base64.b64encode(self._md5.digest()).decode("ascii")


def _first_exception(exc: BaseException) -> BaseException:
    """Unwrap the exception group a task group raises down to its first member."""
    while getattr(exc, "exceptions", None):
        exc = exc.exceptions[0]  # type: ignore[attr-defined]
    return exc


def _progress_event(loaded: int, total: int) -> UploadProgressEvent:
    percentage = round((loaded / total) * 100, 2) if total else 100.0
    return UploadProgressEvent(loaded=loaded, total=total, percentage=percentage)


# ---------------------------------------------------------------------------
# Upload runtime classes
# ---------------------------------------------------------------------------


class _SyncBlockUploadRuntime:
    def upload(
        self,
        *,
        chunks: Iterable[bytes],
        stage_block: SyncStageFn,
        max_concurrency: int,
        total: int,
        on_upload_progress: SyncProgressCallback | None,
    ) -> BlockList:
        block_list = BlockList()
        loaded = 0
        loaded_lock = threading.Lock()

        def record(index: int, block_id: str, size: int) -> None:
            nonlocal loaded
            with loaded_lock:
                block_list.add(index, block_id)
                loaded += size
                if on_upload_progress:
                    on_upload_progress(_progress_event(loaded, total))

        if max_concurrency == 1:
            for index, chunk in enumerate(chunks):
                record(index, stage_block(chunk), len(chunk))
            return block_list

        def upload_one(index: int, chunk: bytes) -> None:
            record(index, stage_block(chunk), len(chunk))

        with ThreadPoolExecutor(max_workers=max_concurrency) as executor:
            inflight: set[Future[None]] = set()
            try:
                for index, chunk in enumerate(chunks):
                    inflight.add(executor.submit(upload_one, index, chunk))
                    if len(inflight) >= max_concurrency:
                        done, inflight = wait(inflight, return_when=FIRST_COMPLETED)
                        for completed in done:
                            completed.result()
                done, inflight = wait(inflight)
                for completed in done:
                    completed.result()
            except BaseException:
                for pending in inflight:
                    pending.cancel()
                raise

        return block_list


class _AsyncBlockUploadRuntime:
    async def upload(
        self,
        *,
        chunks: Iterable[bytes],
        stage_block: AsyncStageFn,
        max_concurrency: int,
        total: int,
        on_upload_progress: AsyncProgressCallback | None,
    ) -> BlockList:
        block_list = BlockList()
        loaded = 0

        async def record(index: int, block_id: str, size: int) -> None:
            nonlocal loaded
            block_list.add(index, block_id)
            loaded += size
            if on_upload_progress:
                result = on_upload_progress(_progress_event(loaded, total))
                if inspect.isawaitable(result):
                    await cast(Awaitable[None], result)

        if max_concurrency == 1:
            for index, chunk in enumerate(chunks):
                await record(index, await stage_block(chunk), len(chunk))
            return block_list

        semaphore = anyio.Semaphore(max_concurrency)

        async def run_limited_upload(index: int, chunk: bytes) -> None:
            try:
                await record(index, await stage_block(chunk), len(chunk))
            finally:
                semaphore.release()

        # the first failing block cancels the rest of the group
        try:
            async with anyio.create_task_group() as task_group:
                for index, chunk in enumerate(chunks):
                    await semaphore.acquire()
                    task_group.start_soon(run_limited_upload, index, chunk)
        except Exception as exc:
            first = _first_exception(exc)
            if first is exc:
                raise
            raise first from None

        return block_list


def create_sync_upload_runtime() -> _SyncBlockUploadRuntime:
    return _SyncBlockUploadRuntime()


def create_async_upload_runtime() -> _AsyncBlockUploadRuntime:
    return _AsyncBlockUploadRuntime()


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def _shape_result(
    *,
    blob_name: str,
    url: str,
    size: int,
    block_list: BlockList,
    content_type: str,
    content_md5: str | None,
    response: Any,
) -> UploadBlobResult:
    return UploadBlobResult(
        blob_name=blob_name,
        url=url,
        size=size,
        block_count=len(block_list),
        content_type=content_type,
        content_md5=content_md5,
        etag=response.headers.get("etag"),
        service_request_id=response.headers.get("x-ms-request-id"),
    )


def upload_block_blob(
    request_client: BlobRequestClient,
    blob_name: str,
    source: BlobSource,
    content_type: str | None = None,
    cache_control: str | None = None,
    content_md5: str | None = None,
    *,
    url: str,
    max_concurrency: int = 1,
    on_upload_progress: SyncProgressCallback | None = None,
) -> UploadBlobResult:
    """Stage ``source`` block by block, then commit the block list.

    ``request_client`` must sit on a blocking transport. Nothing is committed
    unless every block was accepted; a failure leaves at most uncommitted blocks
    behind, which the service discards on its own.
    """
    validate_blob_name(blob_name)
    validate_max_concurrency(max_concurrency)
    credentials = request_client.credentials
    size = compute_source_size(source)
    check_blob_size(size, credentials)
    resolved_type = resolve_content_type(blob_name, content_type)

    def stage_block(chunk: bytes) -> str:
        return iter_coroutine(request_client.put_block(blob_name, make_block_id(), chunk))

    with open_source(source) as stream:
        reader = _ChunkReader(stream, credentials.block_size)
        block_list = create_sync_upload_runtime().upload(
            chunks=reader,
            stage_block=stage_block,
            max_concurrency=max_concurrency,
            total=size,
            on_upload_progress=on_upload_progress,
        )

    debug("staged %d blocks for %s", len(block_list), blob_name)
    blob_md5 = content_md5 or reader.content_md5()
    response = iter_coroutine(
        commit_block_list(
            request_client,
            blob_name,
            block_list,
            cache_control=cache_control,
            content_type=resolved_type,
            content_md5_value=blob_md5,
        )
    )
    return _shape_result(
        blob_name=blob_name,
        url=url,
        size=size,
        block_list=block_list,
        content_type=resolved_type,
        content_md5=blob_md5,
        response=response,
    )


async def upload_block_blob_async(
    request_client: BlobRequestClient,
    blob_name: str,
    source: BlobSource,
    content_type: str | None = None,
    cache_control: str | None = None,
    content_md5: str | None = None,
    *,
    url: str,
    max_concurrency: int = 1,
    on_upload_progress: AsyncProgressCallback | None = None,
) -> UploadBlobResult:
    validate_blob_name(blob_name)
    validate_max_concurrency(max_concurrency)
    credentials = request_client.credentials
    size = compute_source_size(source)
    check_blob_size(size, credentials)
    resolved_type = resolve_content_type(blob_name, content_type)

    async def stage_block(chunk: bytes) -> str:
        return await request_client.put_block(blob_name, make_block_id(), chunk)

    with open_source(source) as stream:
        reader = _ChunkReader(stream, credentials.block_size)
        block_list = await create_async_upload_runtime().upload(
            chunks=reader,
            stage_block=stage_block,
            max_concurrency=max_concurrency,
            total=size,
            on_upload_progress=on_upload_progress,
        )

    debug("staged %d blocks for %s", len(block_list), blob_name)
    blob_md5 = content_md5 or reader.content_md5()
    response = await commit_block_list(
        request_client,
        blob_name,
        block_list,
        cache_control=cache_control,
        content_type=resolved_type,
        content_md5_value=blob_md5,
    )
    return _shape_result(
        blob_name=blob_name,
        url=url,
        size=size,
        block_list=block_list,
        content_type=resolved_type,
        content_md5=blob_md5,
        response=response,
    )


__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "MAX_CONCURRENCY",
    "check_blob_size",
    "validate_max_concurrency",
    "resolve_content_type",
    "open_source",
    "create_sync_upload_runtime",
    "create_async_upload_runtime",
    "upload_block_blob",
    "upload_block_blob_async",
]
