from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass


@dataclass(slots=True)
class UploadProgressEvent:
    loaded: int
    total: int
    percentage: float


@dataclass(slots=True)
class UploadBlobResult:
    blob_name: str
    url: str
    size: int
    block_count: int
    content_type: str
    content_md5: str | None
    etag: str | None
    service_request_id: str | None


SyncProgressCallback = Callable[[UploadProgressEvent], None]
AsyncProgressCallback = (
    Callable[[UploadProgressEvent], None] | Callable[[UploadProgressEvent], Awaitable[None]]
)


__all__ = [
    "UploadProgressEvent",
    "UploadBlobResult",
    "SyncProgressCallback",
    "AsyncProgressCallback",
]
