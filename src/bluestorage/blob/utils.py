from __future__ import annotations

import base64
import hashlib
import logging
import os
import posixpath
import uuid
from collections.abc import Iterator
from email.utils import formatdate
from typing import IO, Any, Union
from urllib.parse import quote

from .errors import BlobError, BlobSizingError

MAXIMUM_BLOB_NAME_LENGTH = 1024

logger = logging.getLogger("bluestorage")

BlobSource = Union[str, "os.PathLike[str]", bytes, bytearray, memoryview, IO[bytes]]


def _debug_enabled() -> bool:
    return "blob" in (os.getenv("DEBUG", "") or os.getenv("BLUESTORAGE_DEBUG", ""))


def debug(message: str, *args: Any) -> None:
    if _debug_enabled() and not logger.isEnabledFor(logging.DEBUG):
        logger.setLevel(logging.DEBUG)
        if not logger.handlers:
            logger.addHandler(logging.StreamHandler())
    logger.debug(message, *args)


def make_request_id() -> str:
    return str(uuid.uuid4())


def make_block_id() -> str:
    """Return a fresh URL-safe base64 block id; every id has the same length."""
    return base64.urlsafe_b64encode(uuid.uuid4().bytes).decode("ascii")


def http_date() -> str:
    """Current time in the RFC 1123 form the service expects in ``x-ms-date``."""
    return formatdate(usegmt=True)


def content_md5(data: bytes) -> str:
    return base64.b64encode(hashlib.md5(data).digest()).decode("ascii")


def build_cache_control(cache_control: str | None, max_age: int | None) -> str | None:
    if cache_control:
        return cache_control
    if max_age is not None:
        return f"max-age={int(max_age)}"
    return None


def validate_blob_name(blob_name: str) -> None:
    if not blob_name:
        raise BlobError("blob name is required")
    if len(blob_name) > MAXIMUM_BLOB_NAME_LENGTH:
        raise BlobError(f"blob name is too long, maximum length is {MAXIMUM_BLOB_NAME_LENGTH}")
    if blob_name.startswith("/") or blob_name.endswith("/"):
        raise BlobError("blob name cannot start or end with '/'")


def quote_blob_name(blob_name: str) -> str:
    return quote(blob_name, safe="/")


def suffixed_name(blob_name: str, counter: int) -> str:
    """Insert ``counter`` before the extension: ``photo.jpg`` -> ``photo2.jpg``."""
    head, tail = posixpath.split(blob_name)
    stem, ext = posixpath.splitext(tail)
    return posixpath.join(head, f"{stem}{counter}{ext}") if head else f"{stem}{counter}{ext}"


def compute_source_size(source: Any) -> int:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return len(source)
    if isinstance(source, (str, os.PathLike)):
        return os.path.getsize(source)
    if hasattr(source, "read"):
        try:
            pos = source.tell()
            source.seek(0, os.SEEK_END)
            end = source.tell()
            source.seek(pos)
        except (AttributeError, OSError, ValueError) as exc:
            raise BlobSizingError("source stream must be seekable so its size can be checked") from exc
        return int(end - pos)
    raise BlobError("source must be a path, a bytes-like object or a binary file object")


def iter_chunks(stream: Any, block_size: int) -> Iterator[bytes]:
    """Yield consecutive ``block_size`` chunks; only the last one may be shorter."""
    if isinstance(stream, (bytes, bytearray, memoryview)):
        view = memoryview(stream)
        for offset in range(0, len(view), block_size):
            yield bytes(view[offset : offset + block_size])
        return
    while True:
        chunk = stream.read(block_size)
        if not chunk:
            break
        # short reads from pipes and sockets are topped up to a full block
        while len(chunk) < block_size:
            more = stream.read(block_size - len(chunk))
            if not more:
                break
            chunk += more
        yield bytes(chunk)
        if len(chunk) < block_size:
            break


__all__ = [
    "BlobSource",
    "debug",
    "make_request_id",
    "make_block_id",
    "http_date",
    "content_md5",
    "build_cache_control",
    "validate_blob_name",
    "quote_blob_name",
    "suffixed_name",
    "compute_source_size",
    "iter_chunks",
]
