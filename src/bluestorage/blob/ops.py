from __future__ import annotations

from ._core import BlobRequestClient
from .errors import BlobNameExhaustedError
from .utils import debug, suffixed_name, validate_blob_name

MAX_UNIQUE_NAME_ATTEMPTS = 1000


async def blob_exists(request_client: BlobRequestClient, blob_name: str) -> bool:
    """True on 200, False on 404; any other status raises ``BlobProtocolError``."""
    validate_blob_name(blob_name)
    response = await request_client.get_metadata(blob_name)
    return response.status_code == 200


async def resolve_unique_name(
    request_client: BlobRequestClient,
    blob_name: str,
    *,
    max_attempts: int = MAX_UNIQUE_NAME_ATTEMPTS,
) -> str:
    """Return ``blob_name`` or the first free ``stem{n}.ext`` variant of it."""
    candidate = blob_name
    for counter in range(1, max_attempts + 1):
        if not await blob_exists(request_client, candidate):
            return candidate
        debug("%s already exists", candidate)
        candidate = suffixed_name(blob_name, counter)
    raise BlobNameExhaustedError(blob_name, max_attempts)


__all__ = ["MAX_UNIQUE_NAME_ATTEMPTS", "blob_exists", "resolve_unique_name"]
