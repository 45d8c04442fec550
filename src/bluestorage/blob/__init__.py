from .auth import build_string_to_sign, compute_signature, sign
from .blocklist import BlockList
from .canonical import (
    API_VERSION,
    STANDARD_HEADERS,
    RequestDescriptor,
    canonical_headers,
    canonical_query,
    canonical_resource,
)
from .client import AsyncBlobClient, BlobClient
from .credentials import (
    DEFAULT_BLOCK_SIZE,
    MAX_BLOCK_COUNT,
    MAX_BLOCK_SIZE,
    CredentialSet,
    validate_credentials,
)
from .errors import (
    BlobClientClosedError,
    BlobConfigurationError,
    BlobError,
    BlobNameExhaustedError,
    BlobProtocolError,
    BlobSigningError,
    BlobSizingError,
)
from .types import UploadBlobResult, UploadProgressEvent

__all__ = [
    "BlobClient",
    "AsyncBlobClient",
    "CredentialSet",
    "validate_credentials",
    "DEFAULT_BLOCK_SIZE",
    "MAX_BLOCK_COUNT",
    "MAX_BLOCK_SIZE",
    "API_VERSION",
    "STANDARD_HEADERS",
    "RequestDescriptor",
    "canonical_headers",
    "canonical_query",
    "canonical_resource",
    "build_string_to_sign",
    "compute_signature",
    "sign",
    "BlockList",
    "UploadBlobResult",
    "UploadProgressEvent",
    "BlobError",
    "BlobConfigurationError",
    "BlobSizingError",
    "BlobSigningError",
    "BlobProtocolError",
    "BlobNameExhaustedError",
    "BlobClientClosedError",
]
