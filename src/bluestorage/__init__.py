"""Client for Azure Blob Storage block uploads signed with Shared Key."""

from .blob import (
    AsyncBlobClient,
    BlobClient,
    BlobError,
    CredentialSet,
    validate_credentials,
)

__version__ = "2.0.0"

__all__ = [
    "AsyncBlobClient",
    "BlobClient",
    "BlobError",
    "CredentialSet",
    "validate_credentials",
    "__version__",
]
