"""Storage account credentials and their validation rules."""

from __future__ import annotations

import base64
import binascii
import os
import re
from dataclasses import dataclass, field

from .errors import BlobConfigurationError

# Per-block ceiling of the service version this client speaks.
MAX_BLOCK_SIZE = 102400
# Blocks allowed in one committed block list.
MAX_BLOCK_COUNT = 50000
DEFAULT_BLOCK_SIZE = MAX_BLOCK_SIZE

ACCOUNT_ENV = "AZURE_STORAGE_ACCOUNT"
KEY_ENV = "AZURE_STORAGE_KEY"
CONTAINER_ENV = "AZURE_STORAGE_CONTAINER"
BLOCK_SIZE_ENV = "BLUE_STORAGE_BLOCK_SIZE"

_ACCOUNT_RE = re.compile(r"^[a-z0-9]{3,24}$")
_CONTAINER_RE = re.compile(r"^[a-z0-9-]{3,63}$")


def validate_account(account: str) -> str:
    if not isinstance(account, str) or not _ACCOUNT_RE.match(account):
        raise BlobConfigurationError(
            "account", "must be 3-24 characters of lowercase letters and digits"
        )
    return account


def validate_key(key: str) -> bytes:
    if not isinstance(key, str) or not key.strip():
        raise BlobConfigurationError("key", "access key is required")
    try:
        decoded = base64.b64decode(key.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BlobConfigurationError("key", "access key must be valid base64") from exc
    if not decoded:
        raise BlobConfigurationError("key", "access key must not decode to an empty value")
    return decoded


def validate_container(container: str) -> str:
    if not isinstance(container, str) or not _CONTAINER_RE.match(container):
        raise BlobConfigurationError(
            "container", "must be 3-63 characters of lowercase letters, digits and hyphens"
        )
    if container.startswith("-") or container.endswith("-"):
        raise BlobConfigurationError("container", "must not start or end with a hyphen")
    if "--" in container:
        raise BlobConfigurationError("container", "must not contain consecutive hyphens")
    return container


def validate_block_size(block_size: int) -> int:
    # bool is an int subclass but never a meaningful size
    if isinstance(block_size, bool) or not isinstance(block_size, int):
        raise BlobConfigurationError("block_size", "must be an integer")
    if block_size < 1 or block_size > MAX_BLOCK_SIZE:
        raise BlobConfigurationError(
            "block_size", f"must be between 1 and {MAX_BLOCK_SIZE} bytes, got {block_size}"
        )
    return block_size


@dataclass(frozen=True)
class CredentialSet:
    """Validated account, access key, container and block size.

    Every field is validated on construction, so a ``CredentialSet`` in hand is
    always usable. :meth:`create` and :meth:`from_env` are the usual entry points.
    """

    account: str
    key: str = field(repr=False)
    container: str
    block_size: int = DEFAULT_BLOCK_SIZE
    key_bytes: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        validate_account(self.account)
        key_bytes = validate_key(self.key)
        validate_container(self.container)
        validate_block_size(self.block_size)
        object.__setattr__(self, "key", self.key.strip())
        object.__setattr__(self, "key_bytes", key_bytes)

    @classmethod
    def create(
        cls,
        account: str,
        key: str,
        container: str,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> CredentialSet:
        return cls(account=account, key=key, container=container, block_size=block_size)

    @classmethod
    def from_env(
        cls,
        account: str | None = None,
        key: str | None = None,
        container: str | None = None,
        block_size: int | None = None,
    ) -> CredentialSet:
        """Resolve each field from the argument or its environment variable."""
        resolved_account = account or os.getenv(ACCOUNT_ENV)
        resolved_key = key or os.getenv(KEY_ENV)
        resolved_container = container or os.getenv(CONTAINER_ENV)
        if not resolved_account:
            raise BlobConfigurationError("account", f"pass account=... or set {ACCOUNT_ENV}")
        if not resolved_key:
            raise BlobConfigurationError("key", f"pass key=... or set {KEY_ENV}")
        if not resolved_container:
            raise BlobConfigurationError("container", f"pass container=... or set {CONTAINER_ENV}")

        if block_size is None:
            raw = os.getenv(BLOCK_SIZE_ENV)
            if raw is None or raw == "":
                block_size = DEFAULT_BLOCK_SIZE
            else:
                try:
                    block_size = int(raw)
                except ValueError as exc:
                    raise BlobConfigurationError(
                        "block_size", f"{BLOCK_SIZE_ENV} must be an integer, got {raw!r}"
                    ) from exc

        return cls.create(resolved_account, resolved_key, resolved_container, block_size)

    @property
    def max_blob_size(self) -> int:
        return self.block_size * MAX_BLOCK_COUNT


def validate_credentials(
    account: str,
    key: str,
    container: str,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> CredentialSet:
    """Validate all four settings and return the usable ``CredentialSet``.

    Raises:
        BlobConfigurationError: naming the first field that failed validation.
    """
    return CredentialSet.create(account, key, container, block_size)


__all__ = [
    "MAX_BLOCK_SIZE",
    "MAX_BLOCK_COUNT",
    "DEFAULT_BLOCK_SIZE",
    "CredentialSet",
    "validate_credentials",
    "validate_account",
    "validate_key",
    "validate_container",
    "validate_block_size",
]
