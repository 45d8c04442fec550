"""Fixtures for live storage tests.

These tests require a real storage account set via environment variables:
- AZURE_STORAGE_ACCOUNT: storage account name
- AZURE_STORAGE_KEY: base64 account key
- AZURE_STORAGE_CONTAINER: an existing container the key can write to
"""

import os
import time
import uuid

import pytest

from bluestorage.blob import CredentialSet


def has_storage_credentials() -> bool:
    """Check if real storage account credentials are available."""
    return bool(
        os.getenv("AZURE_STORAGE_ACCOUNT")
        and os.getenv("AZURE_STORAGE_KEY")
        and os.getenv("AZURE_STORAGE_CONTAINER")
    )


requires_storage_credentials = pytest.mark.skipif(
    not has_storage_credentials(),
    reason="Requires AZURE_STORAGE_ACCOUNT, AZURE_STORAGE_KEY and AZURE_STORAGE_CONTAINER",
)


@pytest.fixture
def live_credentials() -> CredentialSet:
    """Credentials from the environment, with small blocks so uploads span several."""
    return CredentialSet.from_env(block_size=16 * 1024)


@pytest.fixture
def unique_blob_name() -> str:
    """Generate a unique blob name for testing.

    Format: bluestorage-test/{timestamp}-{uuid}/file.txt
    """
    timestamp = int(time.time())
    unique_id = uuid.uuid4().hex[:8]
    return f"bluestorage-test/{timestamp}-{unique_id}/file.txt"
