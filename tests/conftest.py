"""Shared fixtures for all tests."""

from collections.abc import Generator

import pytest

from bluestorage.blob import CredentialSet

TEST_ACCOUNT = "testacct"
# base64 of b"testkey"
TEST_KEY = "dGVzdGtleQ=="
TEST_CONTAINER = "container"


@pytest.fixture
def mock_env_clear(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear all storage-related environment variables for testing.

    This ensures tests don't accidentally use real credentials from the environment.
    """
    env_vars_to_clear = [
        "AZURE_STORAGE_ACCOUNT",
        "AZURE_STORAGE_KEY",
        "AZURE_STORAGE_CONTAINER",
        "AZURE_STORAGE_ENDPOINT_SUFFIX",
        "BLUE_STORAGE_BLOCK_SIZE",
        "DEBUG",
        "BLUESTORAGE_DEBUG",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def credentials() -> CredentialSet:
    """Credentials with a tiny block size so uploads span several blocks."""
    return CredentialSet.create(TEST_ACCOUNT, TEST_KEY, TEST_CONTAINER, block_size=4)
