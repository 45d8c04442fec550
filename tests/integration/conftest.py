"""Fixtures for integration tests using respx mocking.

``FakeBlobService`` answers block, block-list and metadata requests the way the
storage service does, and refuses any request whose Shared-Key signature does
not match what it recomputes from the bytes on the wire.
"""

from __future__ import annotations

import threading
import time
import xml.etree.ElementTree as ET
from collections.abc import Generator, Iterable
from urllib.parse import unquote

import anyio
import httpx
import pytest
import respx

from bluestorage.blob import STANDARD_HEADERS, CredentialSet, RequestDescriptor, sign

from ..conftest import TEST_ACCOUNT, TEST_CONTAINER

BLOB_HOST = f"{TEST_ACCOUNT}.blob.core.windows.net"
BLOB_BASE_URL = f"https://{BLOB_HOST}/{TEST_CONTAINER}"

_STANDARD_LOWER = {name.lower() for name in STANDARD_HEADERS}


def descriptor_from_request(request: httpx.Request) -> RequestDescriptor:
    """Rebuild the signed descriptor from what actually went over the wire."""
    headers = {
        name: value
        for name, value in request.headers.items()
        if name.lower() in _STANDARD_LOWER or name.lower().startswith("x-ms-")
    }
    uri = request.url.host + request.url.raw_path.decode("ascii")
    return RequestDescriptor.build(
        request.method, uri, headers, version=request.headers["x-ms-version"]
    )


def operation_of(request: httpx.Request) -> str:
    return request.url.params.get("comp", "")


class FakeBlobService:
    def __init__(self, credentials: CredentialSet) -> None:
        self.credentials = credentials
        self.requests: list[httpx.Request] = []
        self.staged: dict[str, bytes] = {}
        self.committed: dict[str, bytes] = {}
        self.committed_ids: dict[str, list[str]] = {}
        self.existing: set[str] = set()
        self.bad_signatures = 0
        # 1-based index of the put-block request that should fail
        self.fail_block_at: int | None = None
        self.fail_block_status = 500
        # 1-based index of the put-block request whose connection is refused
        self.refuse_block_at: int | None = None
        self.fail_commit_status: int | None = None
        self.metadata_status: int | None = None
        # per-chunk sleep, keyed by the chunk's bytes
        self.delays: dict[bytes, float] = {}
        self._block_count = 0
        self._lock = threading.Lock()
        self.route: respx.Route | None = None

    @property
    def operations(self) -> list[str]:
        return [operation_of(request) for request in self.requests]

    def requests_for(self, operation: str) -> list[httpx.Request]:
        return [request for request in self.requests if operation_of(request) == operation]

    def add_existing(self, names: Iterable[str]) -> None:
        self.existing.update(names)

    def handle(self, request: httpx.Request) -> httpx.Response:
        delay = self.delays.get(request.content) if request.content else None
        if delay:
            time.sleep(delay)
        return self._respond(request)

    async def handle_async(self, request: httpx.Request) -> httpx.Response:
        delay = self.delays.get(request.content) if request.content else None
        if delay:
            await anyio.sleep(delay)
        return self._respond(request)

    def _respond(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
            if sign(descriptor_from_request(request), self.credentials) != request.headers.get(
                "authorization"
            ):
                self.bad_signatures += 1
                return self._error(403, "AuthenticationFailed")

            raw_path = request.url.raw_path.decode("ascii").split("?", 1)[0]
            blob_name = unquote(raw_path.split("/", 2)[2])
            operation = operation_of(request)
            if request.method == "GET" and operation == "metadata":
                return self._metadata(blob_name)
            if request.method == "PUT" and operation == "block":
                return self._put_block(request)
            if request.method == "PUT" and operation == "blocklist":
                return self._put_block_list(blob_name, request)
            return self._error(400, "InvalidQueryParameterValue")

    def _error(self, status: int, code: str) -> httpx.Response:
        return httpx.Response(
            status,
            headers={"x-ms-request-id": "service-error-id", "x-ms-error-code": code},
        )

    def _metadata(self, blob_name: str) -> httpx.Response:
        if self.metadata_status is not None:
            return self._error(self.metadata_status, "InternalError")
        if blob_name in self.existing or blob_name in self.committed:
            return httpx.Response(200, headers={"x-ms-request-id": "meta-id"})
        return self._error(404, "BlobNotFound")

    def _put_block(self, request: httpx.Request) -> httpx.Response:
        self._block_count += 1
        if self.refuse_block_at == self._block_count:
            raise httpx.ConnectError("connection refused", request=request)
        if self.fail_block_at == self._block_count:
            return self._error(self.fail_block_status, "InternalError")
        block_id = request.url.params["blockid"]
        self.staged[block_id] = request.content
        return httpx.Response(201, headers={"x-ms-request-id": f"block-{self._block_count}"})

    def _put_block_list(self, blob_name: str, request: httpx.Request) -> httpx.Response:
        if self.fail_commit_status is not None:
            return self._error(self.fail_commit_status, "InvalidBlockList")
        root = ET.fromstring(request.content)
        block_ids = [element.text or "" for element in root.findall("Uncommitted")]
        if any(block_id not in self.staged for block_id in block_ids):
            return self._error(400, "InvalidBlockList")
        self.committed_ids[blob_name] = block_ids
        self.committed[blob_name] = b"".join(self.staged[block_id] for block_id in block_ids)
        return httpx.Response(
            201,
            headers={"etag": '"0x8D1"', "x-ms-request-id": "commit-id"},
        )


@pytest.fixture
def blob_service(
    mock_env_clear, credentials: CredentialSet
) -> Generator[FakeBlobService, None, None]:
    """A signature-checking fake container mounted on the test account's host."""
    service = FakeBlobService(credentials)
    with respx.mock(assert_all_called=False) as router:
        service.route = router.route(host=BLOB_HOST).mock(side_effect=service.handle)
        yield service


@pytest.fixture
def async_blob_service(blob_service: FakeBlobService) -> FakeBlobService:
    """Same service, but chunk delays yield to the event loop."""
    assert blob_service.route is not None
    blob_service.route.side_effect = blob_service.handle_async
    return blob_service
