from __future__ import annotations

from collections.abc import Collection, Mapping
from urllib.parse import quote

import httpx

from .._http import BaseTransport
from .auth import signed_headers
from .canonical import API_VERSION, RequestDescriptor
from .credentials import CredentialSet
from .errors import BlobProtocolError
from .utils import content_md5, debug, http_date, make_request_id, quote_blob_name


class BlobRequestClient:
    """Builds, signs and sends single requests against one container.

    Every request gets a fresh ``x-ms-client-request-id`` and ``x-ms-date``;
    the descriptor is frozen before signing so the signed headers and the sent
    headers cannot drift apart.
    """

    def __init__(
        self,
        transport: BaseTransport,
        credentials: CredentialSet,
        *,
        version: str = API_VERSION,
    ) -> None:
        self._transport = transport
        self._credentials = credentials
        self._version = version

    @property
    def credentials(self) -> CredentialSet:
        return self._credentials

    def get_uri(self, blob_name: str = "", parameters: Mapping[str, str] | None = None) -> str:
        """Scheme-less URI for the container, or for ``blob_name`` inside it."""
        host = self._transport.config.host_for(self._credentials.account)
        uri = f"{host}/{self._credentials.container}"
        if blob_name:
            uri += "/" + quote_blob_name(blob_name)
        if parameters:
            uri += "?" + "&".join(
                f"{key}={quote(str(value), safe='')}" for key, value in parameters.items()
            )
        return uri

    def describe(
        self,
        method: str,
        blob_name: str = "",
        *,
        parameters: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RequestDescriptor:
        request_headers = {
            "x-ms-date": http_date(),
            "x-ms-client-request-id": make_request_id(),
        }
        if headers:
            request_headers.update(headers)
        return RequestDescriptor.build(
            method,
            self.get_uri(blob_name, parameters),
            request_headers,
            version=self._version,
        )

    async def send(
        self,
        descriptor: RequestDescriptor,
        *,
        operation: str,
        content: bytes | None = None,
        expected: Collection[int] = (200,),
    ) -> httpx.Response:
        """Sign and send ``descriptor``; any status outside ``expected`` raises."""
        headers = signed_headers(descriptor, self._credentials)
        debug(
            "%s %s (request id %s)",
            descriptor.method,
            descriptor.uri,
            descriptor.request_id,
        )
        response = await self._transport.send(
            descriptor.method,
            descriptor.uri,
            headers=headers,
            content=content,
        )
        if response.status_code not in expected:
            debug(
                "%s failed with %s (request id %s)",
                operation,
                response.status_code,
                descriptor.request_id,
            )
            raise BlobProtocolError(
                operation,
                response.status_code,
                descriptor.request_id,
                service_request_id=response.headers.get("x-ms-request-id"),
                error_code=response.headers.get("x-ms-error-code"),
            )
        return response

    async def put_block(self, blob_name: str, block_id: str, chunk: bytes) -> str:
        """Stage one block; returns ``block_id`` once the service answered 201."""
        descriptor = self.describe(
            "PUT",
            blob_name,
            parameters={"comp": "block", "blockid": block_id},
            headers={
                "Content-Length": str(len(chunk)),
                "Content-MD5": content_md5(chunk),
            },
        )
        await self.send(descriptor, operation="put block", content=chunk, expected=(201,))
        return block_id

    async def get_metadata(self, blob_name: str) -> httpx.Response:
        descriptor = self.describe("GET", blob_name, parameters={"comp": "metadata"})
        return await self.send(descriptor, operation="check blob", expected=(200, 404))


__all__ = ["BlobRequestClient"]
