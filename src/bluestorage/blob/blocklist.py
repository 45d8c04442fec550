"""Block list bookkeeping and the commit request that turns staged blocks into a blob."""

from __future__ import annotations

from collections.abc import Iterable
from xml.sax.saxutils import escape

import httpx

from ._core import BlobRequestClient
from .utils import content_md5, debug

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
COMMIT_CONTENT_TYPE = "text/plain; charset=UTF-8"


class BlockList:
    """Block ids keyed by chunk index.

    Blocks may finish staging in any order; :attr:`block_ids` always returns
    them in chunk order, which is the byte order of the committed blob.
    """

    def __init__(self, block_ids: Iterable[str] = ()) -> None:
        self._by_index: dict[int, str] = {}
        for index, block_id in enumerate(block_ids):
            self.add(index, block_id)

    def add(self, index: int, block_id: str) -> None:
        if index in self._by_index:
            raise ValueError(f"block {index} was already recorded")
        self._by_index[index] = block_id

    @property
    def block_ids(self) -> list[str]:
        return [self._by_index[index] for index in sorted(self._by_index)]

    def __len__(self) -> int:
        return len(self._by_index)

    def __iter__(self):
        return iter(self.block_ids)

    def to_xml(self) -> str:
        parts = [XML_DECLARATION, "<BlockList>"]
        for block_id in self.block_ids:
            parts.append(f"<Uncommitted>{escape(block_id)}</Uncommitted>")
        parts.append("</BlockList>")
        return "".join(parts)


async def commit_block_list(
    request_client: BlobRequestClient,
    blob_name: str,
    block_list: BlockList,
    *,
    cache_control: str | None = None,
    content_type: str | None = None,
    content_md5_value: str | None = None,
) -> httpx.Response:
    """PUT the block list; the blob only changes if the service answers 201."""
    body = block_list.to_xml().encode("utf-8")
    headers = {
        "Content-Length": str(len(body)),
        "Content-MD5": content_md5(body),
        "Content-Type": COMMIT_CONTENT_TYPE,
    }
    if cache_control:
        headers["x-ms-blob-cache-control"] = cache_control
    if content_type:
        headers["x-ms-blob-content-type"] = content_type
    if content_md5_value:
        headers["x-ms-blob-content-md5"] = content_md5_value

    descriptor = request_client.describe(
        "PUT",
        blob_name,
        parameters={"comp": "blocklist"},
        headers=headers,
    )
    debug("committing %d blocks to %s", len(block_list), blob_name)
    return await request_client.send(
        descriptor,
        operation="commit block list",
        content=body,
        expected=(201,),
    )


__all__ = ["BlockList", "commit_block_list", "XML_DECLARATION", "COMMIT_CONTENT_TYPE"]
