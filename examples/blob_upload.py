import asyncio
import os
import tempfile

from dotenv import load_dotenv

from bluestorage.blob import AsyncBlobClient, BlobClient, UploadProgressEvent

load_dotenv()


def on_progress(e: UploadProgressEvent) -> None:
    print(f"progress: {e.loaded}/{e.total} bytes ({e.percentage}%)")


async def main() -> None:
    assert os.getenv("AZURE_STORAGE_ACCOUNT"), "Set AZURE_STORAGE_ACCOUNT"

    # Credentials come from AZURE_STORAGE_ACCOUNT / AZURE_STORAGE_KEY / AZURE_STORAGE_CONTAINER
    client = AsyncBlobClient(max_concurrency=4, cache_control_max_age=3600)
    client_sync = BlobClient()

    # 1) Pick a name that is not taken yet (sync client)
    name = client_sync.resolve_unique_name("examples/assets/hello.txt")
    print("resolved name:", name)

    # 2) Upload bytes in blocks (async client)
    data = b"hello from python " * 20_000
    uploaded = await client.upload_block_blob(
        name,
        data,
        content_type="text/plain",
        on_upload_progress=on_progress,
    )
    print("uploaded:", uploaded.url, uploaded.block_count, "blocks")

    # 3) Upload a local file (sync client)
    with tempfile.NamedTemporaryFile("wb", suffix=".bin", delete=False) as tmp:
        tmp.write(os.urandom(300_000))
        tmp_path = tmp.name
    try:
        result = client_sync.upload_block_blob("examples/assets/random.bin", tmp_path)
        print("uploaded file:", result.blob_name, result.size, "bytes", result.content_md5)
    finally:
        os.remove(tmp_path)

    # 4) Existence checks
    print("exists:", await client.blob_exists(name))
    print("missing:", client_sync.blob_exists("examples/assets/does-not-exist.txt"))

    await client.close()
    client_sync.close()


if __name__ == "__main__":
    asyncio.run(main())
