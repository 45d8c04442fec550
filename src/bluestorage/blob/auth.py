"""Shared-Key request signing.

Reference: https://learn.microsoft.com/rest/api/storageservices/authorize-with-shared-key
"""

from __future__ import annotations

import base64
import hashlib
import hmac

from .canonical import RequestDescriptor
from .credentials import CredentialSet
from .errors import BlobSigningError

AUTH_SCHEME = "SharedKey"


def build_string_to_sign(descriptor: RequestDescriptor) -> str:
    """
    Assemble the string-to-sign for ``descriptor``.

    Format::

        VERB\\n
        Content-Encoding\\n
        ...                      (the remaining standard headers, fixed order)
        Range\\n
        CanonicalizedHeaders     (each line already ends in \\n)
        CanonicalizedResource

    Raises:
        BlobSigningError: If the method, canonical headers or canonical
            resource is empty.
    """
    method = descriptor.method
    headers = descriptor.canonicalized_headers
    resource = descriptor.canonicalized_resource
    if not method or not headers or not resource:
        raise BlobSigningError(
            "Request is missing the method, canonicalized headers or canonicalized resource",
            request_id=descriptor.request_id or None,
        )

    lines = [method]
    for name, value in descriptor.standard_headers:
        # a zero Content-Length is signed as empty
        if name == "Content-Length" and value == "0":
            value = ""
        lines.append(value)
    return "\n".join(lines) + "\n" + headers + resource


def compute_signature(string_to_sign: str, key: bytes) -> str:
    """Base64(HMAC-SHA256(UTF8(string_to_sign), key))."""
    digest = hmac.new(key, string_to_sign.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def sign(descriptor: RequestDescriptor, credentials: CredentialSet) -> str:
    """Return the ``Authorization`` header value for ``descriptor``."""
    signature = compute_signature(build_string_to_sign(descriptor), credentials.key_bytes)
    return f"{AUTH_SCHEME} {credentials.account}:{signature}"


def signed_headers(descriptor: RequestDescriptor, credentials: CredentialSet) -> dict[str, str]:
    headers = descriptor.http_headers()
    headers["Authorization"] = sign(descriptor, credentials)
    return headers


__all__ = [
    "AUTH_SCHEME",
    "build_string_to_sign",
    "compute_signature",
    "sign",
    "signed_headers",
]
