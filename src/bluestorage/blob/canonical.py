"""Shared-Key request canonicalization.

A request is described once by an immutable :class:`RequestDescriptor`; the
signer and the transport both read from it, so the bytes that were signed are
exactly the bytes that go on the wire.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from .errors import BlobSigningError

API_VERSION = "2015-04-05"
EXTENSION_PREFIX = "x-ms-"
VERSION_HEADER = "x-ms-version"

# Order matters: this is the line order of the string-to-sign.
STANDARD_HEADERS: tuple[str, ...] = (
    "Content-Encoding",
    "Content-Language",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "If-Modified-Since",
    "If-Match",
    "If-None-Match",
    "If-Unmodified-Since",
    "Range",
)
_STANDARD_BY_LOWER = {name.lower(): name for name in STANDARD_HEADERS}


def _split_uri(uri: str):
    return urlsplit("//" + uri.split("://", 1)[-1].lstrip("/"))


def _fold(value: str) -> str:
    return " ".join(str(value).split())


def canonical_headers(ext_headers: Mapping[str, str], version: str = API_VERSION) -> str:
    """Render the ``x-ms-*`` headers as sorted ``name:value\\n`` lines."""
    selected: dict[str, str] = {}
    for key, value in ext_headers.items():
        name = key.strip().lower()
        if name.startswith(EXTENSION_PREFIX):
            selected[name] = _fold(value)
    selected[VERSION_HEADER] = version
    return "".join(f"{name}:{selected[name]}\n" for name in sorted(selected))


def canonical_resource(uri: str) -> str:
    """``/account/path`` with the query removed; the account is the host's first label."""
    parts = _split_uri(uri)
    host = parts.hostname or ""
    account = host.split(".", 1)[0]
    return f"/{account}{parts.path or '/'}"


def canonical_query(uri: str) -> str:
    """Query parameters as ``name:value`` lines, sorted by name, without a trailing newline."""
    query = _split_uri(uri).query
    if not query:
        return ""
    params: dict[str, list[str]] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        name, _, value = pair.partition("=")
        params.setdefault(unquote(name).lower(), []).append(unquote(value))
    return "\n".join(f"{name}:{','.join(params[name])}" for name in sorted(params))


def signed_resource(uri: str) -> str:
    """The resource block of the string-to-sign: path plus query lines."""
    resource = canonical_resource(uri)
    query = canonical_query(uri)
    return f"{resource}\n{query}" if query else resource


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    uri: str
    standard_headers: tuple[tuple[str, str], ...]
    extension_headers: tuple[tuple[str, str], ...]
    version: str = API_VERSION

    @classmethod
    def build(
        cls,
        method: str,
        uri: str,
        headers: Mapping[str, str] | None = None,
        *,
        version: str = API_VERSION,
    ) -> RequestDescriptor:
        """Split ``headers`` into the fixed standard set and the ``x-ms-*`` set.

        Any standard header not given is present with an empty value. Headers
        that are neither standard nor ``x-ms-*`` cannot be signed and are
        rejected.
        """
        standard = {name: "" for name in STANDARD_HEADERS}
        extension: dict[str, str] = {}
        for key, value in (headers or {}).items():
            lower = key.strip().lower()
            if lower in _STANDARD_BY_LOWER:
                standard[_STANDARD_BY_LOWER[lower]] = "" if value is None else str(value)
            elif lower.startswith(EXTENSION_PREFIX):
                extension[lower] = str(value)
            else:
                raise BlobSigningError(f"header {key!r} is not part of the signed header set")
        extension[VERSION_HEADER] = version
        return cls(
            method=(method or "").upper(),
            uri=uri,
            standard_headers=tuple((name, standard[name]) for name in STANDARD_HEADERS),
            extension_headers=tuple(sorted(extension.items())),
            version=version,
        )

    def header(self, name: str) -> str:
        lower = name.lower()
        for key, value in self.standard_headers:
            if key.lower() == lower:
                return value
        for key, value in self.extension_headers:
            if key == lower:
                return value
        return ""

    @property
    def request_id(self) -> str:
        return self.header("x-ms-client-request-id")

    @property
    def canonicalized_headers(self) -> str:
        return canonical_headers(dict(self.extension_headers), self.version)

    @property
    def canonicalized_resource(self) -> str:
        # includes the query lines, as the service canonicalizes them
        return signed_resource(self.uri)

    @property
    def canonicalized_query(self) -> str:
        return canonical_query(self.uri)

    def http_headers(self) -> dict[str, str]:
        """Headers to put on the wire; empty standard headers are left out."""
        headers = {name: value for name, value in self.standard_headers if value != ""}
        headers.update(self.extension_headers)
        return headers


__all__ = [
    "API_VERSION",
    "STANDARD_HEADERS",
    "RequestDescriptor",
    "canonical_headers",
    "canonical_resource",
    "canonical_query",
    "signed_resource",
]
