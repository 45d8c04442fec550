"""HTTP configuration for the blob service endpoint."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_ENDPOINT_SUFFIX = "blob.core.windows.net"
DEFAULT_SCHEME = "https"
DEFAULT_TIMEOUT = 60.0


@dataclass
class HTTPConfig:
    """Configuration for HTTP requests to the blob service."""

    endpoint_suffix: str = DEFAULT_ENDPOINT_SUFFIX
    scheme: str = DEFAULT_SCHEME
    timeout: float = DEFAULT_TIMEOUT
    default_headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> HTTPConfig:
        """Build a config, letting ``AZURE_STORAGE_ENDPOINT_SUFFIX`` override the host suffix."""
        suffix = os.getenv("AZURE_STORAGE_ENDPOINT_SUFFIX") or DEFAULT_ENDPOINT_SUFFIX
        return cls(endpoint_suffix=suffix)

    def host_for(self, account: str) -> str:
        return f"{account}.{self.endpoint_suffix.strip('.')}"

    def build_url(self, uri: str) -> str:
        """Turn a scheme-less request URI into an absolute URL."""
        return f"{self.scheme}://{uri.lstrip('/')}"

    def get_headers(self, headers: dict[str, str] | None = None) -> dict[str, str]:
        request_headers = dict(self.default_headers)
        if headers:
            request_headers.update(headers)
        return request_headers


__all__ = ["HTTPConfig", "DEFAULT_ENDPOINT_SUFFIX", "DEFAULT_SCHEME", "DEFAULT_TIMEOUT"]
