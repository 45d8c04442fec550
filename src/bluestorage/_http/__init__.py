"""Shared HTTP infrastructure for the blob service clients."""

from .config import DEFAULT_ENDPOINT_SUFFIX, DEFAULT_SCHEME, DEFAULT_TIMEOUT, HTTPConfig
from .iter_coroutine import iter_coroutine
from .transport import (
    AsyncTransport,
    BaseTransport,
    BlockingTransport,
)

__all__ = [
    "DEFAULT_ENDPOINT_SUFFIX",
    "DEFAULT_SCHEME",
    "DEFAULT_TIMEOUT",
    "HTTPConfig",
    "iter_coroutine",
    "BaseTransport",
    "BlockingTransport",
    "AsyncTransport",
]
