from __future__ import annotations


class BlobError(Exception):
    """Base class for every failure raised by the blob client."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


class BlobConfigurationError(BlobError):
    """A credential or client setting failed validation. Raised before any I/O."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class BlobSizingError(BlobError):
    """The source cannot be uploaded with the configured block size and count."""

    def __init__(self, message: str, *, size: int | None = None, limit: int | None = None) -> None:
        self.size = size
        self.limit = limit
        super().__init__(message)


class BlobSigningError(BlobError):
    """A request descriptor was not populated enough to be signed."""

    def __init__(self, message: str, *, request_id: str | None = None) -> None:
        self.request_id = request_id
        if request_id:
            message = f"{message}. Request ID: {request_id}"
        super().__init__(message)


class BlobProtocolError(BlobError):
    """The service answered with a status code the operation does not accept."""

    def __init__(
        self,
        operation: str,
        status_code: int,
        request_id: str,
        *,
        service_request_id: str | None = None,
        error_code: str | None = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.request_id = request_id
        self.service_request_id = service_request_id
        self.error_code = error_code
        message = f"Unable to {operation}. Status: {status_code}. Request ID: {request_id}"
        if error_code:
            message += f". Error code: {error_code}"
        super().__init__(message)


class BlobNameExhaustedError(BlobError):
    """No free blob name was found within the attempt limit."""

    def __init__(self, blob_name: str, attempts: int) -> None:
        self.blob_name = blob_name
        self.attempts = attempts
        super().__init__(f"Could not find a unique name for {blob_name!r} after {attempts} attempts")


class BlobClientClosedError(BlobError):
    def __init__(self) -> None:
        super().__init__("Client is closed")


__all__ = [
    "BlobError",
    "BlobConfigurationError",
    "BlobSizingError",
    "BlobSigningError",
    "BlobProtocolError",
    "BlobNameExhaustedError",
    "BlobClientClosedError",
]
