"""
kusto_ingest/errors.py

Error taxonomy for the ingestion client.

Argument and property errors are programmer errors raised before any I/O.
Everything else is operational and may be retried by the caller.
"""

from __future__ import annotations


class IngestClientError(RuntimeError):
    """
    Base class for all ingestion client failures.

    ``step`` names the stage that failed (``validate``, ``lease``,
    ``stage``, ``status``, ``notify``, ``poll``) when it is known.
    """

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.step = step


class InvalidArgumentError(IngestClientError, ValueError):
    """
    Raised when a caller passes a missing or malformed argument.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, step="validate")


class SourceNotFoundError(IngestClientError):
    """
    Raised when a local file source does not exist or cannot be read.
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"The file does not exist or is not readable: {path}", step="validate")
        self.path = path


class InvalidPropertiesError(IngestClientError, ValueError):
    """
    Raised when ingestion properties cannot produce a valid descriptor.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, step="validate")


class NoAvailableResourceError(IngestClientError):
    """
    Raised when the backend assigned no endpoint of the requested kind.
    """

    def __init__(self, kind: str) -> None:
        super().__init__(f"No ingestion resources available for kind '{kind}'.", step="lease")
        self.kind = kind


class ResourceDiscoveryFailedError(IngestClientError):
    """
    Raised when the backend resource-discovery call fails.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, step="lease")


class StagingFailedError(IngestClientError):
    """
    Raised when uploading a source to temporary storage fails.
    """

    def __init__(self, message: str, *, blob_name: str | None = None) -> None:
        super().__init__(message, step="stage")
        self.blob_name = blob_name


class DeliveryFailedError(IngestClientError):
    """
    Raised when the blob is in place but the status row or queue
    notification could not be written.

    ``blob_path`` is the already-staged location, so the caller can retry
    the notification through ``ingest_from_blob`` without re-uploading.
    """

    def __init__(self, message: str, *, blob_path: str, raw_data_size: int, step: str) -> None:
        super().__init__(message, step=step)
        self.blob_path = blob_path
        self.raw_data_size = raw_data_size


class UnsupportedReportMethodError(IngestClientError):
    """
    Raised when status polling is requested for queue-based reporting.
    """

    def __init__(self, report_method: str) -> None:
        super().__init__(
            f"Ingestion status polling is not supported for report method '{report_method}'.",
            step="poll",
        )
        self.report_method = report_method


class StatusLookupError(IngestClientError):
    """
    Raised when a status row cannot be read back from the status table.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, step="poll")


__all__ = [
    "DeliveryFailedError",
    "IngestClientError",
    "InvalidArgumentError",
    "InvalidPropertiesError",
    "NoAvailableResourceError",
    "ResourceDiscoveryFailedError",
    "SourceNotFoundError",
    "StagingFailedError",
    "StatusLookupError",
    "UnsupportedReportMethodError",
]
