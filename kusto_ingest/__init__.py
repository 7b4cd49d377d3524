"""
Queued ingestion client for a tabular data service.
"""

from kusto_ingest.domain import (
    BlobSourceInfo,
    CompressionType,
    DataFormat,
    FileSourceInfo,
    IngestionMappingKind,
    IngestionProperties,
    IngestionStatus,
    OperationStatus,
    ReportLevel,
    ReportMethod,
    ResourceKind,
    StreamSourceInfo,
    ValidationPolicy,
)
from kusto_ingest.errors import (
    DeliveryFailedError,
    IngestClientError,
    InvalidArgumentError,
    InvalidPropertiesError,
    NoAvailableResourceError,
    ResourceDiscoveryFailedError,
    SourceNotFoundError,
    StagingFailedError,
    StatusLookupError,
    UnsupportedReportMethodError,
)
from kusto_ingest.services import (
    IngestionResult,
    QueuedIngestClient,
    ResourceManager,
    create_ingest_client,
)

__all__ = [
    "BlobSourceInfo",
    "CompressionType",
    "DataFormat",
    "DeliveryFailedError",
    "FileSourceInfo",
    "IngestClientError",
    "IngestionMappingKind",
    "IngestionProperties",
    "IngestionResult",
    "IngestionStatus",
    "InvalidArgumentError",
    "InvalidPropertiesError",
    "NoAvailableResourceError",
    "OperationStatus",
    "QueuedIngestClient",
    "ReportLevel",
    "ReportMethod",
    "ResourceDiscoveryFailedError",
    "ResourceKind",
    "ResourceManager",
    "SourceNotFoundError",
    "StagingFailedError",
    "StatusLookupError",
    "StreamSourceInfo",
    "UnsupportedReportMethodError",
    "ValidationPolicy",
    "create_ingest_client",
]
