"""
kusto_ingest/domain package marker.
"""

from kusto_ingest.domain.blob_info import (
    IngestionBlobInfo,
    IngestionStatusInTableDescription,
    build_blob_info,
)
from kusto_ingest.domain.properties import (
    DataFormat,
    IngestionMappingKind,
    IngestionProperties,
    ReportLevel,
    ReportMethod,
    ValidationImplications,
    ValidationOptions,
    ValidationPolicy,
)
from kusto_ingest.domain.resources import DiscoveredResources, ResourceKind
from kusto_ingest.domain.sources import (
    UNKNOWN_SIZE,
    BlobSourceInfo,
    CompressionType,
    FileSourceInfo,
    SourceInfo,
    StreamSourceInfo,
)
from kusto_ingest.domain.status import IngestionStatus, OperationStatus

__all__ = [
    "BlobSourceInfo",
    "CompressionType",
    "DataFormat",
    "DiscoveredResources",
    "FileSourceInfo",
    "IngestionBlobInfo",
    "IngestionMappingKind",
    "IngestionProperties",
    "IngestionStatus",
    "IngestionStatusInTableDescription",
    "OperationStatus",
    "ReportLevel",
    "ReportMethod",
    "ResourceKind",
    "SourceInfo",
    "StreamSourceInfo",
    "UNKNOWN_SIZE",
    "ValidationImplications",
    "ValidationOptions",
    "ValidationPolicy",
    "build_blob_info",
]
