"""
kusto_ingest/schemas package marker.
"""

from kusto_ingest.schemas.ingestion_message import (
    IngestionMessage,
    StatusTableReference,
    parse_ingestion_message,
    serialize_blob_info,
)

__all__ = [
    "IngestionMessage",
    "StatusTableReference",
    "parse_ingestion_message",
    "serialize_blob_info",
]
