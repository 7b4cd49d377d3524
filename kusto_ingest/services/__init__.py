"""
kusto_ingest/services package marker.
"""

from kusto_ingest.services.ingest_client import QueuedIngestClient, create_ingest_client
from kusto_ingest.services.ingestion_result import IngestionResult
from kusto_ingest.services.resource_manager import ResourceManager, ResourcePool

__all__ = [
    "IngestionResult",
    "QueuedIngestClient",
    "ResourceManager",
    "ResourcePool",
    "create_ingest_client",
]
