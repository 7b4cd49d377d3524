"""
kusto_ingest/storage package marker.
"""

from kusto_ingest.storage.azure_rest import AzureStorageRestClient
from kusto_ingest.storage.base import ResourcePrimitives, StorageRequestError

__all__ = [
    "AzureStorageRestClient",
    "ResourcePrimitives",
    "StorageRequestError",
]
