"""
kusto_ingest/connectors package marker.
"""

from kusto_ingest.connectors.base import BaseConnector, ConnectorRequestError
from kusto_ingest.connectors.resource_discovery import ResourceDiscoveryConnector

__all__ = [
    "BaseConnector",
    "ConnectorRequestError",
    "ResourceDiscoveryConnector",
]
