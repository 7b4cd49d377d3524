"""
kusto_ingest/domain/resources.py

Kinds of backend-assigned ingestion resources.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ResourceKind(str, Enum):
    """
    Resource type names as reported by ``.get ingestion resources``.
    """

    TEMP_STORAGE = "TempStorage"
    SECURED_READY_FOR_AGGREGATION_QUEUE = "SecuredReadyForAggregationQueue"
    INGESTIONS_STATUS_TABLE = "IngestionsStatusTable"
    FAILED_INGESTIONS_QUEUE = "FailedIngestionsQueue"
    SUCCESSFUL_INGESTIONS_QUEUE = "SuccessfulIngestionsQueue"

    @classmethod
    def from_type_name(cls, name: str) -> "ResourceKind | None":
        normalized = name.strip().lower()
        for kind in cls:
            if kind.value.lower() == normalized:
                return kind
        return None


@dataclass(frozen=True)
class DiscoveredResources:
    """
    Endpoint URIs per resource kind, in the order the backend listed them.
    """

    endpoints: dict[ResourceKind, tuple[str, ...]] = field(default_factory=dict)

    def uris(self, kind: ResourceKind) -> tuple[str, ...]:
        return self.endpoints.get(kind, ())
