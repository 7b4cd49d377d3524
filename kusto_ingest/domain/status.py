"""
kusto_ingest/domain/status.py

Ingestion status rows kept in the backend status table.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class OperationStatus(str, Enum):
    PENDING = "Pending"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    QUEUED = "Queued"
    SKIPPED = "Skipped"
    PARTIALLY_SUCCEEDED = "PartiallySucceeded"


@dataclass(frozen=True)
class IngestionStatus:
    """
    One ingestion's status as recorded in the status table.
    """

    ingestion_source_id: uuid.UUID
    ingestion_source_path: str
    database: str
    table: str
    status: OperationStatus = OperationStatus.PENDING
    updated_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation_id: uuid.UUID | None = None
    activity_id: uuid.UUID | None = None
    error_code: str | None = None
    failure_status: str | None = None
    details: str | None = None
    original_entity_size: int | None = None

    def to_entity(self) -> dict[str, Any]:
        """
        Serialize as a table entity keyed by the ingestion source id.
        """

        key = str(self.ingestion_source_id)
        entity: dict[str, Any] = {
            "PartitionKey": key,
            "RowKey": key,
            "IngestionSourceId": key,
            "IngestionSourcePath": self.ingestion_source_path,
            "Database": self.database,
            "Table": self.table,
            "Status": self.status.value,
            "UpdatedOn": self.updated_on.isoformat(),
        }
        optional = {
            "OperationId": str(self.operation_id) if self.operation_id else None,
            "ActivityId": str(self.activity_id) if self.activity_id else None,
            "ErrorCode": self.error_code,
            "FailureStatus": self.failure_status,
            "Details": self.details,
            "OriginalEntitySize": self.original_entity_size,
        }
        entity.update({name: value for name, value in optional.items() if value is not None})
        return entity

    @classmethod
    def from_entity(cls, entity: dict[str, Any]) -> "IngestionStatus":
        """
        Parse a table entity returned by the status table.
        """

        source_id = entity.get("IngestionSourceId") or entity.get("RowKey")
        updated_raw = entity.get("UpdatedOn")
        return cls(
            ingestion_source_id=uuid.UUID(str(source_id)),
            ingestion_source_path=str(entity.get("IngestionSourcePath") or ""),
            database=str(entity.get("Database") or ""),
            table=str(entity.get("Table") or ""),
            status=OperationStatus(entity.get("Status", OperationStatus.PENDING.value)),
            updated_on=_parse_datetime(updated_raw) if updated_raw else datetime.now(timezone.utc),
            operation_id=_optional_uuid(entity.get("OperationId")),
            activity_id=_optional_uuid(entity.get("ActivityId")),
            error_code=entity.get("ErrorCode"),
            failure_status=entity.get("FailureStatus"),
            details=entity.get("Details"),
            original_entity_size=(
                int(entity["OriginalEntitySize"]) if entity.get("OriginalEntitySize") is not None else None
            ),
        )


def _optional_uuid(value: Any) -> uuid.UUID | None:
    if not value:
        return None
    return uuid.UUID(str(value))


def _parse_datetime(value: str) -> datetime:
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed
