"""
kusto_ingest/services/ingestion_result.py

Handle returned to callers for tracking one queued ingestion.
"""

from __future__ import annotations

import uuid

from kusto_ingest.domain.properties import ReportMethod
from kusto_ingest.domain.status import IngestionStatus
from kusto_ingest.errors import StatusLookupError, UnsupportedReportMethodError
from kusto_ingest.storage.base import ResourcePrimitives, StorageRequestError


class IngestionResult:
    """
    Trackable identity of one ingestion.

    Only table-based reporting can be polled; queue reports are consumed
    by a separate listener, so ``get_ingestion_status`` raises
    ``UnsupportedReportMethodError`` for them. Check ``is_trackable``
    first to avoid the exception.
    """

    def __init__(
        self,
        *,
        source_id: uuid.UUID,
        report_method: ReportMethod,
        blob_path: str,
        primitives: ResourcePrimitives,
        status_table: str | None = None,
    ) -> None:
        self.source_id = source_id
        self.report_method = report_method
        self.blob_path = blob_path
        self.status_table = status_table
        self._primitives = primitives

    @property
    def is_trackable(self) -> bool:
        return self.report_method.uses_status_table and self.status_table is not None

    def get_ingestion_status(self) -> IngestionStatus:
        if not self.is_trackable:
            raise UnsupportedReportMethodError(self.report_method.name)

        key = str(self.source_id)
        try:
            entity = self._primitives.get_entity(
                self.status_table,  # type: ignore[arg-type]
                partition_key=key,
                row_key=key,
            )
        except StorageRequestError as exc:
            raise StatusLookupError(f"Failed to read ingestion status for {key}: {exc}") from exc
        return IngestionStatus.from_entity(entity)

    def __repr__(self) -> str:
        return (
            f"IngestionResult(source_id={self.source_id}, "
            f"report_method={self.report_method.name}, trackable={self.is_trackable})"
        )
