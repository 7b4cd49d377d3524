"""
kusto_ingest/domain/blob_info.py

The ingestion descriptor delivered to the backend, and its builder.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType

from kusto_ingest.domain.properties import IngestionProperties, ReportLevel, ReportMethod
from kusto_ingest.domain.sources import UNKNOWN_SIZE
from kusto_ingest.errors import InvalidPropertiesError


@dataclass(frozen=True)
class IngestionStatusInTableDescription:
    """
    Location of the status row the backend updates for one ingestion.
    """

    table_connection_string: str
    partition_key: str
    row_key: str


@dataclass(frozen=True)
class IngestionBlobInfo:
    """
    Immutable descriptor of one staged ingestion attempt.

    ``id`` correlates the queue message, the status row and the handle
    returned to the caller.
    """

    id: uuid.UUID
    blob_path: str
    raw_data_size: int
    database_name: str
    table_name: str
    retain_blob_on_success: bool = True
    report_level: ReportLevel = ReportLevel.FAILURES_ONLY
    report_method: ReportMethod = ReportMethod.QUEUE
    flush_immediately: bool = False
    ingestion_status_in_table: IngestionStatusInTableDescription | None = None
    additional_properties: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    source_message_creation_time: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


def _assemble_additional_properties(
    properties: IngestionProperties,
    identity_token: str | None,
) -> dict[str, str]:
    assembled: dict[str, str] = {"format": properties.data_format.value}
    if identity_token:
        assembled["authorizationContext"] = identity_token
    if properties.ingestion_mapping_reference:
        assembled["ingestionMappingReference"] = properties.ingestion_mapping_reference
        mapping_kind = properties.effective_mapping_kind
        if mapping_kind is not None:
            assembled["ingestionMappingType"] = mapping_kind.value
    tags = properties.tags
    if tags:
        assembled["tags"] = json.dumps(tags)
    if properties.ingest_if_not_exists:
        assembled["ingestIfNotExists"] = json.dumps(list(properties.ingest_if_not_exists))
    if properties.ignore_first_record:
        assembled["ignoreFirstRecord"] = "true"
    if properties.validation_policy is not None:
        assembled["ValidationPolicy"] = properties.validation_policy.to_json()
    assembled.update({str(key): str(value) for key, value in properties.additional_properties.items()})
    return assembled


def build_blob_info(
    blob_path: str,
    raw_data_size: int | None,
    properties: IngestionProperties,
    *,
    identity_token: str | None = None,
    status_table: str | None = None,
    source_id: uuid.UUID | None = None,
) -> IngestionBlobInfo:
    """
    Build the descriptor for one ingestion. Performs no I/O.

    A fresh random identity is generated unless ``source_id`` is given
    (the client passes the id it already embedded in the blob name).
    """

    database = (properties.database or "").strip()
    table = (properties.table or "").strip()
    if not database:
        raise InvalidPropertiesError("database name is blank")
    if not table:
        raise InvalidPropertiesError("table name is blank")
    if not blob_path or not blob_path.strip():
        raise InvalidPropertiesError("blob path is blank")

    ingestion_id = source_id or uuid.uuid4()
    status_description = None
    if properties.report_method.uses_status_table:
        if not status_table:
            raise InvalidPropertiesError(
                f"report method {properties.report_method.name} requires a status table resource"
            )
        status_description = IngestionStatusInTableDescription(
            table_connection_string=status_table,
            partition_key=str(ingestion_id),
            row_key=str(ingestion_id),
        )

    size = raw_data_size if raw_data_size is not None and raw_data_size >= 0 else UNKNOWN_SIZE

    return IngestionBlobInfo(
        id=ingestion_id,
        blob_path=blob_path,
        raw_data_size=size,
        database_name=database,
        table_name=table,
        retain_blob_on_success=properties.retain_blob_on_success,
        report_level=properties.report_level,
        report_method=properties.report_method,
        flush_immediately=properties.flush_immediately,
        ingestion_status_in_table=status_description,
        additional_properties=MappingProxyType(
            _assemble_additional_properties(properties, identity_token)
        ),
    )
