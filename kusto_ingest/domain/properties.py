"""
kusto_ingest/domain/properties.py

Caller-facing ingestion properties and their enumerations.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, IntEnum


class ReportLevel(IntEnum):
    """
    Which ingestion outcomes the backend reports back.
    """

    FAILURES_ONLY = 0
    DO_NOT_REPORT = 1
    FAILURES_AND_SUCCESSES = 2


class ReportMethod(IntEnum):
    """
    Channel used by the backend to report ingestion outcomes.
    """

    QUEUE = 0
    TABLE = 1
    QUEUE_AND_TABLE = 2

    @property
    def uses_status_table(self) -> bool:
        return self in (ReportMethod.TABLE, ReportMethod.QUEUE_AND_TABLE)


class IngestionMappingKind(str, Enum):
    CSV = "Csv"
    JSON = "Json"
    AVRO = "Avro"
    PARQUET = "Parquet"
    ORC = "Orc"
    W3CLOGFILE = "W3CLogFile"


class DataFormat(str, Enum):
    """
    Source data formats understood by the backend.
    """

    CSV = "csv"
    TSV = "tsv"
    SCSV = "scsv"
    SOHSV = "sohsv"
    PSV = "psv"
    TXT = "txt"
    RAW = "raw"
    TSVE = "tsve"
    JSON = "json"
    SINGLEJSON = "singlejson"
    MULTIJSON = "multijson"
    AVRO = "avro"
    APACHEAVRO = "apacheavro"
    PARQUET = "parquet"
    ORC = "orc"
    W3CLOGFILE = "w3clogfile"

    @property
    def mapping_kind(self) -> IngestionMappingKind:
        if self in (DataFormat.JSON, DataFormat.SINGLEJSON, DataFormat.MULTIJSON):
            return IngestionMappingKind.JSON
        if self in (DataFormat.AVRO, DataFormat.APACHEAVRO):
            return IngestionMappingKind.AVRO
        if self is DataFormat.PARQUET:
            return IngestionMappingKind.PARQUET
        if self is DataFormat.ORC:
            return IngestionMappingKind.ORC
        if self is DataFormat.W3CLOGFILE:
            return IngestionMappingKind.W3CLOGFILE
        return IngestionMappingKind.CSV


class ValidationOptions(IntEnum):
    DO_NOT_VALIDATE = 0
    VALIDATE_CSV_INPUT_CONSTANT_COLUMNS = 1
    VALIDATE_CSV_INPUT_COLUMN_LEVEL_ONLY = 2


class ValidationImplications(IntEnum):
    FAIL = 0
    BEST_EFFORT = 1


@dataclass(frozen=True)
class ValidationPolicy:
    """
    Data validation the backend applies before ingesting.
    """

    options: ValidationOptions = ValidationOptions.DO_NOT_VALIDATE
    implications: ValidationImplications = ValidationImplications.BEST_EFFORT

    def to_json(self) -> str:
        return json.dumps(
            {
                "ValidationOptions": int(self.options),
                "ValidationImplications": int(self.implications),
            }
        )


@dataclass
class IngestionProperties:
    """
    Per-call ingestion options.

    ``retain_blob_on_success`` and ``flush_immediately`` keep the backend
    defaults (True/False) unless the caller overrides them.
    """

    database: str
    table: str
    data_format: DataFormat = DataFormat.CSV
    ingestion_mapping_reference: str | None = None
    ingestion_mapping_kind: IngestionMappingKind | None = None
    report_level: ReportLevel = ReportLevel.FAILURES_ONLY
    report_method: ReportMethod = ReportMethod.QUEUE
    flush_immediately: bool = False
    retain_blob_on_success: bool = True
    drop_by_tags: list[str] = field(default_factory=list)
    ingest_by_tags: list[str] = field(default_factory=list)
    additional_tags: list[str] = field(default_factory=list)
    ingest_if_not_exists: list[str] = field(default_factory=list)
    ignore_first_record: bool = False
    validation_policy: ValidationPolicy | None = None
    additional_properties: dict[str, str] = field(default_factory=dict)

    @property
    def tags(self) -> list[str]:
        return (
            list(self.additional_tags)
            + [f"drop-by:{tag}" for tag in self.drop_by_tags]
            + [f"ingest-by:{tag}" for tag in self.ingest_by_tags]
        )

    @property
    def effective_mapping_kind(self) -> IngestionMappingKind | None:
        if self.ingestion_mapping_reference is None:
            return None
        return self.ingestion_mapping_kind or self.data_format.mapping_kind
