"""
Wire schema for the ingestion notification posted to the aggregation queue.

Field names are a contract with the backend and must not change.
"""

from __future__ import annotations

from datetime import datetime
from types import MappingProxyType
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from kusto_ingest.domain.blob_info import IngestionBlobInfo, IngestionStatusInTableDescription
from kusto_ingest.domain.properties import ReportLevel, ReportMethod


class StatusTableReference(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    table_connection_string: str = Field(alias="TableConnectionString")
    partition_key: str = Field(alias="PartitionKey")
    row_key: str = Field(alias="RowKey")


class IngestionMessage(BaseModel):
    """
    JSON body of one queued ingestion request.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: UUID = Field(alias="Id")
    blob_path: str = Field(alias="BlobPath", min_length=1)
    raw_data_size: int = Field(alias="RawDataSize")
    database_name: str = Field(alias="DatabaseName", min_length=1)
    table_name: str = Field(alias="TableName", min_length=1)
    retain_blob_on_success: bool = Field(default=True, alias="RetainBlobOnSuccess")
    flush_immediately: bool = Field(default=False, alias="FlushImmediately")
    report_level: ReportLevel = Field(default=ReportLevel.FAILURES_ONLY, alias="ReportLevel")
    report_method: ReportMethod = Field(default=ReportMethod.QUEUE, alias="ReportMethod")
    source_message_creation_time: datetime = Field(alias="SourceMessageCreationTime")
    ingestion_status_in_table: StatusTableReference | None = Field(
        default=None, alias="IngestionStatusInTable"
    )
    additional_properties: dict[str, str] = Field(default_factory=dict, alias="AdditionalProperties")

    @classmethod
    def from_blob_info(cls, blob_info: IngestionBlobInfo) -> "IngestionMessage":
        status_table = None
        if blob_info.ingestion_status_in_table is not None:
            description = blob_info.ingestion_status_in_table
            status_table = StatusTableReference(
                table_connection_string=description.table_connection_string,
                partition_key=description.partition_key,
                row_key=description.row_key,
            )
        return cls(
            id=blob_info.id,
            blob_path=blob_info.blob_path,
            raw_data_size=blob_info.raw_data_size,
            database_name=blob_info.database_name,
            table_name=blob_info.table_name,
            retain_blob_on_success=blob_info.retain_blob_on_success,
            flush_immediately=blob_info.flush_immediately,
            report_level=blob_info.report_level,
            report_method=blob_info.report_method,
            source_message_creation_time=blob_info.source_message_creation_time,
            ingestion_status_in_table=status_table,
            additional_properties=dict(blob_info.additional_properties),
        )

    def to_blob_info(self) -> IngestionBlobInfo:
        status_description = None
        if self.ingestion_status_in_table is not None:
            reference = self.ingestion_status_in_table
            status_description = IngestionStatusInTableDescription(
                table_connection_string=reference.table_connection_string,
                partition_key=reference.partition_key,
                row_key=reference.row_key,
            )
        return IngestionBlobInfo(
            id=self.id,
            blob_path=self.blob_path,
            raw_data_size=self.raw_data_size,
            database_name=self.database_name,
            table_name=self.table_name,
            retain_blob_on_success=self.retain_blob_on_success,
            report_level=self.report_level,
            report_method=self.report_method,
            flush_immediately=self.flush_immediately,
            ingestion_status_in_table=status_description,
            additional_properties=MappingProxyType(dict(self.additional_properties)),
            source_message_creation_time=self.source_message_creation_time,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


def serialize_blob_info(blob_info: IngestionBlobInfo) -> str:
    """
    Serialize a descriptor into the queue message body.
    """

    return IngestionMessage.from_blob_info(blob_info).to_json()


def parse_ingestion_message(payload: str) -> IngestionMessage:
    return IngestionMessage.model_validate_json(payload)
