from __future__ import annotations

import json
import unittest
import uuid
from datetime import datetime, timezone

from kusto_ingest.domain.properties import (
    DataFormat,
    IngestionMappingKind,
    IngestionProperties,
    ReportMethod,
    ValidationImplications,
    ValidationOptions,
    ValidationPolicy,
)
from kusto_ingest.domain.resources import ResourceKind
from kusto_ingest.domain.status import IngestionStatus, OperationStatus


class TestIngestionStatus(unittest.TestCase):
    def setUp(self) -> None:
        self.source_id = uuid.UUID("8c1f0f5e-6f0a-4b0e-9a53-3d2f5f4b7c11")

    def test_entity_is_keyed_by_source_id(self) -> None:
        status = IngestionStatus(
            ingestion_source_id=self.source_id,
            ingestion_source_path="https://acct.blob.core.windows.net/c/b.gz",
            database="db1",
            table="t1",
            updated_on=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        )

        entity = status.to_entity()

        self.assertEqual(entity["PartitionKey"], str(self.source_id))
        self.assertEqual(entity["RowKey"], str(self.source_id))
        self.assertEqual(entity["Status"], "Pending")
        self.assertEqual(entity["UpdatedOn"], "2024-05-01T12:00:00+00:00")
        self.assertNotIn("ErrorCode", entity)

    def test_parses_backend_entity(self) -> None:
        entity = {
            "PartitionKey": str(self.source_id),
            "RowKey": str(self.source_id),
            "IngestionSourcePath": "https://acct.blob.core.windows.net/c/b.gz",
            "Database": "db1",
            "Table": "t1",
            "Status": "Failed",
            "UpdatedOn": "2024-05-01T12:03:00Z",
            "OperationId": "00000000-0000-0000-0000-000000000001",
            "ErrorCode": "BadRequest_EmptyBlob",
            "FailureStatus": "Permanent",
            "OriginalEntitySize": "0",
        }

        status = IngestionStatus.from_entity(entity)

        self.assertEqual(status.ingestion_source_id, self.source_id)
        self.assertIs(status.status, OperationStatus.FAILED)
        self.assertEqual(status.updated_on, datetime(2024, 5, 1, 12, 3, tzinfo=timezone.utc))
        self.assertEqual(status.operation_id, uuid.UUID(int=1))
        self.assertIsNone(status.activity_id)
        self.assertEqual(status.error_code, "BadRequest_EmptyBlob")
        self.assertEqual(status.original_entity_size, 0)


class TestProperties(unittest.TestCase):
    def test_tags_are_prefixed(self) -> None:
        props = IngestionProperties(
            database="db1",
            table="t1",
            additional_tags=["plain"],
            drop_by_tags=["d"],
            ingest_by_tags=["i"],
        )

        self.assertEqual(props.tags, ["plain", "drop-by:d", "ingest-by:i"])

    def test_mapping_kind_follows_format_only_with_reference(self) -> None:
        without_reference = IngestionProperties(database="db1", table="t1", data_format=DataFormat.MULTIJSON)
        with_reference = IngestionProperties(
            database="db1",
            table="t1",
            data_format=DataFormat.MULTIJSON,
            ingestion_mapping_reference="m1",
        )

        self.assertIsNone(without_reference.effective_mapping_kind)
        self.assertIs(with_reference.effective_mapping_kind, IngestionMappingKind.JSON)

    def test_report_method_table_usage(self) -> None:
        self.assertFalse(ReportMethod.QUEUE.uses_status_table)
        self.assertTrue(ReportMethod.TABLE.uses_status_table)
        self.assertTrue(ReportMethod.QUEUE_AND_TABLE.uses_status_table)

    def test_validation_policy_json(self) -> None:
        policy = ValidationPolicy(
            options=ValidationOptions.VALIDATE_CSV_INPUT_CONSTANT_COLUMNS,
            implications=ValidationImplications.FAIL,
        )

        self.assertEqual(
            json.loads(policy.to_json()),
            {"ValidationOptions": 1, "ValidationImplications": 0},
        )


class TestResourceKind(unittest.TestCase):
    def test_type_names_match_case_insensitively(self) -> None:
        self.assertIs(ResourceKind.from_type_name("tempstorage"), ResourceKind.TEMP_STORAGE)
        self.assertIs(
            ResourceKind.from_type_name(" SecuredReadyForAggregationQueue "),
            ResourceKind.SECURED_READY_FOR_AGGREGATION_QUEUE,
        )
        self.assertIsNone(ResourceKind.from_type_name("SomethingElse"))


if __name__ == "__main__":
    unittest.main()
