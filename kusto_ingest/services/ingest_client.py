"""
kusto_ingest/services/ingest_client.py

Queued ingestion client: stages sources into temporary storage and posts
the ingestion notification to the backend's aggregation queue.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import BinaryIO

from kusto_ingest.config import (
    get_external_http_settings,
    get_ingest_client_settings,
    get_storage_settings,
)
from kusto_ingest.connectors import ResourceDiscoveryConnector
from kusto_ingest.domain.blob_info import IngestionBlobInfo, build_blob_info
from kusto_ingest.domain.properties import IngestionProperties
from kusto_ingest.domain.resources import ResourceKind
from kusto_ingest.domain.sources import (
    UNKNOWN_SIZE,
    BlobSourceInfo,
    FileSourceInfo,
    SourceInfo,
    StreamSourceInfo,
)
from kusto_ingest.domain.status import IngestionStatus, OperationStatus
from kusto_ingest.errors import (
    DeliveryFailedError,
    IngestClientError,
    InvalidArgumentError,
    InvalidPropertiesError,
    NoAvailableResourceError,
    SourceNotFoundError,
    StagingFailedError,
)
from kusto_ingest.logging_utils import log_event, redact_uri
from kusto_ingest.schemas import serialize_blob_info
from kusto_ingest.services.ingestion_result import IngestionResult
from kusto_ingest.services.resource_manager import ResourceManager
from kusto_ingest.storage import AzureStorageRestClient, ResourcePrimitives, StorageRequestError

logger = logging.getLogger(__name__)


class QueuedIngestClient:
    """
    Public entry point for queued ingestion.

    Each call performs at most three remote writes (blob upload, optional
    status row, queue message) and nothing is retried here: failures are
    raised with the step that failed so callers can apply their own
    retry policy.
    """

    def __init__(
        self,
        *,
        resource_manager: ResourceManager,
        primitives: ResourcePrimitives,
    ) -> None:
        self._resource_manager = resource_manager
        self._primitives = primitives

    def ingest(self, source: SourceInfo, properties: IngestionProperties) -> IngestionResult:
        """
        Ingest any source variant.
        """

        if isinstance(source, FileSourceInfo):
            return self.ingest_from_file(source, properties)
        if isinstance(source, StreamSourceInfo):
            return self.ingest_from_stream(source, properties)
        if isinstance(source, BlobSourceInfo):
            return self.ingest_from_blob(source, properties)
        if source is None:
            raise InvalidArgumentError("source is None")
        raise InvalidArgumentError(f"Unsupported source type: {type(source).__name__}")

    def ingest_from_file(
        self,
        source: FileSourceInfo,
        properties: IngestionProperties,
    ) -> IngestionResult:
        self._validate_arguments(source, properties)
        if not source.path or not str(source.path).strip():
            raise InvalidArgumentError("file path is blank")
        if not source.exists():
            raise SourceNotFoundError(str(source.path))

        ingestion_id = source.source_id or uuid.uuid4()
        status_table, token = self._resolve_reporting(properties)
        compress = source.compression is None
        try:
            stream = source.open()
        except OSError as exc:
            raise SourceNotFoundError(str(source.path)) from exc
        with stream:
            blob_path = self._stage(
                stream,
                name=source.file_path.name,
                compress=compress,
                properties=properties,
                source_id=ingestion_id,
            )

        return self._deliver(
            blob_path=blob_path,
            raw_data_size=source.size_hint(),
            properties=properties,
            source_id=ingestion_id,
            status_table=status_table,
            identity_token=token,
            staged=True,
        )

    def ingest_from_stream(
        self,
        source: StreamSourceInfo,
        properties: IngestionProperties,
    ) -> IngestionResult:
        self._validate_arguments(source, properties)
        if source.stream is None:
            raise InvalidArgumentError("stream is None")

        ingestion_id = source.source_id or uuid.uuid4()
        try:
            status_table, token = self._resolve_reporting(properties)
            name = source.name_hint or f"stream.{properties.data_format.value}"
            blob_path = self._stage(
                source.stream,
                name=name,
                compress=source.compression is None,
                properties=properties,
                source_id=ingestion_id,
            )
        finally:
            if not source.leave_open:
                source.stream.close()

        return self._deliver(
            blob_path=blob_path,
            raw_data_size=source.size_hint(),
            properties=properties,
            source_id=ingestion_id,
            status_table=status_table,
            identity_token=token,
            staged=True,
        )

    def ingest_from_blob(
        self,
        source: BlobSourceInfo,
        properties: IngestionProperties,
    ) -> IngestionResult:
        self._validate_arguments(source, properties)
        if not source.blob_path or not source.blob_path.strip():
            raise InvalidArgumentError("blob path is blank")

        ingestion_id = source.source_id or uuid.uuid4()
        status_table, token = self._resolve_reporting(properties)
        raw_data_size = source.size_hint()
        if raw_data_size == UNKNOWN_SIZE:
            raw_data_size = self._lookup_blob_size(source.blob_path)

        return self._deliver(
            blob_path=source.blob_path,
            raw_data_size=raw_data_size,
            properties=properties,
            source_id=ingestion_id,
            status_table=status_table,
            identity_token=token,
            staged=False,
        )

    # Steps --------------------------------------------------------------

    @staticmethod
    def _validate_arguments(source: SourceInfo | None, properties: IngestionProperties | None) -> None:
        if source is None:
            raise InvalidArgumentError("source is None")
        if properties is None:
            raise InvalidArgumentError("ingestion properties is None")
        if not (properties.database or "").strip():
            raise InvalidPropertiesError("database name is blank")
        if not (properties.table or "").strip():
            raise InvalidPropertiesError("table name is blank")

    def _resolve_reporting(self, properties: IngestionProperties) -> tuple[str | None, str]:
        """
        Resolve the status table (for table reporting) and the identity
        token before anything is uploaded.
        """

        status_table = None
        if properties.report_method.uses_status_table:
            try:
                status_table = self._resource_manager.lease(ResourceKind.INGESTIONS_STATUS_TABLE)
            except NoAvailableResourceError as exc:
                raise InvalidPropertiesError(
                    f"report method {properties.report_method.name} requires a status table, "
                    "but none is available"
                ) from exc
        return status_table, self._resource_manager.get_identity_token()

    def _stage(
        self,
        stream: BinaryIO,
        *,
        name: str,
        compress: bool,
        properties: IngestionProperties,
        source_id: uuid.UUID,
    ) -> str:
        container_uri = self._resource_manager.lease(ResourceKind.TEMP_STORAGE)
        blob_name = f"{properties.database}__{properties.table}__{source_id}__{name}"
        if compress:
            blob_name += ".gz"

        try:
            blob_uri = self._primitives.upload_stream(
                stream,
                container_uri=container_uri,
                blob_name=blob_name,
                compress=compress,
            )
        except StorageRequestError as exc:
            self._invalidate_if_stale(exc)
            logger.error("Staging upload failed blob=%s error=%s", blob_name, exc)
            raise StagingFailedError(f"Failed to upload {blob_name}: {exc}", blob_name=blob_name) from exc

        log_event(
            logger,
            logging.DEBUG,
            "blob_staged",
            source_id=source_id,
            blob_name=blob_name,
            container=container_uri,
            compressed=compress,
        )
        return self._primitives.signed_location(blob_uri, container_uri=container_uri)

    def _deliver(
        self,
        *,
        blob_path: str,
        raw_data_size: int,
        properties: IngestionProperties,
        source_id: uuid.UUID,
        status_table: str | None,
        identity_token: str,
        staged: bool,
    ) -> IngestionResult:
        blob_info = build_blob_info(
            blob_path,
            raw_data_size,
            properties,
            identity_token=identity_token,
            status_table=status_table,
            source_id=source_id,
        )

        if status_table is not None:
            self._insert_pending_status(blob_info, status_table)

        try:
            queue_uri = self._resource_manager.lease(ResourceKind.SECURED_READY_FOR_AGGREGATION_QUEUE)
        except IngestClientError as exc:
            if not staged:
                raise
            raise self._delivery_failed(blob_info, "lease", exc) from exc

        try:
            self._primitives.post_message(queue_uri, serialize_blob_info(blob_info))
        except StorageRequestError as exc:
            self._invalidate_if_stale(exc)
            raise self._delivery_failed(blob_info, "notify", exc) from exc

        log_event(
            logger,
            logging.INFO,
            "ingestion_queued",
            source_id=blob_info.id,
            blob_path=blob_info.blob_path,
            queue=queue_uri,
            database=blob_info.database_name,
            table=blob_info.table_name,
            raw_data_size=blob_info.raw_data_size,
            report_method=blob_info.report_method.name,
        )
        return IngestionResult(
            source_id=blob_info.id,
            report_method=blob_info.report_method,
            blob_path=blob_info.blob_path,
            primitives=self._primitives,
            status_table=status_table,
        )

    def _insert_pending_status(self, blob_info: IngestionBlobInfo, status_table: str) -> None:
        status = IngestionStatus(
            ingestion_source_id=blob_info.id,
            ingestion_source_path=redact_uri(blob_info.blob_path),
            database=blob_info.database_name,
            table=blob_info.table_name,
            status=OperationStatus.PENDING,
        )
        try:
            self._primitives.insert_entity(status_table, status.to_entity())
        except StorageRequestError as exc:
            self._invalidate_if_stale(exc)
            raise self._delivery_failed(blob_info, "status", exc) from exc

    def _lookup_blob_size(self, blob_path: str) -> int:
        try:
            return self._primitives.get_blob_size(blob_path)
        except StorageRequestError as exc:
            logger.warning("Blob size lookup failed, size left unknown error=%s", exc)
            return UNKNOWN_SIZE

    def _invalidate_if_stale(self, exc: StorageRequestError) -> None:
        if exc.is_stale_resource:
            self._resource_manager.invalidate()

    @staticmethod
    def _delivery_failed(blob_info: IngestionBlobInfo, step: str, exc: Exception) -> DeliveryFailedError:
        logger.error(
            "Ingestion delivery failed source_id=%s step=%s error=%s",
            blob_info.id,
            step,
            exc,
        )
        return DeliveryFailedError(
            f"Ingestion {blob_info.id} was not delivered at step '{step}': {exc}",
            blob_path=blob_info.blob_path,
            raw_data_size=blob_info.raw_data_size,
            step=step,
        )


def create_ingest_client(
    *,
    token_provider: Callable[[], str],
    dm_endpoint: str | None = None,
) -> QueuedIngestClient:
    """
    Build a client wired to the configured data-management endpoint.
    """

    settings = get_ingest_client_settings()
    endpoint = dm_endpoint or settings.dm_endpoint
    if not endpoint:
        raise InvalidArgumentError("No data-management endpoint configured. Set KUSTO_DM_ENDPOINT.")

    discovery = ResourceDiscoveryConnector(
        endpoint=endpoint,
        token_provider=token_provider,
        http_settings=get_external_http_settings(),
    )
    resource_manager = ResourceManager(
        discovery=discovery,
        refresh_interval_seconds=settings.resources_refresh_seconds,
    )
    return QueuedIngestClient(
        resource_manager=resource_manager,
        primitives=AzureStorageRestClient(settings=get_storage_settings()),
    )
