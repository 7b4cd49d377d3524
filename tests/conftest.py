"""
Shared fakes and fixtures for ingestion client tests.

The fakes stand in for the backend discovery endpoint and the storage
primitives so tests can count interactions and inject failures.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Any, BinaryIO

import pytest

from kusto_ingest.connectors.base import ConnectorRequestError
from kusto_ingest.domain.resources import DiscoveredResources, ResourceKind
from kusto_ingest.services.ingest_client import QueuedIngestClient
from kusto_ingest.services.resource_manager import ResourceManager
from kusto_ingest.storage.base import ResourcePrimitives, StorageRequestError
from kusto_ingest.storage.compression import iter_gzip_chunks

TESTDATA_DIR = Path(__file__).resolve().parent / "testdata"

STORAGE_1 = "https://acct1.blob.core.windows.net/tempstorage1?sv=2021&sig=one"
STORAGE_2 = "https://acct2.blob.core.windows.net/tempstorage2?sv=2021&sig=two"
QUEUE_1 = "https://acct1.queue.core.windows.net/readyforaggregation1?sv=2021&sig=q1"
QUEUE_2 = "https://acct2.queue.core.windows.net/readyforaggregation2?sv=2021&sig=q2"
STATUS_TABLE = "https://acct1.table.core.windows.net/ingestionsstatus?sv=2021&sig=t1"
IDENTITY_TOKEN = "identity-token"


class FakeDiscovery:
    """
    In-memory stand-in for the resource-discovery connector.
    """

    def __init__(
        self,
        endpoints: dict[ResourceKind, tuple[str, ...]] | None = None,
        *,
        token: str = IDENTITY_TOKEN,
        delay_seconds: float = 0.0,
    ) -> None:
        self.endpoints = dict(endpoints or {})
        self.token = token
        self.delay_seconds = delay_seconds
        self.resource_calls = 0
        self.token_calls = 0
        self.fail = False
        self._lock = threading.Lock()

    def fetch_ingestion_resources(self) -> DiscoveredResources:
        with self._lock:
            self.resource_calls += 1
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if self.fail:
            raise ConnectorRequestError("discovery unavailable", status_code=503)
        return DiscoveredResources(endpoints=dict(self.endpoints))

    def fetch_identity_token(self) -> str:
        with self._lock:
            self.token_calls += 1
        if self.fail:
            raise ConnectorRequestError("discovery unavailable", status_code=503)
        return self.token


class FakePrimitives(ResourcePrimitives):
    """
    Records every storage interaction in call order.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.uploads: dict[str, bytes] = {}
        self.messages: list[tuple[str, str]] = []
        self.entities: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.blob_sizes: dict[str, int] = {}
        self.failures: dict[str, StorageRequestError] = {}

    def _maybe_fail(self, operation: str) -> None:
        error = self.failures.get(operation)
        if error is not None:
            raise error

    def upload_stream(
        self,
        stream: BinaryIO,
        *,
        container_uri: str,
        blob_name: str,
        compress: bool,
    ) -> str:
        self.calls.append(
            ("upload_stream", {"container_uri": container_uri, "blob_name": blob_name, "compress": compress})
        )
        self._maybe_fail("upload_stream")
        content = b"".join(iter_gzip_chunks(stream, 16)) if compress else stream.read()
        blob_uri = f"{container_uri.split('?', 1)[0]}/{blob_name}"
        self.uploads[blob_uri] = content
        return blob_uri

    def signed_location(self, blob_uri: str, *, container_uri: str) -> str:
        return f"{blob_uri}?{container_uri.split('?', 1)[1]}"

    def post_message(self, queue_uri: str, content: str) -> None:
        self.calls.append(("post_message", {"queue_uri": queue_uri}))
        self._maybe_fail("post_message")
        self.messages.append((queue_uri, content))

    def insert_entity(self, table_uri: str, entity: dict[str, Any]) -> None:
        self.calls.append(("insert_entity", {"table_uri": table_uri, "entity": entity}))
        self._maybe_fail("insert_entity")
        self.entities[(table_uri, entity["PartitionKey"], entity["RowKey"])] = dict(entity)

    def get_entity(self, table_uri: str, *, partition_key: str, row_key: str) -> dict[str, Any]:
        self.calls.append(("get_entity", {"table_uri": table_uri}))
        self._maybe_fail("get_entity")
        try:
            return dict(self.entities[(table_uri, partition_key, row_key)])
        except KeyError:
            raise StorageRequestError("entity not found", status_code=404) from None

    def get_blob_size(self, blob_uri: str) -> int:
        self.calls.append(("get_blob_size", {"blob_uri": blob_uri}))
        self._maybe_fail("get_blob_size")
        if blob_uri not in self.blob_sizes:
            raise StorageRequestError("blob not found", status_code=404)
        return self.blob_sizes[blob_uri]

    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture()
def default_endpoints() -> dict[ResourceKind, tuple[str, ...]]:
    return {
        ResourceKind.TEMP_STORAGE: (STORAGE_1, STORAGE_2),
        ResourceKind.SECURED_READY_FOR_AGGREGATION_QUEUE: (QUEUE_1, QUEUE_2),
        ResourceKind.INGESTIONS_STATUS_TABLE: (STATUS_TABLE,),
    }


@pytest.fixture()
def make_discovery() -> type[FakeDiscovery]:
    return FakeDiscovery


@pytest.fixture()
def discovery(default_endpoints: dict[ResourceKind, tuple[str, ...]]) -> FakeDiscovery:
    return FakeDiscovery(default_endpoints)


@pytest.fixture()
def resource_manager(discovery: FakeDiscovery) -> ResourceManager:
    return ResourceManager(discovery=discovery, refresh_interval_seconds=3600.0)


@pytest.fixture()
def primitives() -> FakePrimitives:
    return FakePrimitives()


@pytest.fixture()
def client(resource_manager: ResourceManager, primitives: FakePrimitives) -> QueuedIngestClient:
    return QueuedIngestClient(resource_manager=resource_manager, primitives=primitives)


@pytest.fixture()
def testdata_path() -> Path:
    return TESTDATA_DIR / "testdata.json"
