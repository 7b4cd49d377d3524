"""
kusto_ingest/services/resource_manager.py

Caches backend-assigned ingestion resources and hands them out round-robin.

Resources and the identity token are two independent refresh groups.
Each group is an immutable snapshot swapped atomically on refresh;
concurrent refreshes of one group collapse into a single backend call.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from kusto_ingest.connectors.base import ConnectorRequestError
from kusto_ingest.domain.resources import DiscoveredResources, ResourceKind
from kusto_ingest.errors import NoAvailableResourceError, ResourceDiscoveryFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResourceDiscovery(Protocol):
    def fetch_ingestion_resources(self) -> DiscoveredResources:
        ...

    def fetch_identity_token(self) -> str:
        ...


class ResourcePool:
    """
    Endpoints of one kind with a lock-guarded rotation cursor.
    """

    def __init__(self, kind: ResourceKind, uris: tuple[str, ...]) -> None:
        self.kind = kind
        self.uris = uris
        self._cursor = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.uris)

    def next_uri(self) -> str:
        if not self.uris:
            raise NoAvailableResourceError(self.kind.value)
        with self._lock:
            uri = self.uris[self._cursor]
            self._cursor = (self._cursor + 1) % len(self.uris)
        return uri


@dataclass
class _Snapshot(Generic[T]):
    value: T
    fetched_at: float
    invalidated: bool = False

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return not self.invalidated and (now - self.fetched_at) < ttl_seconds


class _RefreshGroup(Generic[T]):
    """
    One cached value with single-flight refresh.
    """

    def __init__(
        self,
        *,
        name: str,
        fetch: Callable[[], T],
        ttl_seconds: float,
        clock: Callable[[], float],
    ) -> None:
        self._name = name
        self._fetch = fetch
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: _Snapshot[T] | None = None
        self._refresh_lock = threading.Lock()
        self.fetch_count = 0

    def get(self) -> T:
        snapshot = self._snapshot
        if snapshot is not None and snapshot.is_fresh(self._clock(), self._ttl_seconds):
            return snapshot.value
        return self.refresh(stale=snapshot)

    def refresh(self, *, stale: _Snapshot[T] | None = None, force: bool = False) -> T:
        with self._refresh_lock:
            current = self._snapshot
            # Another caller already replaced the snapshot we saw as stale.
            if (
                not force
                and current is not None
                and current is not stale
                and current.is_fresh(self._clock(), self._ttl_seconds)
            ):
                return current.value

            self.fetch_count += 1
            try:
                value = self._fetch()
            except ConnectorRequestError as exc:
                logger.error("Ingestion %s refresh failed error=%s", self._name, exc)
                raise ResourceDiscoveryFailedError(
                    f"Failed to refresh ingestion {self._name}: {exc}"
                ) from exc

            self._snapshot = _Snapshot(value=value, fetched_at=self._clock())
            logger.debug("Ingestion %s refreshed", self._name)
            return value

    def invalidate(self) -> None:
        snapshot = self._snapshot
        if snapshot is not None:
            snapshot.invalidated = True


class ResourceManager:
    """
    Leases ingestion endpoints and serves the identity token.

    The cache is initialized lazily on first use, refreshed after
    ``refresh_interval_seconds`` or after ``invalidate()``, and holds no
    state that needs teardown.
    """

    def __init__(
        self,
        *,
        discovery: ResourceDiscovery,
        refresh_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._resources: _RefreshGroup[dict[ResourceKind, ResourcePool]] = _RefreshGroup(
            name="resources",
            fetch=lambda: self._build_pools(discovery.fetch_ingestion_resources()),
            ttl_seconds=refresh_interval_seconds,
            clock=clock,
        )
        self._token: _RefreshGroup[str] = _RefreshGroup(
            name="identity token",
            fetch=discovery.fetch_identity_token,
            ttl_seconds=refresh_interval_seconds,
            clock=clock,
        )

    def lease(self, kind: ResourceKind) -> str:
        """
        Return the next endpoint of ``kind`` in round-robin order.
        """

        pools = self._resources.get()
        pool = pools.get(kind)
        if pool is None or not len(pool):
            raise NoAvailableResourceError(kind.value)
        return pool.next_uri()

    def get_identity_token(self) -> str:
        return self._token.get()

    def refresh(self) -> None:
        """
        Force both groups to refresh from the backend now.
        """

        self._resources.refresh(force=True)
        self._token.refresh(force=True)

    def invalidate(self) -> None:
        """
        Mark cached resources and token stale; the next use refreshes.
        """

        logger.info("Ingestion resources invalidated")
        self._resources.invalidate()
        self._token.invalidate()

    @property
    def discovery_calls(self) -> int:
        return self._resources.fetch_count + self._token.fetch_count

    @staticmethod
    def _build_pools(discovered: DiscoveredResources) -> dict[ResourceKind, ResourcePool]:
        return {kind: ResourcePool(kind, uris) for kind, uris in discovered.endpoints.items()}
