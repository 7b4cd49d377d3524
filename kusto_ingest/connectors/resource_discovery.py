"""
kusto_ingest/connectors/resource_discovery.py

Connector for the data-management endpoint that hands out ingestion
resources and the identity token.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import requests

from kusto_ingest.config import ExternalHTTPSettings
from kusto_ingest.connectors.base import BaseConnector, ConnectorRequestError
from kusto_ingest.domain.resources import DiscoveredResources, ResourceKind

logger = logging.getLogger(__name__)

MGMT_PATH = "/v1/rest/mgmt"
DEFAULT_DATABASE = "NetDefaultDB"
GET_INGESTION_RESOURCES = ".get ingestion resources"
GET_IDENTITY_TOKEN = ".get kusto identity token"


class ResourceDiscoveryConnector(BaseConnector):
    """
    Executes the discovery management commands and parses their tables.

    ``token_provider`` returns a bearer token for the endpoint; acquiring
    it is the caller's concern.
    """

    def __init__(
        self,
        *,
        endpoint: str,
        token_provider: Callable[[], str],
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="resource_discovery", http_settings=http_settings, session=session)
        self._endpoint = endpoint.rstrip("/")
        self._token_provider = token_provider

    def fetch_ingestion_resources(self) -> DiscoveredResources:
        rows = self._execute(GET_INGESTION_RESOURCES)
        endpoints: dict[ResourceKind, list[str]] = {}
        for row in rows:
            type_name = row.get("ResourceTypeName")
            storage_root = row.get("StorageRoot")
            if not type_name or not storage_root:
                continue
            kind = ResourceKind.from_type_name(str(type_name))
            if kind is None:
                logger.debug("Ignoring unknown ingestion resource type=%s", type_name)
                continue
            endpoints.setdefault(kind, []).append(str(storage_root))

        logger.info(
            "Discovered ingestion resources %s",
            " ".join(f"{kind.value}={len(uris)}" for kind, uris in sorted(endpoints.items())),
        )
        return DiscoveredResources(
            endpoints={kind: tuple(uris) for kind, uris in endpoints.items()},
        )

    def fetch_identity_token(self) -> str:
        rows = self._execute(GET_IDENTITY_TOKEN)
        for row in rows:
            token = row.get("AuthorizationContext")
            if token:
                return str(token)
        raise ConnectorRequestError(f"{self.source}: identity token response had no AuthorizationContext.")

    def _execute(self, command: str) -> list[dict[str, Any]]:
        try:
            access_token = self._token_provider()
        except Exception as exc:
            logger.error("Access token provider failed source=%s error=%s", self.source, exc)
            raise ConnectorRequestError(f"{self.source}: access token provider failed.") from exc

        payload = self._request_json(
            method="POST",
            url=f"{self._endpoint}{MGMT_PATH}",
            json_body={"db": DEFAULT_DATABASE, "csl": command},
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )
        return self._primary_rows(payload, command)

    def _primary_rows(self, payload: Any, command: str) -> list[dict[str, Any]]:
        tables = payload.get("Tables") if isinstance(payload, dict) else None
        if not isinstance(tables, list) or not tables or not isinstance(tables[0], dict):
            raise ConnectorRequestError(f"{self.source}: unexpected response shape for '{command}'.")

        table = tables[0]
        columns = table.get("Columns", [])
        rows = table.get("Rows", [])
        if not isinstance(columns, list) or not all(isinstance(column, dict) for column in columns):
            raise ConnectorRequestError(f"{self.source}: response columns malformed for '{command}'.")
        if not isinstance(rows, list):
            raise ConnectorRequestError(f"{self.source}: response rows missing for '{command}'.")

        names = [column.get("ColumnName") for column in columns]
        return [dict(zip(names, row)) for row in rows if isinstance(row, list)]
