"""
kusto_ingest/storage/azure_rest.py

Blob, queue and table primitives over the Azure Storage REST API.

Every resource URI handed out by the backend already carries a shared
access signature in its query string, so requests only need the
signature plus the service version header.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, BinaryIO
from urllib.parse import quote, urlsplit, urlunsplit
from xml.sax.saxutils import escape

import requests

from kusto_ingest.config import StorageSettings
from kusto_ingest.storage.base import ResourcePrimitives, StorageRequestError
from kusto_ingest.storage.compression import iter_blocks, iter_gzip_chunks, iter_stream_chunks

logger = logging.getLogger(__name__)


def split_sas(uri: str) -> tuple[str, str]:
    """
    Split a resource URI into its base URL and its signature query.
    """

    parts = urlsplit(uri)
    base = urlunsplit((parts.scheme, parts.netloc, parts.path.rstrip("/"), "", ""))
    return base, parts.query


def _with_query(base: str, query: str) -> str:
    return f"{base}?{query}" if query else base


def _block_id(index: int) -> str:
    return base64.b64encode(f"block-{index:08d}".encode("ascii")).decode("ascii")


class AzureStorageRestClient(ResourcePrimitives):
    """
    ``ResourcePrimitives`` implementation backed by ``requests``.
    """

    def __init__(
        self,
        *,
        settings: StorageSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()

    # Blob ---------------------------------------------------------------

    def upload_stream(
        self,
        stream: BinaryIO,
        *,
        container_uri: str,
        blob_name: str,
        compress: bool,
    ) -> str:
        container_base, sas = split_sas(container_uri)
        blob_base = f"{container_base}/{quote(blob_name)}"
        blob_url = _with_query(blob_base, sas)

        chunks = (
            iter_gzip_chunks(stream, self._settings.read_buffer_bytes)
            if compress
            else iter_stream_chunks(stream, self._settings.read_buffer_bytes)
        )

        block_ids: list[str] = []
        uploaded_bytes = 0
        for index, block in enumerate(iter_blocks(chunks, self._settings.upload_block_bytes)):
            block_id = _block_id(index)
            self._send(
                "PUT",
                blob_url,
                params={"comp": "block", "blockid": block_id},
                data=block,
                operation="put_block",
            )
            block_ids.append(block_id)
            uploaded_bytes += len(block)

        block_list = "".join(f"<Latest>{block_id}</Latest>" for block_id in block_ids)
        self._send(
            "PUT",
            blob_url,
            params={"comp": "blocklist"},
            data=f'<?xml version="1.0" encoding="utf-8"?><BlockList>{block_list}</BlockList>'.encode(
                "utf-8"
            ),
            headers={"Content-Type": "application/xml"},
            operation="put_block_list",
        )
        logger.debug(
            "Uploaded blob name=%s blocks=%s bytes=%s compressed=%s",
            blob_name,
            len(block_ids),
            uploaded_bytes,
            compress,
        )
        return blob_base

    def signed_location(self, blob_uri: str, *, container_uri: str) -> str:
        _, sas = split_sas(container_uri)
        return _with_query(blob_uri, sas)

    def get_blob_size(self, blob_uri: str) -> int:
        response = self._send("HEAD", blob_uri, operation="get_blob_properties")
        length = response.headers.get("Content-Length")
        if length is None:
            raise StorageRequestError("blob properties response has no Content-Length")
        return int(length)

    # Queue --------------------------------------------------------------

    def post_message(self, queue_uri: str, content: str) -> None:
        queue_base, sas = split_sas(queue_uri)
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        body = f"<QueueMessage><MessageText>{escape(encoded)}</MessageText></QueueMessage>"
        self._send(
            "POST",
            _with_query(f"{queue_base}/messages", sas),
            data=body.encode("utf-8"),
            headers={"Content-Type": "application/xml"},
            operation="put_message",
        )

    # Table --------------------------------------------------------------

    def insert_entity(self, table_uri: str, entity: dict[str, Any]) -> None:
        self._send(
            "POST",
            table_uri,
            json_body=entity,
            headers=self._table_headers(Prefer="return-no-content"),
            operation="insert_entity",
        )

    def get_entity(self, table_uri: str, *, partition_key: str, row_key: str) -> dict[str, Any]:
        table_base, sas = split_sas(table_uri)
        key = f"(PartitionKey='{_odata_quote(partition_key)}',RowKey='{_odata_quote(row_key)}')"
        response = self._send(
            "GET",
            _with_query(f"{table_base}{quote(key, safe='()=,')}", sas),
            headers=self._table_headers(),
            operation="get_entity",
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise StorageRequestError("table entity response was not valid JSON") from exc
        if not isinstance(payload, dict):
            raise StorageRequestError("table entity response was not an object")
        return payload

    # Helpers ------------------------------------------------------------

    def _table_headers(self, **extra: str) -> dict[str, str]:
        headers = {
            "Accept": "application/json;odata=nometadata",
            "DataServiceVersion": "3.0;NetFx",
            "MaxDataServiceVersion": "3.0;NetFx",
        }
        headers.update(extra)
        return headers

    def _send(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        params: dict[str, str] | None = None,
        data: bytes | None = None,
        json_body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        request_headers = {"x-ms-version": self._settings.api_version}
        request_headers.update(headers or {})
        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                data=data,
                json=json_body,
                headers=request_headers,
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.error("Storage request failed operation=%s error=%s", operation, exc)
            raise StorageRequestError(f"{operation}: transport failure") from exc

        if response.status_code >= 400:
            logger.error(
                "Storage request rejected operation=%s status=%s",
                operation,
                response.status_code,
            )
            raise StorageRequestError(
                f"{operation}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response


def _odata_quote(value: str) -> str:
    return value.replace("'", "''")
