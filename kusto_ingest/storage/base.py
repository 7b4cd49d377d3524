"""
Storage primitive interfaces used by the ingestion client.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, BinaryIO


class StorageRequestError(RuntimeError):
    """
    Raised when a blob, queue or table request fails.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_stale_resource(self) -> bool:
        """
        True for failures that usually mean the leased endpoint is dead.
        """

        return self.status_code in {401, 403, 404}


class ResourcePrimitives(ABC):
    """
    Stateless I/O against storage endpoints. No retry or routing policy.
    """

    @abstractmethod
    def upload_stream(
        self,
        stream: BinaryIO,
        *,
        container_uri: str,
        blob_name: str,
        compress: bool,
    ) -> str:
        """
        Upload ``stream`` as ``blob_name``, gzip-compressing inline when
        ``compress`` is set, and return the blob URI without credentials.
        """

    @abstractmethod
    def signed_location(self, blob_uri: str, *, container_uri: str) -> str:
        """
        Return ``blob_uri`` with the container's access signature attached.
        """

    @abstractmethod
    def post_message(self, queue_uri: str, content: str) -> None:
        """
        Post one message to a queue.
        """

    @abstractmethod
    def insert_entity(self, table_uri: str, entity: dict[str, Any]) -> None:
        """
        Insert one entity into a table.
        """

    @abstractmethod
    def get_entity(self, table_uri: str, *, partition_key: str, row_key: str) -> dict[str, Any]:
        """
        Read one entity from a table.
        """

    @abstractmethod
    def get_blob_size(self, blob_uri: str) -> int:
        """
        Return the stored byte size of a blob.
        """
