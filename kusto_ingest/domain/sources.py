"""
kusto_ingest/domain/sources.py

Source descriptors accepted by the ingestion client.

The three variants form a closed union (``SourceInfo``); the client
dispatches on it once, at the top of ``ingest``.

``source_id`` pins the ingestion identity. Left unset, every ingest call
made with the source gets a fresh one.
"""

from __future__ import annotations

import os
import struct
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Union

UNKNOWN_SIZE = -1


class CompressionType(str, Enum):
    GZIP = "gz"
    ZIP = "zip"


def compression_from_name(name: str) -> CompressionType | None:
    """
    Infer an existing compression from a file or blob name suffix.
    """

    lowered = name.lower()
    if lowered.endswith(".gz"):
        return CompressionType.GZIP
    if lowered.endswith(".zip"):
        return CompressionType.ZIP
    return None


def _gzip_uncompressed_size(path: Path) -> int:
    # ISIZE trailer: uncompressed length modulo 2**32, little endian.
    with path.open("rb") as handle:
        handle.seek(-4, os.SEEK_END)
        return struct.unpack("<I", handle.read(4))[0]


@dataclass
class FileSourceInfo:
    """
    A local file to stage and ingest.
    """

    path: str | os.PathLike[str]
    raw_size: int | None = None
    source_id: uuid.UUID | None = None

    @property
    def file_path(self) -> Path:
        return Path(self.path)

    @property
    def compression(self) -> CompressionType | None:
        return compression_from_name(self.file_path.name)

    def exists(self) -> bool:
        candidate = self.file_path
        return candidate.is_file() and os.access(candidate, os.R_OK)

    def open(self) -> BinaryIO:
        return self.file_path.open("rb")

    def size_hint(self) -> int:
        """
        Best-effort uncompressed size of the file.
        """

        if self.raw_size is not None and self.raw_size >= 0:
            return self.raw_size
        compression = self.compression
        if compression is CompressionType.ZIP:
            return UNKNOWN_SIZE
        try:
            if compression is CompressionType.GZIP:
                return _gzip_uncompressed_size(self.file_path)
            return self.file_path.stat().st_size
        except (OSError, struct.error):
            return UNKNOWN_SIZE


@dataclass
class StreamSourceInfo:
    """
    A readable binary stream to stage and ingest.

    The client closes the stream after staging unless ``leave_open`` is
    set. ``compression`` marks a stream whose bytes are already
    compressed.
    """

    stream: BinaryIO | None
    raw_size: int | None = None
    leave_open: bool = False
    compression: CompressionType | None = None
    name_hint: str | None = None
    source_id: uuid.UUID | None = None

    def size_hint(self) -> int:
        if self.raw_size is not None and self.raw_size >= 0:
            return self.raw_size
        return UNKNOWN_SIZE


@dataclass
class BlobSourceInfo:
    """
    A blob that is already in storage; nothing needs staging.
    """

    blob_path: str
    raw_size: int | None = None
    source_id: uuid.UUID | None = None

    def size_hint(self) -> int:
        if self.raw_size is not None and self.raw_size >= 0:
            return self.raw_size
        return UNKNOWN_SIZE


SourceInfo = Union[FileSourceInfo, StreamSourceInfo, BlobSourceInfo]
