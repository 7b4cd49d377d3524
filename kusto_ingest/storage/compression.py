"""
Streaming helpers for staging payloads in bounded memory.
"""

from __future__ import annotations

import zlib
from collections.abc import Iterable, Iterator
from typing import BinaryIO

GZIP_WBITS = 16 + zlib.MAX_WBITS


def iter_stream_chunks(stream: BinaryIO, read_size: int) -> Iterator[bytes]:
    """
    Yield raw chunks of at most ``read_size`` bytes until EOF.
    """

    while True:
        chunk = stream.read(read_size)
        if not chunk:
            return
        yield chunk


def iter_gzip_chunks(stream: BinaryIO, read_size: int) -> Iterator[bytes]:
    """
    Yield a gzip member for ``stream`` piece by piece.
    """

    compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, GZIP_WBITS)
    for chunk in iter_stream_chunks(stream, read_size):
        compressed = compressor.compress(chunk)
        if compressed:
            yield compressed
    tail = compressor.flush()
    if tail:
        yield tail


def iter_blocks(chunks: Iterable[bytes], block_size: int) -> Iterator[bytes]:
    """
    Regroup chunks into blocks of exactly ``block_size`` bytes (last one
    may be shorter).
    """

    buffer = bytearray()
    for chunk in chunks:
        buffer.extend(chunk)
        while len(buffer) >= block_size:
            yield bytes(buffer[:block_size])
            del buffer[:block_size]
    if buffer:
        yield bytes(buffer)
