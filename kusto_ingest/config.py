"""
kusto_ingest/config.py

Environment-driven configuration for the ingestion client.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_RESOURCES_REFRESH_SECONDS = 3600.0
DEFAULT_UPLOAD_BLOCK_BYTES = 4 * 1024 * 1024
DEFAULT_READ_BUFFER_BYTES = 64 * 1024
DEFAULT_STORAGE_API_VERSION = "2021-08-06"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    HTTP behavior for calls to the data-management endpoint.

    Retries default to zero: discovery failures surface to the caller,
    who owns the retry policy.
    """

    timeout_seconds: float = 30.0
    max_retries: int = 0
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0


@dataclass(frozen=True)
class StorageSettings:
    """
    Settings for the blob/queue/table REST primitives.
    """

    api_version: str = DEFAULT_STORAGE_API_VERSION
    timeout_seconds: float = 60.0
    upload_block_bytes: int = DEFAULT_UPLOAD_BLOCK_BYTES
    read_buffer_bytes: int = DEFAULT_READ_BUFFER_BYTES


@dataclass(frozen=True)
class IngestClientSettings:
    """
    Top-level settings for the queued ingestion client.
    """

    dm_endpoint: str | None = None
    resources_refresh_seconds: float = DEFAULT_RESOURCES_REFRESH_SECONDS


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return data-management HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("KUSTO_HTTP_TIMEOUT_SECONDS", 30.0)),
        max_retries=max(0, _get_int_env("KUSTO_HTTP_MAX_RETRIES", 0)),
        backoff_initial_seconds=max(0.1, _get_float_env("KUSTO_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("KUSTO_HTTP_BACKOFF_MULTIPLIER", 2.0)),
    )


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """
    Return storage primitive settings from environment variables.
    """

    return StorageSettings(
        api_version=_get_str_env("AZURE_STORAGE_API_VERSION", DEFAULT_STORAGE_API_VERSION),
        timeout_seconds=max(1.0, _get_float_env("AZURE_STORAGE_TIMEOUT_SECONDS", 60.0)),
        upload_block_bytes=max(
            64 * 1024,
            _get_int_env("KUSTO_UPLOAD_BLOCK_BYTES", DEFAULT_UPLOAD_BLOCK_BYTES),
        ),
        read_buffer_bytes=max(
            1024,
            _get_int_env("KUSTO_READ_BUFFER_BYTES", DEFAULT_READ_BUFFER_BYTES),
        ),
    )


@lru_cache(maxsize=1)
def get_ingest_client_settings() -> IngestClientSettings:
    """
    Return cached ingestion client settings from environment variables.
    """

    return IngestClientSettings(
        dm_endpoint=_get_optional_str_env("KUSTO_DM_ENDPOINT"),
        resources_refresh_seconds=max(
            1.0,
            _get_float_env("KUSTO_RESOURCES_REFRESH_SECONDS", DEFAULT_RESOURCES_REFRESH_SECONDS),
        ),
    )


def configure_logging() -> None:
    """
    Configure root logging once for command-line entry points.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
