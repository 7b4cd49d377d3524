"""
kusto_ingest/connectors/base.py

Base connector abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import requests

from kusto_ingest.config import ExternalHTTPSettings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class ConnectorRequestError(RuntimeError):
    """
    Raised when a connector request fails.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BaseConnector:
    """
    Shared request handling for calls to the data-management endpoint.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = http_settings.timeout_seconds
        self._max_retries = http_settings.max_retries
        self._backoff_initial_seconds = http_settings.backoff_initial_seconds
        self._backoff_multiplier = http_settings.backoff_multiplier

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        json_body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Execute an HTTP request and return parsed JSON.
        """

        response = self._request(method=method, url=url, json_body=json_body, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise ConnectorRequestError(f"{self.source}: response was not valid JSON.") from exc

    def _request(
        self,
        *,
        method: str,
        url: str,
        json_body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """
        Execute an HTTP request with optional exponential backoff.
        """

        request_headers = {"x-ms-client-request-id": f"KIC.{self.source};{uuid.uuid4()}"}
        request_headers.update(headers or {})

        last_error: Exception | None = None
        last_status: int | None = None
        for attempt in range(self._max_retries + 1):
            try:
                response = self._session.request(
                    method=method,
                    url=url,
                    json=json_body,
                    headers=request_headers,
                    timeout=self._timeout_seconds,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                last_status = exc.response.status_code if exc.response is not None else None
                if last_status not in RETRYABLE_STATUS_CODES:
                    logger.error(
                        "Connector request failed source=%s status=%s url=%s error=%s",
                        self.source,
                        last_status,
                        url,
                        exc,
                    )
                    raise ConnectorRequestError(
                        f"{self.source}: non-retryable request failure.",
                        status_code=last_status,
                    ) from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc
                last_status = None
            except requests.RequestException as exc:
                logger.error(
                    "Connector request failed source=%s url=%s error=%s",
                    self.source,
                    url,
                    exc,
                )
                raise ConnectorRequestError(f"{self.source}: request could not be sent.") from exc

            if attempt >= self._max_retries:
                break

            backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
            logger.warning(
                "Connector request retry source=%s attempt=%s/%s wait_seconds=%.2f url=%s",
                self.source,
                attempt + 1,
                self._max_retries,
                backoff_seconds,
                url,
            )
            time.sleep(backoff_seconds)

        logger.error(
            "Connector request failed source=%s url=%s error=%s",
            self.source,
            url,
            last_error,
        )
        raise ConnectorRequestError(
            f"{self.source}: request failed.",
            status_code=last_status,
        ) from last_error
