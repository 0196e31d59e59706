# Overview: Request transports for the sync client (httpx over the network, or the Flask app in-process).

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from .settings import BackendKind, SyncSettings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    A request that did not produce a 2xx response.

    status_code is None when the server could not be reached at all.
    """

    def __init__(self, status_code: Optional[int], message: str, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.body = body

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


class Transport(Protocol):
    def request(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> Any:
        ...

    def close(self) -> None:
        ...


def _error_message(status_code: int, body: Any) -> str:
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Request failed with status {status_code}"


class HttpTransport:
    """Talks to a running API server with httpx; no retries."""

    def __init__(self, base_url: str, timeout: float = 5.0, client: Optional[httpx.Client] = None):
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def request(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> Any:
        try:
            response = self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            raise ApiError(None, f"{method} {path} failed: {e}") from e

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = response.text

        if response.status_code >= 400:
            raise ApiError(response.status_code, _error_message(response.status_code, body), body)
        return body

    def close(self) -> None:
        self._client.close()


class AppTransport:
    """Calls a Flask app through its test client, without a network hop."""

    def __init__(self, app):
        self._app = app
        self._client = app.test_client()

    def request(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> Any:
        response = self._client.open(path, method=method, json=json, query_string=params)
        body = response.get_json(silent=True)
        if response.status_code >= 400:
            raise ApiError(response.status_code, _error_message(response.status_code, body), body)
        return body

    def close(self) -> None:
        pass


def build_transport(settings: SyncSettings, app=None) -> Transport:
    if settings.backend is BackendKind.HTTP:
        logger.debug("Using HTTP transport at %s", settings.api_url)
        return HttpTransport(settings.api_url, timeout=settings.http_timeout)

    if settings.backend is BackendKind.IN_PROCESS:
        if app is None:
            from sentra import create_app
            app = create_app()
        return AppTransport(app)

    raise ValueError(f"Unsupported backend: {settings.backend}")
