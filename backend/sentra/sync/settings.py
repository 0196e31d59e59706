# Overview: Settings for the sync client, read from the environment.

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path


class BackendKind(enum.Enum):
    """How the sync client reaches the API."""
    HTTP = "http"
    IN_PROCESS = "in_process"


@dataclass(frozen=True)
class SyncSettings:
    backend: BackendKind = BackendKind.HTTP
    api_url: str = "http://localhost:5000"
    http_timeout: float = 5.0
    session_file: Path = Path.home() / ".sentra" / "session.json"

    @classmethod
    def from_env(cls) -> "SyncSettings":
        """
        SENTRA_BACKEND       http | in_process (default http)
        SENTRA_API_URL       base URL for the http backend
        SENTRA_HTTP_TIMEOUT  seconds, passed to httpx
        SENTRA_SESSION_FILE  where the signed-in user is remembered
        """
        raw_backend = os.environ.get("SENTRA_BACKEND", BackendKind.HTTP.value).strip().lower()
        try:
            backend = BackendKind(raw_backend)
        except ValueError:
            raise ValueError(
                f"SENTRA_BACKEND must be one of: {', '.join(k.value for k in BackendKind)}"
            ) from None

        session_file = os.environ.get("SENTRA_SESSION_FILE")
        return cls(
            backend=backend,
            api_url=os.environ.get("SENTRA_API_URL", cls.api_url).rstrip("/"),
            http_timeout=float(os.environ.get("SENTRA_HTTP_TIMEOUT", cls.http_timeout)),
            session_file=Path(session_file) if session_file else cls.session_file,
        )
