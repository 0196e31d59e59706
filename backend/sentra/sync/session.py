# Overview: Signed-in user persistence: a JSON file holding the user and the sign-in time, valid for 24 hours.

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from sentra.time_utils import now_ms

from .entities import AuthUser

logger = logging.getLogger(__name__)


SESSION_TTL_MS = 24 * 60 * 60 * 1000


class Session:
    def __init__(self, auth, store, path: Path):
        self._auth = auth
        self._store = store
        self._path = Path(path)

    def login(self, email: str, password: str) -> AuthUser:
        """Authenticate, remember the user on disk and put it on the store. ApiError propagates."""
        user = self._auth.login(email, password)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps({"user": user.to_login(), "timestamp": now_ms()}))
        self._store.set_user(user)
        logger.info("Signed in as %s", user.email)
        return user

    def _read(self) -> Optional[dict]:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text())
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self._path)
            return None
        if not isinstance(data, dict) or "user" not in data or "timestamp" not in data:
            return None
        return data

    def is_valid(self) -> bool:
        data = self._read()
        return data is not None and now_ms() - int(data["timestamp"]) < SESSION_TTL_MS

    def info(self) -> Optional[dict]:
        """The stored user with milliseconds left, or None when there is no valid session."""
        data = self._read()
        if data is None:
            return None
        remaining = SESSION_TTL_MS - (now_ms() - int(data["timestamp"]))
        if remaining <= 0:
            return None
        return {"user": data["user"], "time_left_ms": remaining}

    def restore(self) -> Optional[AuthUser]:
        """Load a still-valid session into the store; an expired one is removed."""
        info = self.info()
        if info is None:
            if self._path.exists():
                self.sign_out()
            return None
        user = AuthUser.from_login(info["user"])
        self._store.set_user(user)
        return user

    def sign_out(self) -> None:
        self._path.unlink(missing_ok=True)
        self._store.set_user(None)
        self._store.select_client(None)
