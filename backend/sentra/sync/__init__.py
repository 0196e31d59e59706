"""
Client-side synchronisation layer.

Holds an in-memory copy of every collection (AppStore), keeps it fresh
with a background Poller and talks to the API through a Transport picked
by BackendKind.
"""

from .settings import BackendKind, SyncSettings
from .result import Result
from .transport import ApiError, build_transport
from .adapters import Adapters
from .store import AppStore
from .poller import Poller, ScheduledTask
from .session import Session

__all__ = [
    "BackendKind", "SyncSettings", "Result", "ApiError", "build_transport",
    "Adapters", "AppStore", "Poller", "ScheduledTask", "Session",
]
