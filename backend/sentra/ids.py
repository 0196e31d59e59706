# Overview: Identifier helpers shared by server models and the sync store.

from __future__ import annotations

import uuid

from sentra.time_utils import now_ms


def new_id(prefix: str | None = None) -> str:
    """Random string id, e.g. "INV-3F2A9C1B7D" or a bare uuid4 when no prefix is given."""
    if not prefix:
        return str(uuid.uuid4())
    return f"{prefix}-{uuid.uuid4().hex[:10].upper()}"


def time_based_id(prefix: str) -> str:
    """
    Local-only id for records synthesized without server confirmation.

    Uses the millisecond clock like the records the front end used to create
    offline ("INV-1736500000000"); a short random suffix keeps two ids minted
    in the same millisecond apart.
    """
    return f"{prefix}-{now_ms()}-{uuid.uuid4().hex[:4]}"
