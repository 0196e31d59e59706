# Overview: Transaction helpers for multi-row billing updates.

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import OperationalError

from ..extensions import db

logger = logging.getLogger(__name__)


def lock_for_update(query):
    """
    Apply row-level locking to the client/invoice rows a billing event adjusts.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, Postgres honors it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB unit of work, retrying on lock/deadlock failures.

    func must commit its own transaction; a failed attempt is rolled back
    before the next one so no partial aggregate update survives.
    """
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            logger.warning("Retrying transaction after OperationalError (attempt %s/%s)", attempt + 1, attempts)
            time.sleep(backoff_base * (2 ** attempt))
