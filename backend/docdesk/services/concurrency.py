# Overview: Service-layer helpers for concurrency; retry and row locking around ledger writes.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    Apply row-level locking for read-modify-write of a ledger record.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    The version_id column still catches lost updates there.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Run func as one unit of work over the ledger.

    func flushes its writes and commits at the end. If it raises, everything
    it flushed is rolled back before the error leaves this function, so a
    half-done save can never ride along with a later commit.

    OperationalError (locks) and StaleDataError (another writer bumped a
    version_id) are retried with exponential backoff; func must be safe to
    re-run from scratch. Anything else is rolled back and re-raised at once.
    """
    for attempt in range(attempts):
        try:
            return func()
        except RETRYABLE_ERRORS:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
