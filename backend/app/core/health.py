"""
Health-check helpers for liveness and readiness probes.

Liveness  — is the process alive and not deadlocked?  (cheap, no I/O)
Readiness — can it serve traffic?  (table store database reachable)
"""

import logging

from sqlalchemy import Engine, select

logger = logging.getLogger(__name__)


def check_database(engine: Engine) -> bool:
    """Check the store database by running SELECT 1. Returns True if ok."""
    try:
        with engine.connect() as conn:
            conn.execute(select(1)).first()
        return True
    except Exception:
        logger.warning("Database check failed", exc_info=True)
        return False


def liveness_check() -> tuple[bool, list[str]]:
    """
    Lightweight liveness probe — just confirms the Python process is responsive.
    No I/O, no DB calls.  Return format matches readiness_check for consistency.
    """
    return (True, [])


def readiness_check(engine: Engine | None) -> tuple[bool, list[str]]:
    """
    Returns (ok, list of failure messages). Without a SQL engine (e.g. an
    in-memory store) there is nothing to check.
    """
    failures: list[str] = []
    if engine is not None and not check_database(engine):
        failures.append("database")
    return (not failures, failures)
