# backend/docdesk/routes/system.py
"""
System health endpoint.

Reports database connectivity and which ledger collections have been written.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import LedgerRecord
from ..services.storage_service import COLLECTION_KEYS

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


def check_database_health() -> dict:
    """
    Check database connectivity and list stored collection versions.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        records = db.session.query(LedgerRecord).all()
        stored = {r.key: r.to_dict() for r in records}

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                key: {"version_id": stored[key]["version_id"], "updated_at": stored[key]["updated_at"]}
                if key in stored else None
                for key in COLLECTION_KEYS
            },
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    status_code = 200 if database["status"] == "healthy" else 503
    return {"status": database["status"], "database": database}, status_code
