# backend/carniceria/routes/system.py
"""
Liveness probe for the POS frontend and the deployment platform.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy import func, select, text

from ..extensions import db
from ..models import Product, Sale
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__)


def probe_database() -> dict:
    """Round-trip the database and report catalog/ledger sizes."""
    started = time.perf_counter()
    try:
        db.session.execute(text("SELECT 1"))
        counts = {
            "products": db.session.scalar(select(func.count()).select_from(Product)),
            "sales": db.session.scalar(select(func.count()).select_from(Sale)),
        }
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Health probe could not reach the database")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "error": "Database error",
        }

    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "details": counts,
    }


@system_bp.get("/health")
def health():
    """200 when the database answers, 503 otherwise."""
    database = probe_database()
    status = database["status"]
    body = {
        "status": status,
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {"database": database},
    }
    return body, 200 if status == "healthy" else 503
