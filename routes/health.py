"""
Health Check Endpoints

1. /health/live - Liveness probe (is the process alive?)
2. /health/ready - Readiness probe (can it reach the database?)
"""

import time
import logging
from datetime import datetime, timezone
from typing import Dict, Any

from flask import Blueprint, jsonify
from sqlalchemy import text

from models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__, url_prefix='/health')

# Track startup time for uptime calculation
_startup_time = time.time()


def get_uptime_seconds() -> float:
    """Get application uptime in seconds."""
    return time.time() - _startup_time


def check_database_health() -> Dict[str, Any]:
    """
    Check database connectivity.

    Returns dict with:
    - healthy: bool
    - latency_ms: response time
    - error: error message if unhealthy
    """
    start = time.time()
    try:
        db.session.execute(text("SELECT 1")).fetchone()
        db.session.rollback()  # Don't leave open transaction

        latency_ms = (time.time() - start) * 1000
        return {
            "healthy": True,
            "latency_ms": round(latency_ms, 2),
            "type": db.engine.dialect.name,
        }
    except Exception as e:
        db.session.rollback()
        latency_ms = (time.time() - start) * 1000
        logger.warning(f"Database health check failed: {e}")
        return {
            "healthy": False,
            "latency_ms": round(latency_ms, 2),
            "error": str(e)[:100],
        }


@health_bp.route('/live', methods=['GET'])
def live():
    return jsonify({
        "status": "ok",
        "uptime_seconds": round(get_uptime_seconds(), 1),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


@health_bp.route('/ready', methods=['GET'])
def ready():
    database = check_database_health()
    status_code = 200 if database["healthy"] else 503
    return jsonify({
        "status": "ok" if database["healthy"] else "unavailable",
        "checks": {"database": database},
    }), status_code
