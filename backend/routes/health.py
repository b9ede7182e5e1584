"""
Health check endpoints

/api/health probes the database (and Redis when rate limiting is enabled);
/api/ping always answers.
"""

from datetime import datetime

from flask import Blueprint, jsonify

import database
from config import load_app_config
from middleware.rate_limiter import check_redis_connection

# Create health blueprint
health_bp = Blueprint("health", __name__, url_prefix="/api")


@health_bp.route("/health", methods=["GET"])
def health_check():
    """Health check with dependency probes.

    Returns:
        200: Service is healthy
        503: A dependency is unreachable
    """
    checks = {"database": database.check_connection()}
    if load_app_config().rate_limit_enabled:
        checks["redis"] = check_redis_connection()

    all_healthy = all(checks.values())
    health = {
        "status": "ok" if all_healthy else "degraded",
        "timestamp": datetime.now().isoformat(),
        "checks": checks,
    }

    return jsonify(health), 200 if all_healthy else 503


@health_bp.route("/ping", methods=["GET"])
def ping():
    """Ultra-minimal ping endpoint for basic uptime checks.

    Returns:
        200: {"pong": true}
    """
    return jsonify({"pong": True}), 200
