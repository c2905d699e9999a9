from flask import Blueprint, jsonify
from sqlalchemy import text

from ticketeer.extensions import db, get_redis

health_bp = Blueprint("health", __name__)


def check_database():
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "ok", "message": "Database connection successful"}
    except Exception as e:
        return {"status": "error", "message": f"Database check failed: {str(e)}"}


def check_redis():
    client = get_redis()
    if client is None:
        return {"status": "disabled", "message": "Redis not configured"}

    try:
        client.ping()
        return {"status": "ok", "message": "Redis connection successful"}
    except Exception as e:
        return {"status": "error", "message": f"Redis connection failed: {str(e)}"}


@health_bp.route("/health", methods=["GET"])
def health():
    """
    Health check endpoint that verifies database and Redis status.
    """
    database = check_database()
    redis_status = check_redis()

    healthy = database["status"] == "ok" and redis_status["status"] != "error"
    return jsonify({
        "status": "ok" if healthy else "degraded",
        "api": "ok",
        "database": database,
        "redis": redis_status,
    }), 200 if healthy else 503
