from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

ADMIN_ROLE = "admin"


def admin_required(fn):
    """Require a valid access token whose ``role`` claim is admin."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        claims = get_jwt()
        if claims.get("role") != ADMIN_ROLE:
            return jsonify({"error": "Forbidden", "message": "Admin access required"}), 403
        return fn(*args, **kwargs)

    return wrapper


def current_admin_id():
    return str(get_jwt_identity())
