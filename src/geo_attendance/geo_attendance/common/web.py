"""Flask helpers shared by the feature controllers."""
from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    GeofenceViolation,
    LocationUnavailable,
    OperationTimeout,
    StorageError,
)

logger = logging.getLogger(__name__)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please sign in to continue."}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please sign in to continue."}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "message": "Admin access required."}), 403
        return view(*args, **kwargs)

    return wrapper


def current_role() -> Role:
    return Role.ADMIN if session.get("role") == Role.ADMIN.value else Role.STAFF


def error_response(e: DomainError):
    """JSON body and status code for a domain error."""
    body = {"success": False, "message": str(e)}
    if isinstance(e, GeofenceViolation):
        body["distance_meters"] = round(e.distance_meters, 1)
        body["allowed_radius_meters"] = e.allowed_radius_meters
        return jsonify(body), 422
    if isinstance(e, LocationUnavailable):
        body["location_error"] = e.kind.value
        return jsonify(body), 422
    if isinstance(e, AuthorizationError):
        return jsonify(body), 403
    if isinstance(e, OperationTimeout):
        return jsonify(body), 504
    if isinstance(e, StorageError):
        logger.error("Storage failure: %s", e)
        body["message"] = "Storage is unavailable. Please try again later."
        return jsonify(body), 503
    return jsonify(body), 400
