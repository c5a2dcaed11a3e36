from __future__ import annotations

import logging

from flask import Flask, jsonify, request, session
from PIL import UnidentifiedImageError

from ..common.web import error_response, login_required
from ..container import Container
from ..core.exceptions import DomainError, ValidationError
from ..sites.qr import decode_token_from_image
from .location import ReportedLocation

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _scan(token, form) -> tuple:
        try:
            user = container.employees_repo.get_by_id(int(session["user_id"]))
            if user is None or user.is_deleted:
                return jsonify({"success": False, "message": "Please sign in to continue."}), 401

            location = ReportedLocation.from_device(form.get("lat"), form.get("lng"), form.get("geo_error"))
            outcome = container.scan_verifier.verify(token=token, user=user, location=location)
        except DomainError as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "message": outcome.message,
                "scan_kind": outcome.event.scan_kind.value,
                "site_name": outcome.event.site_name,
                "distance_meters": round(outcome.event.distance_meters, 1),
                "session": outcome.session.as_dict() if outcome.session else None,
            }
        ), 200

    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    @login_required
    def api_scan():
        data = request.get_json(silent=True) or {}
        return _scan(data.get("token"), data)

    @app.route("/api/scan/image", methods=["POST"], endpoint="api_scan_image")
    @login_required
    def api_scan_image():
        upload = request.files.get("image")
        if upload is None:
            return error_response(ValidationError("Invalid QR code."))
        try:
            token = decode_token_from_image(upload.stream)
        except UnidentifiedImageError:
            logger.info("Uploaded scan image could not be read")
            token = None
        # An unreadable image is still an attempt and gets logged as an invalid token.
        return _scan(token, request.form)
