from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_role, error_response
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/sessions/recompute", methods=["POST"], endpoint="admin_recompute_sessions")
    @admin_required
    def admin_recompute_sessions():
        data = request.get_json(silent=True) or {}
        start = data.get("start")
        end = data.get("end") or start
        try:
            report = container.session_service.rebuild_range(current_role=current_role(), start=start, end=end)
        except DomainError as e:
            return error_response(e)
        # A partial run still reports what was rebuilt before the failure.
        return jsonify({"success": report.ok, **report.as_dict()}), (200 if report.ok else 503)

    @app.route(
        "/admin/sessions/<int:user_id>/<date_key>/notes",
        methods=["POST"],
        endpoint="admin_session_notes",
    )
    @admin_required
    def admin_session_notes(user_id: int, date_key: str):
        data = request.get_json(silent=True) or {}
        service = container.session_service
        role = current_role()
        try:
            if data.get("clear"):
                session_row = service.clear_notes(current_role=role, user_id=user_id, date_key=date_key)
            else:
                session_row = None
                if "late_note" in data:
                    session_row = service.annotate_late(
                        current_role=role, user_id=user_id, date_key=date_key, note=data.get("late_note")
                    )
                if "abnormal_note" in data:
                    session_row = service.annotate_abnormal(
                        current_role=role, user_id=user_id, date_key=date_key, note=data.get("abnormal_note")
                    )
                if session_row is None:
                    return jsonify({"success": False, "message": "Nothing to update."}), 400
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "session": session_row.as_dict()})
