from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request, session

from ..common.validators import optional_float
from ..common.web import admin_required, error_response
from ..container import Container
from ..core.enums import ScanKind, ScanStatus
from ..core.exceptions import DomainError, ValidationError
from ..users.model import Employee


def _parse_time(value) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError("Invalid date/time value.")


def _parse_enum(enum_cls, value, label: str):
    if value in (None, ""):
        return None
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid {label}.")


def _parse_int(value, label: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}.")


def register(app: Flask, container: Container) -> None:
    def _admin() -> Employee:
        admin = container.employees_repo.get_by_id(int(session["user_id"]))
        if admin is None:
            # Session says admin but the profile is gone; fall back to the session identity.
            admin = Employee(
                user_id=int(session["user_id"]),
                email=str(session.get("email", "")),
                name=str(session.get("name", "Admin")),
                is_admin=True,
            )
        return admin

    def _change_response(change, status: int = 200):
        return jsonify(
            {
                "success": True,
                "log_id": change.event.log_id if change.event else None,
                "date_keys": list(change.date_keys),
            }
        ), status

    @app.route("/admin/logs", methods=["POST"], endpoint="admin_create_log")
    @admin_required
    def admin_create_log():
        data = request.get_json(silent=True) or {}
        try:
            scan_time = _parse_time(data.get("scan_time"))
            user_id = _parse_int(data.get("user_id"), "user")
            site_id = _parse_int(data.get("site_id"), "site")
            if scan_time is None or user_id is None or site_id is None:
                raise ValidationError("Select a valid user and site.")
            change = container.scan_admin_service.create_entry(
                admin=_admin(),
                user_id=user_id,
                site_id=site_id,
                scan_time=scan_time,
                status=_parse_enum(ScanStatus, data.get("status"), "status") or ScanStatus.SUCCESS,
                scan_kind=_parse_enum(ScanKind, data.get("scan_kind"), "scan kind"),
                admin_note=data.get("admin_note"),
                user_lat=optional_float(data.get("user_lat"), "user_lat"),
                user_lng=optional_float(data.get("user_lng"), "user_lng"),
                distance_meters=optional_float(data.get("distance_meters"), "distance_meters"),
            )
        except DomainError as e:
            return error_response(e)
        return _change_response(change, 201)

    @app.route("/admin/logs/<int:log_id>", methods=["PUT"], endpoint="admin_update_log")
    @admin_required
    def admin_update_log(log_id: int):
        data = request.get_json(silent=True) or {}
        try:
            change = container.scan_admin_service.edit_entry(
                admin=_admin(),
                log_id=log_id,
                site_id=_parse_int(data.get("site_id"), "site"),
                scan_time=_parse_time(data.get("scan_time")),
                status=_parse_enum(ScanStatus, data.get("status"), "status"),
                scan_kind=_parse_enum(ScanKind, data.get("scan_kind"), "scan kind"),
                admin_note=data.get("admin_note"),
            )
        except DomainError as e:
            return error_response(e)
        return _change_response(change)

    @app.route("/admin/logs/<int:log_id>", methods=["DELETE"], endpoint="admin_delete_log")
    @admin_required
    def admin_delete_log(log_id: int):
        hard = request.args.get("hard", "0").lower() in {"1", "true", "yes"}
        try:
            change = container.scan_admin_service.delete_entry(admin=_admin(), log_id=log_id, hard=hard)
        except DomainError as e:
            return error_response(e)
        return _change_response(change)

    @app.route("/admin/logs/<int:log_id>/audit", methods=["GET"], endpoint="admin_log_audit")
    @admin_required
    def admin_log_audit(log_id: int):
        try:
            entries = container.scan_admin_service.history(admin=_admin(), log_id=log_id)
        except DomainError as e:
            return error_response(e)
        return jsonify(
            [
                {
                    "action": a.action.value,
                    "admin_id": a.admin_id,
                    "admin_email": a.admin_email,
                    "created_at": a.created_at.isoformat(),
                    "before": a.before.as_dict() if a.before else None,
                    "after": a.after.as_dict() if a.after else None,
                }
                for a in entries
            ]
        )
