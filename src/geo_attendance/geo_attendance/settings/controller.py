from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_role, error_response
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/settings/buffers", methods=["GET"], endpoint="admin_get_buffers")
    @admin_required
    def admin_get_buffers():
        try:
            buffers = container.buffer_provider.snapshot()
        except DomainError as e:
            return error_response(e)
        return jsonify(buffers.as_dict())

    @app.route("/admin/settings/buffers", methods=["PUT"], endpoint="admin_update_buffers")
    @admin_required
    def admin_update_buffers():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"success": False, "message": "All buffer values must be 0 or a positive number"}), 400
        try:
            buffers = container.buffer_provider.update(current_role=current_role(), values=data)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, **buffers.as_dict()})
