from __future__ import annotations

import io

from flask import Flask, jsonify, send_file

from ..common.web import admin_required, error_response
from ..container import Container
from ..core.exceptions import DomainError
from .qr import render_site_qr


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/sites/<int:site_id>/qr.png", methods=["GET"], endpoint="admin_site_qr")
    @admin_required
    def admin_site_qr(site_id: int):
        try:
            site = container.sites_repo.get_by_id(site_id)
        except DomainError as e:
            return error_response(e)
        if site is None:
            return jsonify({"success": False, "message": "Site not found."}), 404

        png = render_site_qr(site)
        return send_file(
            io.BytesIO(png),
            mimetype="image/png",
            as_attachment=False,
            download_name=f"site-{site.site_id}.png",
        )
