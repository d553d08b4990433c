from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, json_object
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.settings_service

    @app.route("/api/admin/settings/attendance-time", methods=["GET"], endpoint="attendance_settings_get")
    @admin_required
    def attendance_settings_get():
        return jsonify(service.get().to_dict())

    @app.route("/api/admin/settings/attendance-time", methods=["PUT"], endpoint="attendance_settings_update")
    @admin_required
    def attendance_settings_update():
        settings = service.update(json_object())
        return jsonify({"success": True, "settings": settings.to_dict()})
