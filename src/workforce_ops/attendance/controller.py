from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import (
    admin_required,
    current_employee_id,
    employee_required,
    json_object,
    optional_date_arg,
    optional_datetime,
    optional_int_arg,
)
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _server_now() -> str:
        return container.clock.now().isoformat()

    @app.route("/api/employee/attendance", methods=["GET"], endpoint="attendance_list")
    @employee_required
    def attendance_list():
        employee_id = current_employee_id()
        result = service.list_attendance(
            employee_id,
            page=request.args.get("page"),
            page_size=request.args.get("page_size"),
            date_from=optional_date_arg("from"),
            date_to=optional_date_arg("to"),
        )
        return jsonify(
            {
                "records": [r.to_dict() for r in result.records],
                "total": result.total,
                "page": result.page,
                "page_size": result.page_size,
                "today_state": service.today_state(employee_id).value,
                "server_now": _server_now(),
            }
        )

    @app.route("/api/employee/attendance", methods=["POST"], endpoint="attendance_check_in")
    @employee_required
    def attendance_check_in():
        data = json_object()
        employee_id = current_employee_id()
        if data.get("undo"):
            service.undo_check_in(employee_id, date=optional_datetime(data, "date"))
            return jsonify({"success": True, "server_now": _server_now()})

        record = service.check_in(
            employee_id,
            date=optional_datetime(data, "date"),
            check_in=optional_datetime(data, "check_in"),
            notes=data.get("notes"),
        )
        return jsonify({**record.to_dict(), "server_now": _server_now()}), 201

    @app.route("/api/employee/attendance", methods=["PUT"], endpoint="attendance_check_out")
    @employee_required
    def attendance_check_out():
        data = json_object()
        employee_id = current_employee_id()
        if data.get("undo"):
            service.undo_check_out(employee_id)
            return jsonify({"success": True, "server_now": _server_now()})

        record = service.check_out(
            employee_id,
            check_out=optional_datetime(data, "check_out"),
            notes=data.get("notes"),
        )
        return jsonify({**record.to_dict(), "server_now": _server_now()})

    @app.route("/api/admin/attendance", methods=["GET"], endpoint="admin_attendance_list")
    @admin_required
    def admin_attendance_list():
        result = service.list_all_attendance(
            employee_id=optional_int_arg("employee_id"),
            statuses=request.args.getlist("status"),
            page=request.args.get("page"),
            page_size=request.args.get("page_size"),
            date_from=optional_date_arg("from"),
            date_to=optional_date_arg("to"),
        )
        return jsonify(
            {
                "records": [r.to_dict() for r in result.records],
                "total": result.total,
                "page": result.page,
                "page_size": result.page_size,
            }
        )
