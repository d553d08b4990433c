from __future__ import annotations

from datetime import datetime
from typing import Optional

import click
from flask import Flask, jsonify, request

from ..common.http import (
    admin_required,
    current_employee_id,
    employee_required,
    json_body,
    json_object,
    optional_date_arg,
    optional_int_arg,
)
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.sales_service

    @app.route("/api/employee/sales", methods=["GET"], endpoint="sales_list")
    @employee_required
    def sales_list():
        result = service.list_sales(
            current_employee_id(),
            page=request.args.get("page"),
            page_size=request.args.get("page_size"),
        )
        return jsonify(
            {
                "sales": [s.to_dict() for s in result.items],
                "page": result.page,
                "page_size": result.page_size,
                "total": result.total,
                "total_pages": result.total_pages,
            }
        )

    @app.route("/api/employee/sales", methods=["POST"], endpoint="sales_record")
    @employee_required
    def sales_record():
        sales = service.record_sales(current_employee_id(), json_body())
        return jsonify({"success": True, "sales": [s.to_dict() for s in sales]}), 201

    @app.route("/api/admin/assignments", methods=["GET"], endpoint="assignments_list")
    @admin_required
    def assignments_list():
        result = service.list_assignments(
            employee_id=optional_int_arg("employee_id"),
            product_id=optional_int_arg("product_id"),
            date_from=optional_date_arg("date_from"),
            date_to=optional_date_arg("date_to"),
            page=request.args.get("page"),
            page_size=request.args.get("page_size"),
        )
        return jsonify(
            {
                "assignments": [a.to_dict() for a in result.items],
                "total": result.total,
                "page": result.page,
                "page_size": result.page_size,
                "page_count": result.total_pages,
            }
        )

    @app.route("/api/admin/assignments", methods=["POST"], endpoint="assignments_upsert")
    @admin_required
    def assignments_upsert():
        data = json_object()
        assignment = service.upsert_assignment(data.get("employee_id"), data.get("product_id"), data.get("quantity"))
        return jsonify(assignment.to_dict()), 201

    @app.cli.command("expire-assignments")
    @click.option(
        "--day",
        type=click.DateTime(formats=["%Y-%m-%d"]),
        default=None,
        help="Local day to reconcile (YYYY-MM-DD); defaults to today.",
    )
    def expire_assignments_command(day: Optional[datetime]):
        """Reconcile the day's assignments that are still open."""
        count = service.expire_assignments(day.date() if day else None)
        click.echo(f"Employee product assignments processed for expiry: {count}")
