from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError
from ..web.guards import rate_limited, validated_request
from ..web.http import csv_response, optional_int_arg


def register(app: Flask, container: Container) -> None:
    limiter = container.rate_limiter

    @app.route("/api/admin/analytics", methods=["GET"], endpoint="api_admin_analytics")
    @rate_limited(limiter, "admin")
    @validated_request()
    def api_admin_analytics():
        report = container.analytics_service.build_analytics(
            period=request.args.get("period"),
            event_id=optional_int_arg("event_id"),
        )
        return jsonify({"success": True, "data": report.to_dict()})

    @app.route("/api/admin/export/<kind>", methods=["GET"], endpoint="api_admin_export")
    @rate_limited(limiter, "admin")
    def api_admin_export(kind: str):
        event_id = optional_int_arg("event_id")
        exports = container.export_service

        if kind == "attendees":
            table = exports.attendees_table(event_id=event_id)
        elif kind == "checkins":
            table = exports.check_ins_table(event_id=event_id)
        elif kind == "analytics":
            report = container.analytics_service.build_analytics(period=request.args.get("period"), event_id=event_id)
            table = exports.analytics_table(report)
        else:
            raise ValidationError("Unknown export type", {"kind": "invalid_choice"})
        return csv_response(app, table)
