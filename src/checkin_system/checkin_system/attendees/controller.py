from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError
from ..web.guards import rate_limited, validated_request
from ..web.http import json_body, optional_int_arg


def register(app: Flask, container: Container) -> None:
    limiter = container.rate_limiter
    service = container.attendee_service

    def _required_id_arg():
        raw = (request.args.get("id") or "").strip()
        if not raw:
            raise ValidationError("Attendee ID is required", {"id": "required"})
        return raw

    @app.route("/api/register", methods=["POST"], endpoint="api_register")
    @rate_limited(limiter, "registration", message="Too many registration attempts. Please try again later.")
    @validated_request()
    def api_register():
        body = json_body()
        result = service.register_attendee(
            event_id=body.get("event_id"),
            full_name=body.get("full_name"),
            email=body.get("email"),
            phone=body.get("phone"),
            institution=body.get("institution"),
            category=body.get("category"),
            meal_entitled=body.get("meal_entitled", False),
            kit_entitled=body.get("kit_entitled", False),
            notes=body.get("notes"),
        )
        return jsonify({"success": True, **result.to_dict()})

    @app.route("/api/attendees", methods=["GET"], endpoint="api_attendees_search")
    @rate_limited(limiter, "search")
    def api_attendees_search():
        found = service.search(
            query=request.args.get("query"),
            event_id=optional_int_arg("event_id"),
            limit=request.args.get("limit"),
        )
        return jsonify({"success": True, "data": [d.to_dict() for d in found]})

    @app.route("/api/admin/attendees", methods=["GET"], endpoint="api_admin_attendees")
    @rate_limited(limiter, "admin")
    def api_admin_attendees():
        page = service.list_admin(
            event_id=optional_int_arg("event_id"),
            search=request.args.get("search"),
            limit=request.args.get("limit"),
            offset=request.args.get("offset"),
        )
        return jsonify({"success": True, "data": [d.to_dict() for d in page.items], "pagination": page.pagination()})

    @app.route("/api/admin/attendees", methods=["PUT"], endpoint="api_admin_attendees_update")
    @rate_limited(limiter, "admin")
    @validated_request()
    def api_admin_attendees_update():
        attendee = service.update_attendee(_required_id_arg(), json_body())
        return jsonify({"success": True, "data": attendee.to_dict()})

    @app.route("/api/admin/attendees", methods=["DELETE"], endpoint="api_admin_attendees_delete")
    @rate_limited(limiter, "admin")
    def api_admin_attendees_delete():
        service.delete_attendee(_required_id_arg())
        return jsonify({"success": True, "message": "Attendee deleted successfully"})
