from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..core.constants import DEFAULT_EVENTS_LIMIT
from ..web.guards import rate_limited, validated_request
from ..web.http import bool_arg, json_body, optional_int_arg


def register(app: Flask, container: Container) -> None:
    limiter = container.rate_limiter

    @app.route("/api/events", methods=["GET"], endpoint="api_events_list")
    def api_events_list():
        events = container.event_service.list_events(
            active_only=bool_arg("active"),
            limit=optional_int_arg("limit") or DEFAULT_EVENTS_LIMIT,
        )
        counts = container.attendees_repo.count_by_event([e.id for e in events])
        data = [{**e.to_dict(), "attendee_count": counts.get(e.id, 0)} for e in events]
        return jsonify({"success": True, "data": data})

    @app.route("/api/events", methods=["POST"], endpoint="api_events_create")
    @rate_limited(limiter, "admin")
    @validated_request()
    def api_events_create():
        body = json_body()
        event = container.event_service.create_event(
            event_code=body.get("event_code"),
            event_name=body.get("event_name"),
            event_date=body.get("event_date"),
        )
        return jsonify({"success": True, "data": event.to_dict()}), 201
