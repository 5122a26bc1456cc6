from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..container import Container
from ..core.constants import QR_DEFAULT_SIZE_PX
from ..core.exceptions import ValidationError
from ..web.guards import validated_request
from ..web.http import json_body
from . import qr_codec, qr_image, zpl


def register(app: Flask, container: Container) -> None:
    @app.route("/api/qr/decode", methods=["POST"], endpoint="api_qr_decode")
    @validated_request()
    def api_qr_decode():
        decoded = qr_codec.decode(json_body().get("payload"))
        return jsonify({"success": True, "valid": decoded is not None, "data": decoded.to_dict() if decoded else None})

    @app.route("/api/badges/<badge_uid>/qr", methods=["GET"], endpoint="api_badge_qr")
    def api_badge_qr(badge_uid: str):
        attendee = container.attendee_service.get_by_badge(badge_uid)
        event = container.events_repo.get_by_id(attendee.event_id)
        payload = qr_codec.encode(attendee.badge_uid, event.event_code if event else None)

        fmt = (request.args.get("format") or "png").lower()
        if fmt == "json":
            return jsonify({"success": True, "badge_uid": attendee.badge_uid, "payload": payload})

        try:
            size = int(request.args.get("size") or QR_DEFAULT_SIZE_PX)
        except ValueError:
            raise ValidationError("size must be a number", {"size": "invalid_number"}) from None
        if not 64 <= size <= 1024:
            raise ValidationError("size must be between 64 and 1024", {"size": "out_of_range"})

        if fmt == "svg":
            return app.response_class(qr_image.render_svg(payload, size_px=size), mimetype="image/svg+xml")
        if fmt == "png":
            return send_file(qr_image.render_png(payload, size_px=size), mimetype="image/png")
        raise ValidationError("format must be one of: png, svg, json", {"format": "invalid_choice"})

    @app.route("/api/badges/<badge_uid>/zpl", methods=["GET"], endpoint="api_badge_zpl")
    def api_badge_zpl(badge_uid: str):
        attendee = container.attendee_service.get_by_badge(badge_uid)
        return app.response_class(
            zpl.render_label(attendee),
            mimetype="text/plain",
            headers={"Content-Disposition": f"inline; filename={attendee.badge_uid}.zpl"},
        )
