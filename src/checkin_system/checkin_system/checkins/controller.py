from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..badges.scanner import read_codes
from ..container import Container
from ..core.enums import CheckInType
from ..core.exceptions import QRDecodeInvalid, ValidationError
from ..web.guards import rate_limited, validated_request
from ..web.http import json_body

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    limiter = container.rate_limiter
    service = container.check_in_service

    def _success(result):
        return jsonify({"success": True, "message": "Check-in successful", "data": result.to_dict()})

    @app.route("/api/checkin", methods=["POST"], endpoint="api_checkin")
    @rate_limited(limiter)
    @validated_request()
    def api_checkin():
        body = json_body()
        if not body.get("badge_uid"):
            raise ValidationError("Badge UID is required", {"badge_uid": "required"})
        result = service.check_in(
            body.get("badge_uid"),
            body.get("check_in_type"),
            performer=body.get("checked_in_by"),
            location=body.get("location"),
            notes=body.get("notes"),
        )
        return _success(result)

    @app.route("/api/checkin", methods=["GET"], endpoint="api_checkin_lookup")
    def api_checkin_lookup():
        detail = container.attendee_service.lookup_by_badge(request.args.get("badge_uid"))
        return jsonify({"success": True, "data": detail.to_dict()})

    @app.route("/api/checkin/scan", methods=["POST"], endpoint="api_checkin_scan")
    @rate_limited(limiter)
    @validated_request()
    def api_checkin_scan():
        body = json_body()
        result = service.check_in_by_scan(
            body.get("payload"),
            body.get("check_in_type") or CheckInType.GENERAL,
            performer=body.get("checked_in_by"),
            location=body.get("location"),
            notes=body.get("notes"),
        )
        return _success(result)

    @app.route("/api/checkin/scan/image", methods=["POST"], endpoint="api_checkin_scan_image")
    @rate_limited(limiter, "checkin")
    @validated_request(json_body=False)
    def api_checkin_scan_image():
        upload = request.files.get("image")
        if upload is None:
            raise ValidationError("Image file is required", {"image": "required"})

        codes = read_codes(upload.stream)
        if not codes:
            raise QRDecodeInvalid("No QR code detected in the image")
        if len(codes) > 1:
            logger.info("Image contained %d codes; using the first", len(codes))

        result = service.check_in_by_scan(
            codes[0],
            request.form.get("check_in_type") or CheckInType.GENERAL,
            performer=request.form.get("checked_in_by"),
            location=request.form.get("location"),
            notes=request.form.get("notes"),
        )
        return _success(result)
