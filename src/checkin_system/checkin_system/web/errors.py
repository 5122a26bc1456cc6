from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AlreadyCheckedIn,
    AttendeeNotFound,
    DomainError,
    DuplicateEventCode,
    DuplicateRegistration,
    EventNotFound,
    NotEntitled,
    QRDecodeInvalid,
    RateLimitExceeded,
    RequestRejected,
    StoreUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ValidationError: 400,
    QRDecodeInvalid: 400,
    NotEntitled: 403,
    EventNotFound: 404,
    AttendeeNotFound: 404,
    DuplicateRegistration: 409,
    DuplicateEventCode: 409,
    AlreadyCheckedIn: 409,
    RateLimitExceeded: 429,
    StoreUnavailable: 500,
}


def status_for(error: DomainError) -> int:
    if isinstance(error, RequestRejected):
        return error.status_code
    for cls in type(error).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = status_for(error)
        if status >= 500:
            logger.error("Request failed: %s (%s)", error.error_code, error.message)
        else:
            logger.info("Request rejected: %s (%s)", error.error_code, error.message)

        response = jsonify({"success": False, **error.to_dict()})
        response.status_code = status
        if isinstance(error, RateLimitExceeded) and error.retry_after is not None:
            response.headers["Retry-After"] = str(error.retry_after)
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        response = jsonify({"success": False, "error": error.description, "code": error.name.upper().replace(" ", "_")})
        response.status_code = error.code or 500
        return response

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.exception("Unhandled error: %s", error)
        return jsonify({"success": False, "error": "Internal server error", "code": "INTERNAL_ERROR"}), 500
