from __future__ import annotations

from typing import Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    ``message`` is short and safe to show to the caller; ``error_code`` is a
    stable identifier for programmatic handling.
    """

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.error_code}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.fields = dict(fields or {})

    def to_dict(self) -> dict:
        out = super().to_dict()
        if self.fields:
            out["fields"] = dict(self.fields)
        return out


class DuplicateRegistration(DomainError):
    """Raised when an attendee with the same email is already registered for the event."""

    error_code = "DUPLICATE_REGISTRATION"

    def __init__(self, message: str = "You are already registered for this event"):
        super().__init__(message)


class DuplicateEventCode(DomainError):
    error_code = "DUPLICATE_EVENT_CODE"

    def __init__(self, event_code: str):
        super().__init__("Event code already exists")
        self.event_code = event_code


class EventNotFound(DomainError):
    error_code = "EVENT_NOT_FOUND"

    def __init__(self, event_id: object = None):
        super().__init__("Event not found")
        self.event_id = event_id


class AttendeeNotFound(DomainError):
    error_code = "ATTENDEE_NOT_FOUND"

    def __init__(self, badge_uid: Optional[str] = None):
        super().__init__("Attendee not found")
        self.badge_uid = badge_uid


class NotEntitled(DomainError):
    """Raised when a check-in type is requested without the matching entitlement flag."""

    error_code = "NOT_ENTITLED"

    def __init__(self, check_in_type: str):
        noun = {"meal": "meals", "kit": "kits"}.get(check_in_type, check_in_type)
        super().__init__(f"Attendee is not entitled to {noun}")
        self.check_in_type = check_in_type


class AlreadyCheckedIn(DomainError):
    error_code = "ALREADY_CHECKED_IN"

    def __init__(self, check_in_type: str):
        super().__init__(f"Already checked in for {check_in_type}")
        self.check_in_type = check_in_type

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["check_in_type"] = self.check_in_type
        return out


class QRDecodeInvalid(DomainError):
    """Raised when a scanned payload does not match the badge payload shape."""

    error_code = "QR_INVALID"

    def __init__(self, message: str = "Invalid code, please rescan"):
        super().__init__(message)


class StoreUnavailable(DomainError):
    """Raised when the underlying store fails for infrastructure reasons.

    The message never carries driver detail; that goes to the server log.
    """

    error_code = "STORE_UNAVAILABLE"

    def __init__(self, message: str = "Service temporarily unavailable. Please try again."):
        super().__init__(message)


class RateLimitExceeded(DomainError):
    error_code = "RATE_LIMITED"

    def __init__(self, message: str = "Too many requests. Please try again later.", *, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


class RequestRejected(DomainError):
    """Raised by request guards (origin allowlist, content type, CSRF header)."""

    error_code = "REQUEST_REJECTED"

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
