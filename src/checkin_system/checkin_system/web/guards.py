from __future__ import annotations

import logging
from functools import wraps
from typing import Iterable, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from flask import current_app, request

from ..core.exceptions import RateLimitExceeded, RequestRejected
from ..ratelimit.limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


def client_identifier(headers) -> str:
    """Caller identity for rate limiting: explicit user id first, then proxy IP headers."""
    user_id = (headers.get("x-user-id") or "").strip()
    if user_id:
        return user_id

    forwarded = (headers.get("x-forwarded-for") or "").split(",")[0].strip()
    return (
        forwarded
        or (headers.get("x-real-ip") or "").strip()
        or (headers.get("cf-connecting-ip") or "").strip()
        or "unknown"
    )


def _site(url: str) -> Tuple[str, str]:
    parts = urlsplit(url.strip())
    return parts.scheme.lower(), parts.netloc.lower()


def _origin_allowed(origin: str, allowed: Iterable[str]) -> bool:
    # Exact scheme + host[:port] match; a Referer path or query never counts.
    site = _site(origin)
    return bool(site[1]) and any(site == _site(entry) for entry in allowed)


def check_request(
    *,
    method: str,
    headers,
    allowed_origins: Sequence[str],
    require_csrf: bool,
    json_body: bool = True,
) -> None:
    """Origin allowlist, JSON content type on POST, CSRF header when required."""

    origin = headers.get("origin") or headers.get("referer")
    if allowed_origins and origin and not _origin_allowed(origin, allowed_origins):
        raise RequestRejected("Origin not allowed", status_code=403)

    if json_body and method == "POST" and "application/json" not in (headers.get("content-type") or ""):
        raise RequestRejected("Content-Type must be application/json", status_code=400)

    if require_csrf and not headers.get("x-csrf-token"):
        raise RequestRejected("CSRF token required", status_code=403)


def validated_request(*, json_body: bool = True):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            check_request(
                method=request.method,
                headers=request.headers,
                allowed_origins=current_app.config.get("ALLOWED_ORIGINS", ()),
                require_csrf=bool(current_app.config.get("REQUIRE_CSRF", False)),
                json_body=json_body,
            )
            return view(*args, **kwargs)

        return wrapper

    return decorator


def rate_limited(limiter: FixedWindowRateLimiter, name: str = "default", *, message: Optional[str] = None):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            client_id = client_identifier(request.headers)
            decision = limiter.check(name, client_id)
            if not decision.allowed:
                logger.warning("Rate limit hit: limit=%s client=%s path=%s", name, client_id, request.path)
                raise RateLimitExceeded(
                    message or "Too many requests. Please try again later.",
                    retry_after=decision.retry_after(limiter.now()),
                )
            return view(*args, **kwargs)

        return wrapper

    return decorator
