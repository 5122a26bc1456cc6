from __future__ import annotations

import re
from typing import Callable, Dict

from ..attendees.model import Attendee
from ..core.constants import DEFAULT_BADGE_PRINT_TEMPLATE

_ZPL_UNSAFE_RE = re.compile(r"[\^~\x00-\x1f]")
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_zpl_text(text: object) -> str:
    """Make ``text`` safe inside a ^FD field (no ^, ~ or control chars)."""
    if text is None:
        return ""
    cleaned = _ZPL_UNSAFE_RE.sub(" ", str(text))
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def render_a6(attendee: Attendee) -> str:
    """A6 portrait label at 203 dpi (about 800 x 1180 dots)."""
    full_name = sanitize_zpl_text(attendee.full_name)
    category = sanitize_zpl_text((attendee.category or "").upper())
    institution = sanitize_zpl_text(attendee.institution)
    badge_uid = sanitize_zpl_text(attendee.badge_uid)

    return "\n".join(
        [
            "^XA",
            "^PW800",
            "^LH20,20",
            "^CF0,80",
            f"^FO30,30^FD{full_name}^FS",
            "^CF0,50",
            f"^FO30,130^FD{category}^FS",
            "^CF0,40",
            f"^FO30,200^FD{institution}^FS",
            # QR on the right, raw UID (scanners accept a bare badge id)
            "^FO520,260^BQN,2,6",
            f"^FDLA,{badge_uid}^FS",
            "^CF0,40",
            f"^FO30,420^FDID: {badge_uid}^FS",
            "^XZ",
        ]
    )


TEMPLATES: Dict[str, Callable[[Attendee], str]] = {
    DEFAULT_BADGE_PRINT_TEMPLATE: render_a6,
}


def render_label(attendee: Attendee) -> str:
    template = TEMPLATES.get(attendee.badge_print_template, render_a6)
    return template(attendee)
