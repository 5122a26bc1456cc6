"""Example: drive the service layer directly (no Flask), on the in-memory store.

Registers an attendee, prints the badge QR payload and ZPL label, then walks
through the meal/kit check-in rules.
"""

from datetime import date

from src.checkin_system.checkin_system.badges import qr_codec, zpl
from src.checkin_system.checkin_system.container import build_container
from src.checkin_system.checkin_system.core.exceptions import DomainError


def main():
    container = build_container(backend="memory")

    event = container.event_service.create_event(
        event_code="CONF2025", event_name="Medical Conference 2025", event_date=date(2025, 12, 1)
    )
    registration = container.attendee_service.register_attendee(
        event_id=event.id,
        full_name="Dr. John Smith",
        email="john.smith@example.com",
        phone="+1 555 010 0199",
        institution="City Hospital",
        category="delegate",
        meal_entitled=True,
        kit_entitled=False,
    )
    print("badge:", registration.badge_uid)
    print("qr payload:", qr_codec.encode(registration.badge_uid, event.event_code))
    print(zpl.render_label(container.attendee_service.get_by_badge(registration.badge_uid)))

    for kind in ("kit", "meal", "meal"):
        try:
            result = container.check_in_service.check_in(registration.badge_uid, kind)
            print(kind, "->", result.to_dict())
        except DomainError as e:
            print(kind, "->", e.error_code, e.message)


if __name__ == "__main__":
    main()
