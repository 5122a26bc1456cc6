from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .analytics.exports import ExportService
from .analytics.service import AnalyticsService
from .attendees.memory_attendee_repository import MemoryAttendeeRepository
from .attendees.mysql_attendee_repository import MySQLAttendeeRepository
from .attendees.repository import AttendeeRepository
from .attendees.service import AttendeeService
from .badges.generator import BadgeUIDGenerator
from .checkins.factory import EntitlementRuleFactory
from .checkins.memory_checkin_repository import MemoryCheckInRepository
from .checkins.mysql_checkin_repository import MySQLCheckInRepository
from .checkins.repository import CheckInRepository
from .checkins.service import CheckInService
from .core.constants import DEFAULT_BADGE_PRINT_TEMPLATE
from .core.enums import StoreBackend
from .database.connection import DBConfig, DatabaseConnection
from .database.memory_store import MemoryStore
from .events.memory_event_repository import MemoryEventRepository
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .health.service import HealthService, MemoryStoreProbe, MySQLStoreProbe, StoreProbe
from .ratelimit.limiter import FixedWindowRateLimiter


@dataclass(frozen=True)
class Container:
    backend: StoreBackend
    conn: Optional[DatabaseConnection]
    memory_store: Optional[MemoryStore]

    events_repo: EventRepository
    attendees_repo: AttendeeRepository
    check_ins_repo: CheckInRepository

    badge_generator: BadgeUIDGenerator
    rate_limiter: FixedWindowRateLimiter

    event_service: EventService
    attendee_service: AttendeeService
    check_in_service: CheckInService
    analytics_service: AnalyticsService
    export_service: ExportService
    health_service: HealthService


def build_container(
    *,
    db_config: Optional[dict] = None,
    backend: StoreBackend | str = StoreBackend.MYSQL,
    memory_store: Optional[MemoryStore] = None,
    badge_generator: Optional[BadgeUIDGenerator] = None,
    rate_limiter: Optional[FixedWindowRateLimiter] = None,
    badge_print_template: str = DEFAULT_BADGE_PRINT_TEMPLATE,
    app_version: str = "1.0.0",
    environment: str = "development",
) -> Container:
    backend = StoreBackend(backend)
    conn: Optional[DatabaseConnection] = None
    probe: StoreProbe

    if backend == StoreBackend.MEMORY:
        memory_store = memory_store or MemoryStore()
        events_repo = MemoryEventRepository(memory_store)
        attendees_repo = MemoryAttendeeRepository(memory_store)
        check_ins_repo = MemoryCheckInRepository(memory_store)
        probe = MemoryStoreProbe(memory_store)
    else:
        if not db_config:
            raise ValueError("db_config is required for the mysql backend")
        conn = DatabaseConnection(DBConfig.from_mapping(db_config))
        events_repo = MySQLEventRepository(conn)
        attendees_repo = MySQLAttendeeRepository(conn)
        check_ins_repo = MySQLCheckInRepository(conn)
        probe = MySQLStoreProbe(conn)

    badge_generator = badge_generator or BadgeUIDGenerator()
    rate_limiter = rate_limiter or FixedWindowRateLimiter()

    event_service = EventService(events_repo)
    attendee_service = AttendeeService(
        attendees_repo,
        events_repo,
        check_ins_repo,
        generate_badge_uid=badge_generator.generate,
        badge_print_template=badge_print_template,
    )
    check_in_service = CheckInService(check_ins_repo, attendees_repo, rule_factory=EntitlementRuleFactory())
    analytics_service = AnalyticsService(attendees_repo, check_ins_repo, events_repo)
    export_service = ExportService(attendees_repo, check_ins_repo, events_repo)
    health_service = HealthService(probe, version=app_version, environment=environment)

    return Container(
        backend=backend,
        conn=conn,
        memory_store=memory_store if backend == StoreBackend.MEMORY else None,
        events_repo=events_repo,
        attendees_repo=attendees_repo,
        check_ins_repo=check_ins_repo,
        badge_generator=badge_generator,
        rate_limiter=rate_limiter,
        event_service=event_service,
        attendee_service=attendee_service,
        check_in_service=check_in_service,
        analytics_service=analytics_service,
        export_service=export_service,
        health_service=health_service,
    )
