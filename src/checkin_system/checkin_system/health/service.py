from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import isoformat, now_utc
from ..core.exceptions import StoreUnavailable
from ..database.connection import DatabaseConnection
from ..database.memory_store import MemoryStore
from ..database.mysql_base import db_cursor

logger = logging.getLogger(__name__)


class StoreProbe(Protocol):
    def ping(self) -> None:
        """Raise StoreUnavailable when the store cannot answer."""

        raise NotImplementedError


class MySQLStoreProbe(StoreProbe):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def ping(self) -> None:
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            cur.execute("SELECT 1")
            cur.fetchone()


class MemoryStoreProbe(StoreProbe):
    def __init__(self, store: MemoryStore):
        self._store = store

    def ping(self) -> None:
        self._store.ping()


@dataclass(frozen=True)
class HealthReport:
    healthy: bool
    timestamp: str
    version: str
    environment: str
    database_status: str
    response_time_ms: int

    def to_dict(self) -> dict:
        return {
            "status": "healthy" if self.healthy else "unhealthy",
            "timestamp": self.timestamp,
            "version": self.version,
            "environment": self.environment,
            "services": {
                "database": {"status": self.database_status, "responseTime": f"{self.response_time_ms}ms"},
                "api": {"status": "healthy", "responseTime": f"{self.response_time_ms}ms"},
            },
        }


class HealthService:
    def __init__(
        self,
        probe: StoreProbe,
        *,
        version: str,
        environment: str,
        timer: Optional[Callable[[], float]] = None,
    ):
        self._probe = probe
        self._version = version
        self._environment = environment
        self._timer = timer or time.perf_counter

    def check(self) -> HealthReport:
        started = self._timer()
        try:
            self._probe.ping()
            healthy = True
        except StoreUnavailable:
            healthy = False
        elapsed_ms = int(round((self._timer() - started) * 1000))

        if healthy:
            logger.debug("Health check passed in %dms", elapsed_ms)
        else:
            logger.error("Health check failed: database unreachable (%dms)", elapsed_ms)

        return HealthReport(
            healthy=healthy,
            timestamp=isoformat(now_utc()) + "Z",
            version=self._version,
            environment=self._environment,
            database_status="healthy" if healthy else "unhealthy",
            response_time_ms=elapsed_ms,
        )
