"""System clock adapter."""

from datetime import UTC, datetime

from arealink.domain.shared.port.clock import Clock


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(UTC)
