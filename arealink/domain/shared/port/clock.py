"""Clock port."""

from abc import abstractmethod
from datetime import datetime
from typing import Protocol

from arealink.domain.shared.port import Port


class Clock(Port, Protocol):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        ...
