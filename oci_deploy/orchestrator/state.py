"""Deploy state of a build unit."""

from enum import StrEnum
from dataclasses import dataclass


class UnitState(StrEnum):
    """Deploy state for a build unit."""

    PENDING = "Pending"
    SKIPPED = "Skipped"
    DEFERRED = "Deferred"
    DEPLOYED = "Deployed"
    FAILED = "Failed"

    @property
    def is_processed(self) -> bool:
        """Return true once the unit has been handled in its own deploy step."""
        return self is not UnitState.PENDING


@dataclass
class UnitStatus:
    """Deploy state and optional error message for a build unit."""

    state: UnitState
    error: str | None = None

    def __str__(self) -> str:
        """Return a string representation of the status."""
        if self.error:
            return f"{self.state}: {self.error}"
        return str(self.state)
