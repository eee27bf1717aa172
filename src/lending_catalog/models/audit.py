"""
Audit log for catalog materials.

Every material owns one ``AuditLog`` by composition. The log is an ordered,
append-only record of lending actions (checkout, return, reservation and
cancellation). Entries are pydantic models so they serialize cleanly into
catalog snapshots and adapter responses.
"""

import itertools
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Process-wide recording order, breaks ties between equal timestamps
_sequence = itertools.count()


class AuditEntry(BaseModel):
    """A single recorded action on a material."""

    action: str = Field(
        ...,
        description="Name of the action that was performed",
        min_length=1,
        examples=["checked_out", "returned", "reserved", "reservation_cancelled"],
    )

    details: str = Field(
        default="",
        description="Free-form details, usually the user involved",
        examples=["Alice", "none"],
    )

    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the action was recorded",
    )

    sequence: int = Field(
        default_factory=lambda: next(_sequence),
        description="Recording order among entries with the same timestamp",
        ge=0,
    )

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return (self.timestamp, self.sequence)

    model_config = ConfigDict(
        # Entries never change after they are appended
        frozen=True,
        json_schema_extra={
            "example": {
                "action": "checked_out",
                "details": "Alice",
                "timestamp": "2024-03-20T10:30:00",
            }
        },
    )


class AuditLog:
    """
    Append-only, per-material action history.

    Entries are kept oldest-first and are never reordered. There is no
    capacity bound and no eviction; ``clear`` exists for diagnostics only.
    """

    def __init__(self, entries: list[AuditEntry] | None = None) -> None:
        self._entries: list[AuditEntry] = list(entries or [])

    def record(self, action: str, details: str = "") -> AuditEntry:
        """Append a new entry and return it."""
        entry = AuditEntry(action=action, details=details)
        self._entries.append(entry)
        return entry

    def history(self) -> tuple[AuditEntry, ...]:
        """Return all entries, oldest first."""
        return tuple(self._entries)

    def last_action(self) -> AuditEntry | None:
        if not self._entries:
            return None
        return self._entries[-1]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
