"""
Material hierarchy for the lending catalog.

A material is anything the catalog can lend. Three concrete kinds exist:

- Book: reservable, fined 0.50 per day late
- DVD: reservable, fined 1.00 per day late
- Magazine: not reservable, fined 0.25 per day late

Every material carries the same lending state machine (available <-> on loan)
and owns an ``AuditLog``. Reservation is a separate capability, modelled by
the ``Reservable`` abstract type, so callers can ask
``isinstance(material, Reservable)`` instead of probing for methods.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from ..exceptions import InvalidAttributeError
from .audit import AuditEntry, AuditLog

if TYPE_CHECKING:
    from .user import User

logger = logging.getLogger(__name__)


class MaterialKind(str, Enum):
    """Type tags for the built-in material kinds."""

    BOOK = "Book"
    DVD = "DVD"
    MAGAZINE = "Magazine"


def _require_positive(attribute: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidAttributeError(attribute, value)
    return value


def _require_days_late(days_late: int) -> int:
    if isinstance(days_late, bool) or not isinstance(days_late, int) or days_late < 0:
        raise InvalidAttributeError("days_late", days_late)
    return days_late


class Material(ABC):
    """
    Abstract catalog item with lending state and an audit trail.

    Invariant: ``available`` is False exactly when ``holder`` is set. Only
    ``checkout`` and ``return_item`` change either of them.
    """

    def __init__(self, material_id: int, title: str, author: str, publication_year: int) -> None:
        self._material_id = material_id
        self._title = title
        self._author = author
        self._publication_year = publication_year

        self._available = True
        self._holder: User | None = None
        self._checked_out_at: datetime | None = None
        self._audit = AuditLog()

    # === Kind-specific policy ===

    @property
    @abstractmethod
    def kind_tag(self) -> str:
        """Constant tag naming the material kind."""

    @abstractmethod
    def compute_fine(self, days_late: int) -> float:
        """Fine owed for ``days_late`` days past the loan limit."""

    # === Descriptive fields ===

    @property
    def material_id(self) -> int:
        return self._material_id

    @property
    def title(self) -> str:
        return self._title

    @property
    def author(self) -> str:
        return self._author

    @property
    def publication_year(self) -> int:
        return self._publication_year

    # === Lending state ===

    @property
    def available(self) -> bool:
        return self._available

    @property
    def holder(self) -> "User | None":
        return self._holder

    @property
    def checked_out_at(self) -> datetime | None:
        return self._checked_out_at

    def checkout(self, user: "User") -> bool:
        """
        Lend this material to ``user``.

        Returns:
            False without changing anything if the material is not available
        """
        if not self._available:
            logger.debug("Checkout skipped, material %s is not available", self._material_id)
            return False

        self._holder = user
        self._checked_out_at = datetime.now()
        self._available = False

        self._audit.record("checked_out", user.name)
        return True

    def return_item(self) -> bool:
        """
        Mark this material as back on the shelf.

        Returns:
            False without changing anything if the material was already available
        """
        if self._available:
            logger.debug("Return skipped, material %s is already available", self._material_id)
            return False

        holder_name = self._holder.name if self._holder is not None else "none"

        self._available = True
        self._holder = None
        self._checked_out_at = None

        self._audit.record("returned", holder_name)
        return True

    def _restore_lending_state(
        self,
        holder: "User | None",
        checked_out_at: datetime | None,
        history: list[AuditEntry],
    ) -> None:
        """Reinstate lending state from a snapshot without recording new actions."""
        self._holder = holder
        self._available = holder is None
        self._checked_out_at = checked_out_at if holder is not None else None
        self._audit = AuditLog(history)

    # === Audit delegation ===

    def record_action(self, action: str, details: str = "") -> AuditEntry:
        return self._audit.record(action, details)

    def history(self) -> tuple[AuditEntry, ...]:
        """Recorded actions, oldest first."""
        return self._audit.history()

    def last_action(self) -> AuditEntry | None:
        return self._audit.last_action()

    def clear_history(self) -> None:
        self._audit.clear()

    def __str__(self) -> str:
        status = "Available" if self._available else "On loan"
        return f"{self.kind_tag}: {self._title} by {self._author} ({self._publication_year}) - {status}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(material_id={self._material_id!r}, "
            f"title={self._title!r}, available={self._available!r})"
        )


class Reservable(ABC):
    """
    Capability for materials that accept a claim on future availability.

    A reservation is independent of the lending state: it is not cleared
    when the material is checked out, only by ``cancel_reservation``.
    """

    @abstractmethod
    def reserve(self, user_name: str) -> bool:
        """Reserve for ``user_name``; only succeeds while available."""

    @abstractmethod
    def cancel_reservation(self) -> bool:
        """Drop the current reservation, if any."""

    @property
    @abstractmethod
    def is_reserved(self) -> bool:
        """Whether someone holds a reservation."""

    @property
    @abstractmethod
    def reservation_holder(self) -> str | None:
        """Name of the user holding the reservation."""


class ReservableMaterial(Material, Reservable):
    """Material base that carries the reservation state shared by books and DVDs."""

    def __init__(self, material_id: int, title: str, author: str, publication_year: int) -> None:
        super().__init__(material_id, title, author, publication_year)
        self._reservation_holder: str | None = None

    def reserve(self, user_name: str) -> bool:
        if not self.available:
            return False

        # A later reservation replaces an earlier one
        self._reservation_holder = user_name
        self.record_action("reserved", user_name)
        return True

    def cancel_reservation(self) -> bool:
        if self._reservation_holder is None:
            return False

        self.record_action("reservation_cancelled", self._reservation_holder)
        self._reservation_holder = None
        return True

    @property
    def is_reserved(self) -> bool:
        return self._reservation_holder is not None

    @property
    def reservation_holder(self) -> str | None:
        return self._reservation_holder

    def _restore_reservation(self, user_name: str | None) -> None:
        self._reservation_holder = user_name

    def __str__(self) -> str:
        base = super().__str__()
        if self._reservation_holder is None:
            return base
        return f"{base} (reserved by {self._reservation_holder})"


class Book(ReservableMaterial):
    """A printed book."""

    DAILY_FINE_RATE = 0.50

    def __init__(
        self,
        material_id: int,
        title: str,
        author: str,
        publication_year: int,
        page_count: int,
    ) -> None:
        self._page_count = _require_positive("page_count", page_count)
        super().__init__(material_id, title, author, publication_year)

    @property
    def kind_tag(self) -> str:
        return MaterialKind.BOOK.value

    @property
    def page_count(self) -> int:
        return self._page_count

    def compute_fine(self, days_late: int) -> float:
        return self.DAILY_FINE_RATE * _require_days_late(days_late)

    def __str__(self) -> str:
        return f"{super().__str__()} - {self._page_count} pages"


class DVD(ReservableMaterial):
    """A film on disc."""

    DAILY_FINE_RATE = 1.00

    def __init__(
        self,
        material_id: int,
        title: str,
        author: str,
        publication_year: int,
        duration_minutes: int,
    ) -> None:
        self._duration_minutes = _require_positive("duration_minutes", duration_minutes)
        super().__init__(material_id, title, author, publication_year)

    @property
    def kind_tag(self) -> str:
        return MaterialKind.DVD.value

    @property
    def duration_minutes(self) -> int:
        return self._duration_minutes

    @property
    def formatted_duration(self) -> str:
        """Duration as hours and minutes, e.g. ``2h 28min``."""
        hours, minutes = divmod(self._duration_minutes, 60)
        return f"{hours}h {minutes}min"

    def compute_fine(self, days_late: int) -> float:
        return self.DAILY_FINE_RATE * _require_days_late(days_late)

    def __str__(self) -> str:
        return f"{super().__str__()} - {self.formatted_duration}"


class Magazine(Material):
    """A periodical issue. Magazines cannot be reserved."""

    DAILY_FINE_RATE = 0.25

    def __init__(
        self,
        material_id: int,
        title: str,
        author: str,
        publication_year: int,
        edition_number: int,
    ) -> None:
        self._edition_number = _require_positive("edition_number", edition_number)
        super().__init__(material_id, title, author, publication_year)

    @property
    def kind_tag(self) -> str:
        return MaterialKind.MAGAZINE.value

    @property
    def edition_number(self) -> int:
        return self._edition_number

    def compute_fine(self, days_late: int) -> float:
        return self.DAILY_FINE_RATE * _require_days_late(days_late)

    def __str__(self) -> str:
        return f"{super().__str__()} - edition no. {self._edition_number}"
