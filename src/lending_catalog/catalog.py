"""
Catalog registry for the lending catalog.

The catalog owns every material (by id), the registered users and the active
loans. It is the only component that creates or removes loans, and it
orchestrates checkout and return so that the loan, the material availability
and the user's held set always move together.

Concurrency:
    All operations, reads included, run under one re-entrant lock. A host
    that serves concurrent callers can share a single ``Catalog`` instance;
    no caller will see a loan without its matching availability flip.
"""

import logging
import threading
from datetime import datetime

from pydantic import BaseModel, Field

from .exceptions import (
    AlreadyOnLoanError,
    DuplicateMaterialError,
    MaterialNotFoundError,
    NotReservableError,
    UserNotFoundError,
)
from .models.loan import DEFAULT_LOAN_LIMIT_DAYS, Loan
from .models.material import Material, MaterialKind, Reservable
from .models.user import User

logger = logging.getLogger(__name__)


class CatalogStatistics(BaseModel):
    """Point-in-time counts over the whole catalog."""

    total: int = Field(..., description="Number of materials in the catalog", ge=0)
    available: int = Field(..., description="Materials currently on the shelf", ge=0)
    on_loan: int = Field(..., description="Materials currently lent out", ge=0)
    by_kind: dict[str, int] = Field(
        ...,
        description="Material count per kind tag",
        examples=[{"Book": 4, "DVD": 4, "Magazine": 4}],
    )
    users: int = Field(..., description="Registered users", ge=0)
    active_loans: int = Field(..., description="Loans not yet returned", ge=0)


class ActivityEntry(BaseModel):
    """An audit entry tagged with the material it belongs to."""

    material_id: int
    title: str
    kind: str
    action: str
    details: str
    timestamp: datetime


class Catalog:
    """Registry of materials, users and active loans."""

    def __init__(
        self,
        name: str = "Central Library",
        loan_limit_days: int = DEFAULT_LOAN_LIMIT_DAYS,
    ) -> None:
        self.name = name
        self.loan_limit_days = loan_limit_days

        self._materials: dict[int, Material] = {}
        self._users: list[User] = []
        self._active_loans: list[Loan] = []
        self._lock = threading.RLock()

    # === Collections ===

    @property
    def materials(self) -> list[Material]:
        with self._lock:
            return list(self._materials.values())

    @property
    def users(self) -> list[User]:
        with self._lock:
            return list(self._users)

    @property
    def active_loans(self) -> list[Loan]:
        with self._lock:
            return list(self._active_loans)

    # === Materials ===

    def add_material(self, material: Material) -> None:
        """
        Register a material.

        Raises:
            DuplicateMaterialError: If the id is already registered
        """
        with self._lock:
            if material.material_id in self._materials:
                raise DuplicateMaterialError(material.material_id)
            self._materials[material.material_id] = material
        logger.info("Added %s %s '%s'", material.kind_tag, material.material_id, material.title)

    def remove_material(self, material_id: int) -> bool:
        """
        Drop a material from the catalog. Returns False if the id is unknown.

        Raises:
            AlreadyOnLoanError: If the material is on loan; return it first
        """
        with self._lock:
            material = self._materials.get(material_id)
            if material is None:
                return False
            if not material.available:
                raise AlreadyOnLoanError(material_id, "Cannot remove a material that is on loan")
            del self._materials[material_id]
        logger.info("Removed material %s '%s'", material_id, material.title)
        return True

    def find_by_id(self, material_id: int) -> Material | None:
        with self._lock:
            return self._materials.get(material_id)

    def require_material(self, material_id: int) -> Material:
        """
        Look up a material by id.

        Raises:
            MaterialNotFoundError: If the id is unknown
        """
        material = self.find_by_id(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)
        return material

    def search_by_title(self, text: str) -> list[Material]:
        """Case-insensitive substring match on title, in catalog order."""
        needle = text.casefold()
        return [m for m in self.materials if needle in m.title.casefold()]

    def search_by_author(self, text: str) -> list[Material]:
        """Case-insensitive substring match on author, in catalog order."""
        needle = text.casefold()
        return [m for m in self.materials if needle in m.author.casefold()]

    def list_available(self) -> list[Material]:
        return [m for m in self.materials if m.available]

    def list_on_loan(self) -> list[Material]:
        return [m for m in self.materials if not m.available]

    def list_by_kind(self, kind: str) -> list[Material]:
        tag = kind.value if isinstance(kind, MaterialKind) else kind
        return [m for m in self.materials if m.kind_tag == tag]

    def list_books(self) -> list[Material]:
        return self.list_by_kind(MaterialKind.BOOK)

    def list_dvds(self) -> list[Material]:
        return self.list_by_kind(MaterialKind.DVD)

    def list_magazines(self) -> list[Material]:
        return self.list_by_kind(MaterialKind.MAGAZINE)

    # === Users ===

    def add_user(self, user: User) -> None:
        with self._lock:
            self._users.append(user)
        logger.info("Registered user '%s'", user.name)

    def find_user(self, name: str) -> User | None:
        """Case-insensitive exact name match; the first registered match wins."""
        wanted = name.casefold()
        with self._lock:
            for user in self._users:
                if user.name.casefold() == wanted:
                    return user
        return None

    def require_user(self, name: str) -> User:
        """
        Look up a user by name.

        Raises:
            UserNotFoundError: If no user matches
        """
        user = self.find_user(name)
        if user is None:
            raise UserNotFoundError(name)
        return user

    # === Circulation ===

    def checkout(self, material_id: int, user: User) -> bool:
        """
        Lend a material to a user.

        Creates the loan and flips the material to "on loan" as one step.

        Raises:
            MaterialNotFoundError: If the id is unknown
            AlreadyOnLoanError: If the material is not available
        """
        with self._lock:
            material = self._materials.get(material_id)
            if material is None:
                raise MaterialNotFoundError(material_id)
            if not material.available:
                raise AlreadyOnLoanError(material_id)

            loan = Loan(material, user, self.loan_limit_days)
            if not material.checkout(user):
                # Undo the held-set registration made by the loan
                user.remove_loan(material_id)
                logger.warning("Checkout of material %s rolled back", material_id)
                return False

            self._active_loans.append(loan)

        logger.info("Checked out material %s to '%s'", material_id, user.name)
        return True

    def return_material(self, material_id: int) -> bool:
        """
        Take a material back.

        Routes through the active loan when one exists. Returns False only
        when the id is unknown.
        """
        with self._lock:
            material = self._materials.get(material_id)
            if material is None:
                return False

            loan = self._find_active_loan(material_id)
            if loan is not None:
                loan.return_loan()
                self._active_loans.remove(loan)
                logger.info(
                    "Returned material %s from '%s', fine %.2f",
                    material_id,
                    loan.user.name,
                    loan.compute_fine(),
                )
                return True

            # No tracked loan: the holder's held set is left untouched
            logger.warning("No active loan for material %s, returning it directly", material_id)
            return material.return_item()

    def find_loan(self, material_id: int) -> Loan | None:
        with self._lock:
            return self._find_active_loan(material_id)

    def _find_active_loan(self, material_id: int) -> Loan | None:
        for loan in self._active_loans:
            if loan.material.material_id == material_id:
                return loan
        return None

    def loans_for(self, user: User) -> list[Loan]:
        return [loan for loan in self.active_loans if loan.user is user]

    def overdue_loans(self, now: datetime | None = None) -> list[Loan]:
        return [loan for loan in self.active_loans if loan.is_overdue(now)]

    def outstanding_fines(self, now: datetime | None = None) -> float:
        """Total fines accrued so far across all active loans."""
        return sum(loan.compute_fine(now) for loan in self.active_loans)

    # === Reservations ===

    def reserve(self, material_id: int, user_name: str) -> bool:
        """
        Reserve a material under the catalog lock.

        Raises:
            MaterialNotFoundError: If the id is unknown
            NotReservableError: If the material kind does not support reservations
        """
        with self._lock:
            material = self._reservable(material_id)
            reserved = material.reserve(user_name)
        if reserved:
            logger.info("Material %s reserved for '%s'", material_id, user_name)
        return reserved

    def cancel_reservation(self, material_id: int) -> bool:
        with self._lock:
            material = self._reservable(material_id)
            cancelled = material.cancel_reservation()
        if cancelled:
            logger.info("Reservation on material %s cancelled", material_id)
        return cancelled

    def _reservable(self, material_id: int) -> Reservable:
        material = self._materials.get(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)
        if not isinstance(material, Reservable):
            raise NotReservableError(material_id, material.kind_tag)
        return material

    # === Reporting ===

    def statistics(self) -> CatalogStatistics:
        with self._lock:
            by_kind = {kind.value: 0 for kind in MaterialKind}
            available = 0
            for material in self._materials.values():
                if material.available:
                    available += 1
                by_kind[material.kind_tag] = by_kind.get(material.kind_tag, 0) + 1

            total = len(self._materials)
            return CatalogStatistics(
                total=total,
                available=available,
                on_loan=total - available,
                by_kind=by_kind,
                users=len(self._users),
                active_loans=len(self._active_loans),
            )

    def recent_activity(self, limit: int | None = None) -> list[ActivityEntry]:
        """Audit entries across all materials, newest first."""
        recorded = [(entry, material) for material in self.materials for entry in material.history()]
        recorded.sort(key=lambda pair: pair[0].sort_key, reverse=True)
        if limit is not None:
            recorded = recorded[:limit]

        return [
            ActivityEntry(
                material_id=material.material_id,
                title=material.title,
                kind=material.kind_tag,
                action=entry.action,
                details=entry.details,
                timestamp=entry.timestamp,
            )
            for entry, material in recorded
        ]

    def _restore_loan(self, loan: Loan) -> None:
        with self._lock:
            self._active_loans.append(loan)

    def __repr__(self) -> str:
        return f"Catalog(name={self.name!r}, materials={len(self._materials)})"
