"""
Loan model for the lending catalog.

A loan is the record of one checkout. It is created by the catalog together
with the material's checkout transition and owns the overdue and fine
calculations. Fines are delegated to the material, so the rate depends on the
material kind.
"""

import logging
from datetime import datetime

from .material import Material
from .user import User

logger = logging.getLogger(__name__)

DEFAULT_LOAN_LIMIT_DAYS = 14


class Loan:
    """
    One borrow transaction.

    Creating a loan registers the material in the user's held set.
    ``return_loan`` is the single path that closes a loan.
    """

    def __init__(
        self,
        material: Material,
        user: User,
        loan_limit_days: int = DEFAULT_LOAN_LIMIT_DAYS,
        created_at: datetime | None = None,
    ) -> None:
        self._material = material
        self._user = user
        self._loan_limit_days = loan_limit_days
        self._created_at = created_at or datetime.now()
        self._returned_at: datetime | None = None

        self._user.add_loan(material)

    @property
    def material(self) -> Material:
        return self._material

    @property
    def user(self) -> User:
        return self._user

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def returned_at(self) -> datetime | None:
        return self._returned_at

    @property
    def loan_limit_days(self) -> int:
        return self._loan_limit_days

    @property
    def is_returned(self) -> bool:
        return self._returned_at is not None

    def _elapsed_days(self, until: datetime) -> int:
        # Whole days between creation and ``until``
        return abs(until - self._created_at).days

    def days_late(self, now: datetime | None = None) -> int:
        """
        Days past the loan limit.

        Measured up to the return time once returned, otherwise up to now, so
        the figure keeps growing while the loan is open.
        """
        end = self._returned_at or now or datetime.now()
        return max(0, self._elapsed_days(end) - self._loan_limit_days)

    def days_remaining(self, now: datetime | None = None) -> int:
        """
        Days left before the loan limit, negative once overdue.

        Always measured against the current time, even after return.
        """
        return self._loan_limit_days - self._elapsed_days(now or datetime.now())

    def is_overdue(self, now: datetime | None = None) -> bool:
        return self.days_late(now) > 0

    def compute_fine(self, now: datetime | None = None) -> float:
        return self._material.compute_fine(self.days_late(now))

    def return_loan(self, when: datetime | None = None) -> None:
        """
        Close the loan.

        Stamps the return time, removes the material from the user's held set
        and returns the material to the shelf. Calling it on a closed loan
        does nothing.
        """
        if self._returned_at is not None:
            logger.debug("Loan for material %s already returned", self._material.material_id)
            return

        self._returned_at = when or datetime.now()
        self._user.remove_loan(self._material.material_id)
        self._material.return_item()

    def __repr__(self) -> str:
        return (
            f"Loan(material_id={self._material.material_id!r}, user={self._user.name!r}, "
            f"created_at={self._created_at.isoformat()!r}, returned={self.is_returned!r})"
        )
