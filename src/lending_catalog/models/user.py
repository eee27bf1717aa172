"""
User model for the lending catalog.

A user is identified by name within a catalog and carries a validated email
address. The set of materials a user currently holds is owned by the loan
lifecycle: ``Loan`` adds to it on checkout and removes from it on return.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import EmailStr, TypeAdapter, ValidationError

from ..exceptions import InvalidEmailError

if TYPE_CHECKING:
    from .material import Material

_email_adapter = TypeAdapter(EmailStr)


def validate_email_address(email: str) -> str:
    """
    Validate ``email`` and return it normalized.

    Raises:
        InvalidEmailError: If the address is not well formed
    """
    try:
        return _email_adapter.validate_python(email)
    except ValidationError as e:
        raise InvalidEmailError(email) from e


class User:
    """
    A registered borrower.

    Only ``email`` can change after construction, and only through its
    validating setter. ``held_materials`` preserves borrow order.
    """

    def __init__(self, name: str, email: str, registered_at: datetime | None = None) -> None:
        # Validate before assigning anything so a bad address builds nothing
        validated = validate_email_address(email)

        self._name = name
        self._email = validated
        self._registered_at = registered_at or datetime.now()
        self._held: list[Material] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def email(self) -> str:
        return self._email

    @email.setter
    def email(self, value: str) -> None:
        self._email = validate_email_address(value)

    @property
    def registered_at(self) -> datetime:
        return self._registered_at

    @property
    def held_materials(self) -> tuple["Material", ...]:
        return tuple(self._held)

    @property
    def held_count(self) -> int:
        return len(self._held)

    def holds(self, material_id: int) -> bool:
        return any(m.material_id == material_id for m in self._held)

    def add_loan(self, material: "Material") -> None:
        self._held.append(material)

    def remove_loan(self, material_id: int) -> None:
        """Drop the first held material with ``material_id``; absent ids are ignored."""
        for index, material in enumerate(self._held):
            if material.material_id == material_id:
                del self._held[index]
                break

    def __str__(self) -> str:
        return f"User: {self._name}, Email: {self._email}, Materials held: {len(self._held)}"

    def __repr__(self) -> str:
        return f"User(name={self._name!r}, email={self._email!r})"
