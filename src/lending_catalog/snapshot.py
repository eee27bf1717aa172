"""
Snapshot and restore for the lending catalog.

Catalog state lives in memory for the life of the process. When a host wants
to keep it across restarts, it takes a ``CatalogSnapshot`` (plain pydantic
records for materials, users and active loans) and writes it as JSON.
Restoring rebuilds an equivalent catalog without recording any new audit
entries.

Materials reference their holder, and loans their user, by name plus the
user's position in the snapshot's user list. User names are not unique, so
the position is what restore relies on; the name is kept for readability and
for hand-written snapshots that omit positions.
"""

import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .catalog import Catalog
from .models.audit import AuditEntry
from .models.loan import DEFAULT_LOAN_LIMIT_DAYS, Loan
from .models.material import DVD, Book, Magazine, Material, MaterialKind, ReservableMaterial
from .models.user import User

logger = logging.getLogger(__name__)


class MaterialSnapshot(BaseModel):
    """Stored form of one material."""

    kind: MaterialKind = Field(..., description="Material kind tag")
    material_id: int
    title: str
    author: str
    publication_year: int
    size: int = Field(
        ...,
        description="Page count, duration in minutes or edition number, depending on kind",
        gt=0,
    )
    available: bool = True
    holder_name: str | None = None
    holder_index: int | None = Field(
        default=None,
        description="Position of the holder in the snapshot's users",
        ge=0,
    )
    checked_out_at: datetime | None = None
    reservation_holder: str | None = None
    history: list[AuditEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_lending_state(self) -> "MaterialSnapshot":
        """A material is on loan exactly when it has a holder."""
        if self.available == (self.holder_name is not None):
            raise ValueError("available must be false exactly when holder_name is set")
        if self.reservation_holder is not None and self.kind == MaterialKind.MAGAZINE:
            raise ValueError("Magazines cannot carry a reservation")
        return self


class UserSnapshot(BaseModel):
    """Stored form of one user."""

    name: str
    email: str
    registered_at: datetime


class LoanSnapshot(BaseModel):
    """Stored form of one active loan."""

    material_id: int
    user_name: str
    user_index: int | None = Field(
        default=None,
        description="Position of the borrower in the snapshot's users",
        ge=0,
    )
    created_at: datetime
    loan_limit_days: int = Field(default=DEFAULT_LOAN_LIMIT_DAYS, ge=1)


class CatalogSnapshot(BaseModel):
    """Everything needed to rebuild a catalog."""

    name: str
    loan_limit_days: int = Field(default=DEFAULT_LOAN_LIMIT_DAYS, ge=1)
    materials: list[MaterialSnapshot] = Field(default_factory=list)
    users: list[UserSnapshot] = Field(default_factory=list)
    loans: list[LoanSnapshot] = Field(default_factory=list)
    taken_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def validate_references(self) -> "CatalogSnapshot":
        """Ensure loans and holders point at known materials and users."""
        material_ids = [m.material_id for m in self.materials]
        if len(material_ids) != len(set(material_ids)):
            raise ValueError("Material ids must be unique")

        holders: dict[int, int] = {}
        for material in self.materials:
            if material.holder_name is None:
                continue
            index = self.user_index(material.holder_name, material.holder_index)
            if index is None:
                raise ValueError(f"Unknown holder '{material.holder_name}'")
            holders[material.material_id] = index

        for loan in self.loans:
            if loan.material_id not in holders:
                raise ValueError(f"Loan for material {loan.material_id} has no matching on-loan material")
            index = self.user_index(loan.user_name, loan.user_index)
            if index is None:
                raise ValueError(f"Loan for unknown user '{loan.user_name}'")
            if index != holders[loan.material_id]:
                raise ValueError(
                    f"Loan for material {loan.material_id} names a different user than its holder"
                )

        return self

    def user_index(self, name: str, index: int | None = None) -> int | None:
        """
        Resolve a user reference to a position in ``users``.

        An explicit index must point at a user with that name. Without one,
        the first user whose name matches case-insensitively is used.
        """
        wanted = name.casefold()
        if index is not None:
            if index < len(self.users) and self.users[index].name.casefold() == wanted:
                return index
            return None
        for position, user in enumerate(self.users):
            if user.name.casefold() == wanted:
                return position
        return None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Central Library",
                "loan_limit_days": 14,
                "materials": [
                    {
                        "kind": "Book",
                        "material_id": 1,
                        "title": "Don Quixote",
                        "author": "Miguel de Cervantes",
                        "publication_year": 1605,
                        "size": 863,
                    }
                ],
                "users": [
                    {
                        "name": "Alice",
                        "email": "alice@example.com",
                        "registered_at": "2024-01-15T09:00:00",
                    }
                ],
                "loans": [],
            }
        }
    )


def _material_size(material: Material) -> int:
    if isinstance(material, Book):
        return material.page_count
    if isinstance(material, DVD):
        return material.duration_minutes
    if isinstance(material, Magazine):
        return material.edition_number
    raise TypeError(f"Cannot snapshot material kind {material.kind_tag!r}")


def _build_material(data: MaterialSnapshot) -> Material:
    args = (data.material_id, data.title, data.author, data.publication_year, data.size)
    if data.kind == MaterialKind.BOOK:
        return Book(*args)
    if data.kind == MaterialKind.DVD:
        return DVD(*args)
    return Magazine(*args)


def take_snapshot(catalog: Catalog) -> CatalogSnapshot:
    """Capture the current state of ``catalog``."""
    users = catalog.users
    positions = {id(user): position for position, user in enumerate(users)}

    materials = []
    for material in catalog.materials:
        reservation = material.reservation_holder if isinstance(material, ReservableMaterial) else None
        materials.append(
            MaterialSnapshot(
                kind=material.kind_tag,
                material_id=material.material_id,
                title=material.title,
                author=material.author,
                publication_year=material.publication_year,
                size=_material_size(material),
                available=material.available,
                holder_name=material.holder.name if material.holder is not None else None,
                holder_index=positions.get(id(material.holder)),
                checked_out_at=material.checked_out_at,
                reservation_holder=reservation,
                history=list(material.history()),
            )
        )

    user_snapshots = [
        UserSnapshot(name=u.name, email=u.email, registered_at=u.registered_at) for u in users
    ]
    loans = [
        LoanSnapshot(
            material_id=loan.material.material_id,
            user_name=loan.user.name,
            user_index=positions.get(id(loan.user)),
            created_at=loan.created_at,
            loan_limit_days=loan.loan_limit_days,
        )
        for loan in catalog.active_loans
    ]

    return CatalogSnapshot(
        name=catalog.name,
        loan_limit_days=catalog.loan_limit_days,
        materials=materials,
        users=user_snapshots,
        loans=loans,
    )


def restore_catalog(snapshot: CatalogSnapshot) -> Catalog:
    """Rebuild a catalog from ``snapshot``."""
    catalog = Catalog(name=snapshot.name, loan_limit_days=snapshot.loan_limit_days)

    users = [
        User(user_data.name, user_data.email, registered_at=user_data.registered_at)
        for user_data in snapshot.users
    ]
    for user in users:
        catalog.add_user(user)

    for data in snapshot.materials:
        material = _build_material(data)
        holder = None
        if data.holder_name is not None:
            holder = users[snapshot.user_index(data.holder_name, data.holder_index)]
        material._restore_lending_state(holder, data.checked_out_at, data.history)
        if isinstance(material, ReservableMaterial):
            material._restore_reservation(data.reservation_holder)
        catalog.add_material(material)

    for loan_data in snapshot.loans:
        loan = Loan(
            catalog.require_material(loan_data.material_id),
            users[snapshot.user_index(loan_data.user_name, loan_data.user_index)],
            loan_limit_days=loan_data.loan_limit_days,
            created_at=loan_data.created_at,
        )
        catalog._restore_loan(loan)

    logger.info(
        "Restored catalog '%s' with %d materials, %d users, %d active loans",
        catalog.name,
        len(snapshot.materials),
        len(snapshot.users),
        len(snapshot.loans),
    )
    return catalog


def save_snapshot(catalog: Catalog, path: Path) -> CatalogSnapshot:
    """Write a JSON snapshot of ``catalog`` to ``path``."""
    snapshot = take_snapshot(catalog)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
    logger.info("Saved catalog snapshot to %s", path)
    return snapshot


def load_snapshot(path: Path) -> Catalog:
    """Read a JSON snapshot from ``path`` and rebuild the catalog."""
    snapshot = CatalogSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
    return restore_catalog(snapshot)
