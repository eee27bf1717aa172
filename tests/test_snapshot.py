"""
Tests for catalog snapshots.

These tests verify that snapshots:
1. Capture materials, users, loans, reservations and history
2. Rebuild an equivalent catalog without new audit entries
3. Reject inconsistent lending state
4. Survive a trip through a JSON file
"""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from lending_catalog.catalog import Catalog
from lending_catalog.models import DVD, Book, Magazine, User
from lending_catalog.snapshot import (
    CatalogSnapshot,
    LoanSnapshot,
    MaterialSnapshot,
    UserSnapshot,
    load_snapshot,
    restore_catalog,
    save_snapshot,
    take_snapshot,
)


@pytest.fixture
def busy_catalog(catalog, alice, bob):
    """The small catalog with a loan, a reservation and some history."""
    catalog.reserve(5, "Bob")
    catalog.checkout(1, alice)
    catalog.checkout(9, bob)
    catalog.return_material(9)
    return catalog


class TestTakeSnapshot:
    """Test capturing catalog state."""

    def test_captures_everything(self, busy_catalog):
        snapshot = take_snapshot(busy_catalog)

        assert snapshot.name == "Test Library"
        assert [m.material_id for m in snapshot.materials] == [1, 5, 9]
        assert [u.name for u in snapshot.users] == ["Alice", "Bob"]
        assert [(loan.material_id, loan.user_name) for loan in snapshot.loans] == [(1, "Alice")]

        book, dvd, magazine = snapshot.materials
        assert book.kind == "Book"
        assert book.size == 863
        assert book.available is False
        assert book.holder_name == "Alice"
        assert dvd.reservation_holder == "Bob"
        assert dvd.size == 148
        assert [e.action for e in magazine.history] == ["checked_out", "returned"]


class TestRestoreCatalog:
    """Test rebuilding a catalog."""

    def test_restore_round_trip(self, busy_catalog):
        restored = restore_catalog(take_snapshot(busy_catalog))

        assert restored.name == busy_catalog.name
        assert restored.statistics() == busy_catalog.statistics()

        book = restored.find_by_id(1)
        alice = restored.find_user("Alice")
        assert isinstance(book, Book)
        assert book.holder is alice
        assert alice.held_materials == (book,)
        assert restored.find_loan(1).user is alice

        dvd = restored.find_by_id(5)
        assert isinstance(dvd, DVD)
        assert dvd.reservation_holder == "Bob"

        magazine = restored.find_by_id(9)
        assert isinstance(magazine, Magazine)
        assert magazine.available is True

    def test_restore_records_no_new_history(self, busy_catalog):
        original = {m.material_id: m.history() for m in busy_catalog.materials}
        restored = restore_catalog(take_snapshot(busy_catalog))

        for material in restored.materials:
            assert material.history() == original[material.material_id]

    def test_restored_catalog_keeps_working(self, busy_catalog):
        restored = restore_catalog(take_snapshot(busy_catalog))

        assert restored.return_material(1) is True
        assert restored.find_user("Alice").held_materials == ()
        assert restored.active_loans == []

    def test_restored_loan_keeps_creation_time(self, overdue_catalog):
        loan = overdue_catalog.find_loan(1)
        assert loan.days_late() == 6
        assert loan.compute_fine() == 3.0


class TestSnapshotValidation:
    """Test that inconsistent snapshots are rejected."""

    def _material(self, **overrides):
        data = {
            "kind": "Book",
            "material_id": 1,
            "title": "1984",
            "author": "George Orwell",
            "publication_year": 1949,
            "size": 328,
        }
        data.update(overrides)
        return data

    def test_available_with_holder_rejected(self):
        with pytest.raises(ValidationError, match="holder_name"):
            MaterialSnapshot(**self._material(available=True, holder_name="Alice"))

    def test_on_loan_without_holder_rejected(self):
        with pytest.raises(ValidationError):
            MaterialSnapshot(**self._material(available=False))

    def test_magazine_reservation_rejected(self):
        with pytest.raises(ValidationError):
            MaterialSnapshot(**self._material(kind="Magazine", reservation_holder="Alice"))

    def test_non_positive_size_rejected(self):
        with pytest.raises(ValidationError):
            MaterialSnapshot(**self._material(size=0))

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            MaterialSnapshot(**self._material(kind="Comic"))

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValidationError, match="unique"):
            CatalogSnapshot(name="X", materials=[self._material(), self._material()])

    def test_loan_for_available_material_rejected(self):
        now = datetime.now()
        with pytest.raises(ValidationError, match="on-loan"):
            CatalogSnapshot(
                name="X",
                materials=[self._material()],
                users=[UserSnapshot(name="Alice", email="alice@example.com", registered_at=now)],
                loans=[LoanSnapshot(material_id=1, user_name="Alice", created_at=now)],
            )

    def test_unknown_holder_rejected(self):
        with pytest.raises(ValidationError, match="holder"):
            CatalogSnapshot(
                name="X",
                materials=[self._material(available=False, holder_name="Ghost")],
            )


    def test_loan_user_must_be_the_holder(self):
        now = datetime.now()
        with pytest.raises(ValidationError, match="different user"):
            CatalogSnapshot(
                name="X",
                materials=[self._material(available=False, holder_name="Alice")],
                users=[
                    UserSnapshot(name="Alice", email="alice@example.com", registered_at=now),
                    UserSnapshot(name="Bob", email="bob@example.com", registered_at=now),
                ],
                loans=[LoanSnapshot(material_id=1, user_name="Bob", created_at=now)],
            )

    def test_holder_index_must_match_name(self):
        now = datetime.now()
        with pytest.raises(ValidationError, match="holder"):
            CatalogSnapshot(
                name="X",
                materials=[self._material(available=False, holder_name="Alice", holder_index=1)],
                users=[
                    UserSnapshot(name="Alice", email="alice@example.com", registered_at=now),
                    UserSnapshot(name="Bob", email="bob@example.com", registered_at=now),
                ],
            )


class TestUsersSharingAName:
    """User names are not unique; restore must keep each loan with its own user."""

    @pytest.fixture
    def twin_catalog(self):
        catalog = Catalog(name="Twins")
        catalog.add_material(Book(1, "Emma", "Jane Austen", 1815, 474))
        catalog.add_material(DVD(5, "Inception", "Christopher Nolan", 2010, 148))
        catalog.add_user(User("Alice", "a1@example.com"))
        catalog.add_user(User("Alice", "a2@example.com"))
        first, second = catalog.users
        catalog.checkout(1, second)
        catalog.checkout(5, first)
        return catalog

    def test_snapshot_records_user_positions(self, twin_catalog):
        snapshot = take_snapshot(twin_catalog)

        assert [m.holder_index for m in snapshot.materials] == [1, 0]
        assert {(loan.material_id, loan.user_index) for loan in snapshot.loans} == {(1, 1), (5, 0)}

    def test_restore_keeps_each_loan_with_its_user(self, twin_catalog):
        restored = restore_catalog(take_snapshot(twin_catalog))
        first, second = restored.users

        assert first.email == "a1@example.com"
        assert second.email == "a2@example.com"
        assert restored.find_by_id(1).holder is second
        assert restored.find_loan(1).user is second
        assert restored.find_by_id(5).holder is first
        assert restored.find_loan(5).user is first
        assert [m.material_id for m in first.held_materials] == [5]
        assert [m.material_id for m in second.held_materials] == [1]

    def test_file_round_trip(self, twin_catalog, tmp_path):
        path = tmp_path / "twins.json"
        save_snapshot(twin_catalog, path)

        restored = load_snapshot(path)
        assert restored.find_by_id(1).holder.email == "a2@example.com"

        assert restored.return_material(1) is True
        first, second = restored.users
        assert second.held_materials == ()
        assert [m.material_id for m in first.held_materials] == [5]


class TestSnapshotFiles:
    """Test JSON files."""

    def test_save_and_load(self, busy_catalog, tmp_path):
        path = tmp_path / "snapshots" / "catalog.json"

        save_snapshot(busy_catalog, path)
        assert path.exists()

        restored = load_snapshot(path)
        assert restored.statistics() == busy_catalog.statistics()
        assert restored.find_by_id(5).reservation_holder == "Bob"
        assert [e.action for e in restored.find_by_id(9).history()] == ["checked_out", "returned"]

    def test_loaded_loan_times_survive(self, overdue_catalog, tmp_path):
        path = tmp_path / "catalog.json"
        save_snapshot(overdue_catalog, path)

        restored = load_snapshot(path)
        created = restored.find_loan(1).created_at
        assert datetime.now() - created > timedelta(days=19)
        assert restored.outstanding_fines() == pytest.approx(3.0)
