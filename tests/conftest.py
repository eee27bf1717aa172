"""Test configuration and fixtures for the Lending Catalog.

Fixtures build small catalogs in memory; nothing touches the network or
disk except the snapshot tests, which use ``tmp_path``.

Time-dependent behaviour (overdue days, fines) is tested by backdating loan
creation through snapshots or by passing an explicit ``now``, never by
sleeping.
"""

from collections.abc import Generator
from datetime import datetime, timedelta

import logfire
import pytest

from lending_catalog.catalog import Catalog
from lending_catalog.config import reset_config
from lending_catalog.models import DVD, Book, Magazine, User
from lending_catalog.seed import seed_demo_catalog
from lending_catalog.snapshot import (
    CatalogSnapshot,
    LoanSnapshot,
    MaterialSnapshot,
    UserSnapshot,
    restore_catalog,
)


@pytest.fixture(scope="session", autouse=True)
def configure_logfire() -> None:
    """Keep spans and metrics local during tests."""
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Give every test a fresh configuration without LENDING_CATALOG_* leaking in."""
    monkeypatch.delenv("LENDING_CATALOG_SNAPSHOT_PATH", raising=False)
    reset_config()
    yield
    reset_config()


# === Domain Fixtures ===


@pytest.fixture
def alice() -> User:
    return User("Alice", "alice@example.com")


@pytest.fixture
def bob() -> User:
    return User("Bob", "bob@example.com")


@pytest.fixture
def book() -> Book:
    return Book(1, "Don Quixote", "Miguel de Cervantes", 1605, 863)


@pytest.fixture
def dvd() -> DVD:
    return DVD(5, "Inception", "Christopher Nolan", 2010, 148)


@pytest.fixture
def magazine() -> Magazine:
    return Magazine(9, "National Geographic", "Various", 2023, 200)


@pytest.fixture
def catalog(book: Book, dvd: DVD, magazine: Magazine, alice: User, bob: User) -> Catalog:
    """A small catalog with one material of each kind and two users."""
    catalog = Catalog(name="Test Library")
    catalog.add_material(book)
    catalog.add_material(dvd)
    catalog.add_material(magazine)
    catalog.add_user(alice)
    catalog.add_user(bob)
    return catalog


@pytest.fixture
def demo_catalog() -> Catalog:
    """The full demo catalog used by the server."""
    return seed_demo_catalog(Catalog(name="Demo Library"))


@pytest.fixture
def overdue_catalog() -> Catalog:
    """
    A catalog restored with loans created in the past.

    - Book 1 lent to Alice 20 days ago (6 days late on a 14-day limit)
    - DVD 5 lent to Bob 3 days ago (not late)
    """
    now = datetime.now()
    snapshot = CatalogSnapshot(
        name="Overdue Library",
        materials=[
            MaterialSnapshot(
                kind="Book",
                material_id=1,
                title="Don Quixote",
                author="Miguel de Cervantes",
                publication_year=1605,
                size=863,
                available=False,
                holder_name="Alice",
                checked_out_at=now - timedelta(days=20),
            ),
            MaterialSnapshot(
                kind="DVD",
                material_id=5,
                title="Inception",
                author="Christopher Nolan",
                publication_year=2010,
                size=148,
                available=False,
                holder_name="Bob",
                checked_out_at=now - timedelta(days=3),
            ),
            MaterialSnapshot(
                kind="Magazine",
                material_id=9,
                title="National Geographic",
                author="Various",
                publication_year=2023,
                size=200,
            ),
        ],
        users=[
            UserSnapshot(name="Alice", email="alice@example.com", registered_at=now),
            UserSnapshot(name="Bob", email="bob@example.com", registered_at=now),
        ],
        loans=[
            LoanSnapshot(material_id=1, user_name="Alice", created_at=now - timedelta(days=20)),
            LoanSnapshot(material_id=5, user_name="Bob", created_at=now - timedelta(days=3)),
        ],
    )
    return restore_catalog(snapshot)
