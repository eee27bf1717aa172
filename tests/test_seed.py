"""Tests for the demo catalog data."""

from lending_catalog.catalog import Catalog
from lending_catalog.models import DVD, Book, Magazine
from lending_catalog.seed import DEMO_USERS, seed_demo_catalog


def test_seed_populates_every_kind():
    catalog = seed_demo_catalog(Catalog())

    assert all(isinstance(m, Book) for m in catalog.list_books())
    assert all(isinstance(m, DVD) for m in catalog.list_dvds())
    assert all(isinstance(m, Magazine) for m in catalog.list_magazines())
    assert catalog.statistics().by_kind == {"Book": 4, "DVD": 4, "Magazine": 4}
    assert [u.name for u in catalog.users] == [name for name, _ in DEMO_USERS]


def test_seed_starts_with_everything_on_the_shelf():
    catalog = seed_demo_catalog(Catalog())

    assert len(catalog.list_available()) == 12
    assert catalog.active_loans == []
    assert catalog.recent_activity() == []


def test_seed_returns_the_same_catalog():
    catalog = Catalog(name="Seeded")
    assert seed_demo_catalog(catalog) is catalog
