"""
Demo data for the lending catalog.

Populates a catalog with a small, fixed set of materials of every kind and a
handful of users, so a freshly started server has something to browse, lend
and reserve.
"""

import logging

from .catalog import Catalog
from .models.material import DVD, Book, Magazine
from .models.user import User

logger = logging.getLogger(__name__)

# (id, title, author, year, pages)
DEMO_BOOKS = [
    (1, "Don Quixote", "Miguel de Cervantes", 1605, 863),
    (2, "One Hundred Years of Solitude", "Gabriel Garcia Marquez", 1967, 417),
    (3, "1984", "George Orwell", 1949, 328),
    (4, "Moby Dick", "Herman Melville", 1851, 635),
]

# (id, title, director, year, minutes)
DEMO_DVDS = [
    (5, "Inception", "Christopher Nolan", 2010, 148),
    (6, "Interstellar", "Christopher Nolan", 2014, 169),
    (7, "The Matrix", "The Wachowskis", 1999, 136),
    (8, "Parasite", "Bong Joon-ho", 2019, 132),
]

# (id, title, publisher, year, edition)
DEMO_MAGAZINES = [
    (9, "National Geographic", "Various", 2023, 200),
    (10, "Time", "Various", 2023, 125),
    (11, "Scientific American", "Various", 2023, 150),
    (12, "The Economist", "Various", 2023, 120),
]

# (name, email)
DEMO_USERS = [
    ("Alice", "alice@example.com"),
    ("Bob", "bob@example.com"),
    ("Carlos", "carlos@example.com"),
    ("Diana", "diana@example.com"),
]


def seed_demo_catalog(catalog: Catalog) -> Catalog:
    """Add the demo materials and users to ``catalog`` and return it."""
    for row in DEMO_BOOKS:
        catalog.add_material(Book(*row))
    for row in DEMO_DVDS:
        catalog.add_material(DVD(*row))
    for row in DEMO_MAGAZINES:
        catalog.add_material(Magazine(*row))

    for name, email in DEMO_USERS:
        catalog.add_user(User(name, email))

    logger.info(
        "Seeded catalog '%s' with %d materials and %d users",
        catalog.name,
        len(DEMO_BOOKS) + len(DEMO_DVDS) + len(DEMO_MAGAZINES),
        len(DEMO_USERS),
    )
    return catalog
