"""
Lending Catalog Package.

An in-memory catalog of circulating materials (books, DVDs and magazines)
with checkout, return, reservation and per-kind fine calculation.

Key Components:
- models: Materials, the Reservable capability, users, loans and audit logs
- catalog: The registry that owns materials, users and active loans
- snapshot: JSON snapshot and restore of a whole catalog
- config: Settings management with pydantic-settings
- tools / resources / server: MCP adapter over a catalog instance
"""

__version__ = "0.1.0"

from .catalog import Catalog, CatalogStatistics
from .exceptions import (
    AlreadyOnLoanError,
    CatalogError,
    InvalidAttributeError,
    InvalidEmailError,
    MaterialNotFoundError,
    NotFoundError,
    NotReservableError,
    UserNotFoundError,
)
from .models import DVD, Book, Loan, Magazine, Material, MaterialKind, Reservable, User

__all__ = [
    "DVD",
    "AlreadyOnLoanError",
    "Book",
    "Catalog",
    "CatalogError",
    "CatalogStatistics",
    "InvalidAttributeError",
    "InvalidEmailError",
    "Loan",
    "Magazine",
    "Material",
    "MaterialKind",
    "MaterialNotFoundError",
    "NotFoundError",
    "NotReservableError",
    "Reservable",
    "User",
    "UserNotFoundError",
    "__version__",
]
