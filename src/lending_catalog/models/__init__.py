"""
Lending Catalog Models.

This package contains the domain entities of the lending catalog:

- Material: abstract catalog item, with Book, DVD and Magazine kinds
- Reservable: capability implemented by Book and DVD
- AuditLog: append-only action history owned by every material
- User: a borrower with a validated email address
- Loan: one checkout, with overdue and fine calculations
"""

from .audit import AuditEntry, AuditLog
from .loan import DEFAULT_LOAN_LIMIT_DAYS, Loan
from .material import DVD, Book, Magazine, Material, MaterialKind, Reservable
from .user import User, validate_email_address

__all__ = [
    "DEFAULT_LOAN_LIMIT_DAYS",
    "DVD",
    "AuditEntry",
    "AuditLog",
    "Book",
    "Loan",
    "Magazine",
    "Material",
    "MaterialKind",
    "Reservable",
    "User",
    "validate_email_address",
]
