"""MCP resources for the lending catalog.

Resources are read-only: they expose catalog state without changing it.
"""

from .catalog import (
    active_loans_handler,
    catalog_statistics_handler,
    loan_to_dict,
    material_detail_handler,
    material_to_dict,
    recent_activity_handler,
    user_detail_handler,
    user_to_dict,
    users_list_handler,
)

__all__ = [
    "active_loans_handler",
    "catalog_statistics_handler",
    "loan_to_dict",
    "material_detail_handler",
    "material_to_dict",
    "recent_activity_handler",
    "user_detail_handler",
    "user_to_dict",
    "users_list_handler",
]
