"""MCP tools for the lending catalog.

Tools change catalog state (circulation, reservations and user registration)
or run searches. Each definition carries a name, a description, a JSON input
schema and an async handler that takes the catalog and the raw tool arguments.
"""

from .circulation import cancel_reservation, checkout_material, reserve_material, return_material
from .search import search_catalog
from .users import register_user

all_tools = [
    checkout_material,
    return_material,
    reserve_material,
    cancel_reservation,
    search_catalog,
    register_user,
]

__all__ = [
    "all_tools",
    "cancel_reservation",
    "checkout_material",
    "register_user",
    "reserve_material",
    "return_material",
    "search_catalog",
]
