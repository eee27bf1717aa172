"""Catalog Resources - read-only views of the lending catalog.

Resources:
- catalog://statistics - Current counts by status and kind
- catalog://materials/{material_id} - One material with its audit history
- catalog://loans/active - Active loans with overdue figures and fines
- catalog://activity - Audit entries across the catalog, newest first
- catalog://users - Registered users with how many materials each holds
- catalog://users/{user_name} - One user with the materials they hold

Handlers take the catalog explicitly; the server binds them to the instance
it owns.
"""

import logging
from datetime import datetime
from typing import Any

from fastmcp.exceptions import ResourceError

from ..catalog import Catalog
from ..models.loan import Loan
from ..models.material import DVD, Book, Magazine, Material, Reservable
from ..models.user import User
from ..observability import trace_resource

logger = logging.getLogger(__name__)


def material_to_dict(material: Material) -> dict[str, Any]:
    """Plain-data view of a material for MCP responses."""
    data: dict[str, Any] = {
        "id": material.material_id,
        "kind": material.kind_tag,
        "title": material.title,
        "author": material.author,
        "publication_year": material.publication_year,
        "available": material.available,
        "holder": material.holder.name if material.holder is not None else None,
        "checked_out_at": (
            material.checked_out_at.isoformat() if material.checked_out_at is not None else None
        ),
        "reservable": isinstance(material, Reservable),
    }

    if isinstance(material, Reservable):
        data["reserved_by"] = material.reservation_holder
    if isinstance(material, Book):
        data["page_count"] = material.page_count
    elif isinstance(material, DVD):
        data["duration_minutes"] = material.duration_minutes
        data["duration"] = material.formatted_duration
    elif isinstance(material, Magazine):
        data["edition_number"] = material.edition_number

    return data


def loan_to_dict(loan: Loan, now: datetime | None = None) -> dict[str, Any]:
    """Plain-data view of a loan, including its overdue figures."""
    return {
        "material_id": loan.material.material_id,
        "title": loan.material.title,
        "kind": loan.material.kind_tag,
        "user": loan.user.name,
        "created_at": loan.created_at.isoformat(),
        "returned_at": loan.returned_at.isoformat() if loan.returned_at is not None else None,
        "loan_limit_days": loan.loan_limit_days,
        "days_remaining": loan.days_remaining(now),
        "days_late": loan.days_late(now),
        "overdue": loan.is_overdue(now),
        "fine": round(loan.compute_fine(now), 2),
    }


@trace_resource("statistics")
async def catalog_statistics_handler(catalog: Catalog) -> dict[str, Any]:
    """Counts over the whole catalog plus the fines accrued on open loans."""
    stats = catalog.statistics()
    return {
        "catalog": catalog.name,
        "timestamp": datetime.now().isoformat(),
        **stats.model_dump(),
        "outstanding_fines": round(catalog.outstanding_fines(), 2),
    }


@trace_resource("material")
async def material_detail_handler(catalog: Catalog, material_id: int) -> dict[str, Any]:
    material = catalog.find_by_id(material_id)
    if material is None:
        logger.info("Material resource requested for unknown id %s", material_id)
        raise ResourceError(f"Material not found: {material_id}")

    data = material_to_dict(material)
    data["history"] = [entry.model_dump(mode="json") for entry in material.history()]

    loan = catalog.find_loan(material_id)
    data["loan"] = loan_to_dict(loan) if loan is not None else None
    return data


@trace_resource("active_loans")
async def active_loans_handler(catalog: Catalog) -> list[dict[str, Any]]:
    now = datetime.now()
    return [loan_to_dict(loan, now) for loan in catalog.active_loans]


@trace_resource("activity")
async def recent_activity_handler(catalog: Catalog, limit: int = 50) -> list[dict[str, Any]]:
    return [entry.model_dump(mode="json") for entry in catalog.recent_activity(limit)]


def user_to_dict(user: User) -> dict[str, Any]:
    """Plain-data summary of a user."""
    return {
        "name": user.name,
        "email": user.email,
        "registered_at": user.registered_at.isoformat(),
        "held_count": user.held_count,
    }


@trace_resource("users")
async def users_list_handler(catalog: Catalog) -> list[dict[str, Any]]:
    """Registered users in registration order."""
    return [user_to_dict(user) for user in catalog.users]


@trace_resource("user")
async def user_detail_handler(catalog: Catalog, user_name: str) -> dict[str, Any]:
    user = catalog.find_user(user_name)
    if user is None:
        raise ResourceError(f"User not found: '{user_name}'")

    return {
        **user_to_dict(user),
        "held_materials": [material_to_dict(m) for m in user.held_materials],
        "loans": [loan_to_dict(loan) for loan in catalog.loans_for(user)],
    }
