"""
Circulation tools for the lending catalog.

Tools change catalog state:
1. checkout_material: lend a material to a registered user
2. return_material: take a material back and report any fine
3. reserve_material: claim an available book or DVD
4. cancel_reservation: drop the reservation on a book or DVD

Each handler validates its raw arguments with a pydantic input model, calls
the catalog, and turns the catalog's typed errors into an ``isError``
response with a readable message. Unexpected exceptions are logged and
reported the same way so a tool call never takes the server down.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..catalog import Catalog
from ..exceptions import CatalogError
from ..observability import trace_tool
from ..observability.metrics import record_circulation_event, record_tool_error
from ..resources.catalog import loan_to_dict, material_to_dict

logger = logging.getLogger(__name__)


def _text_response(text: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
    response: dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if data is not None:
        response["data"] = data
    return response


def _error_response(tool_name: str, error: Exception | str) -> dict[str, Any]:
    error_type = type(error).__name__ if isinstance(error, Exception) else "Rejected"
    record_tool_error(tool_name, error_type)
    return {
        "isError": True,
        "content": [{"type": "text", "text": str(error)}],
    }


# =============================================================================
# CHECKOUT
# =============================================================================


class CheckoutMaterialInput(BaseModel):
    """Input schema for the checkout_material tool."""

    material_id: int = Field(
        ...,
        description="Catalog id of the material to lend",
        ge=0,
        examples=[1, 5, 9],
    )

    user_name: str = Field(
        ...,
        description="Name of the registered user borrowing the material",
        min_length=1,
        max_length=200,
        examples=["Alice", "Bob"],
    )


@trace_tool("checkout_material")
async def checkout_material_handler(catalog: Catalog, arguments: dict[str, Any]) -> dict[str, Any]:
    """Lend a material to a user."""
    try:
        params = CheckoutMaterialInput.model_validate(arguments)
    except ValidationError as e:
        logger.warning("Invalid checkout parameters: %s", e)
        return _error_response("checkout_material", f"Invalid checkout parameters: {e}")

    try:
        material = catalog.require_material(params.material_id)
        user = catalog.require_user(params.user_name)
        if not catalog.checkout(params.material_id, user):
            return _error_response(
                "checkout_material", f"Material {params.material_id} could not be checked out"
            )
        loan = catalog.find_loan(params.material_id)
    except CatalogError as e:
        logger.info("Checkout failed: %s", e)
        return _error_response("checkout_material", e)
    except Exception as e:
        logger.exception("Unexpected error in checkout_material tool")
        return _error_response("checkout_material", f"An unexpected error occurred: {e!s}")

    record_circulation_event("checkout", material.kind_tag)

    # The loan may already be closed by a concurrent return
    if loan is None or loan.user is not user:
        loan_data, limit_days = None, catalog.loan_limit_days
    else:
        loan_data, limit_days = loan_to_dict(loan), loan.loan_limit_days

    return _text_response(
        f"Checked out {material.kind_tag} '{material.title}' to {user.name}. "
        f"Due back within {limit_days} days.",
        {"material": material_to_dict(material), "loan": loan_data},
    )


# =============================================================================
# RETURN
# =============================================================================


class ReturnMaterialInput(BaseModel):
    """Input schema for the return_material tool."""

    material_id: int = Field(
        ...,
        description="Catalog id of the material being returned",
        ge=0,
        examples=[1, 5, 9],
    )


@trace_tool("return_material")
async def return_material_handler(catalog: Catalog, arguments: dict[str, Any]) -> dict[str, Any]:
    """Take a material back and report the fine, if any."""
    try:
        params = ReturnMaterialInput.model_validate(arguments)
    except ValidationError as e:
        logger.warning("Invalid return parameters: %s", e)
        return _error_response("return_material", f"Invalid return parameters: {e}")

    material = catalog.find_by_id(params.material_id)
    if material is None:
        return _error_response("return_material", f"Material not found: {params.material_id}")

    try:
        loan = catalog.find_loan(params.material_id)
        if not catalog.return_material(params.material_id):
            return _error_response(
                "return_material", f"Material {params.material_id} is not on loan"
            )
    except Exception as e:
        logger.exception("Unexpected error in return_material tool")
        return _error_response("return_material", f"An unexpected error occurred: {e!s}")

    record_circulation_event("return", material.kind_tag)

    message = f"Returned {material.kind_tag} '{material.title}'."
    data: dict[str, Any] = {"material": material_to_dict(material), "loan": None}
    if loan is not None:
        fine = loan.compute_fine()
        data["loan"] = loan_to_dict(loan)
        if fine > 0:
            message += f" {loan.days_late()} day(s) late, fine due: {fine:.2f}."
        else:
            message += " Returned on time."

    return _text_response(message, data)


# =============================================================================
# RESERVATIONS
# =============================================================================


class ReserveMaterialInput(BaseModel):
    """Input schema for the reserve_material tool."""

    material_id: int = Field(
        ...,
        description="Catalog id of the book or DVD to reserve",
        ge=0,
        examples=[1, 5],
    )

    user_name: str = Field(
        ...,
        description="Name of the registered user placing the reservation",
        min_length=1,
        max_length=200,
        examples=["Alice", "Bob"],
    )


class CancelReservationInput(BaseModel):
    """Input schema for the cancel_reservation tool."""

    material_id: int = Field(
        ...,
        description="Catalog id of the reserved book or DVD",
        ge=0,
        examples=[1, 5],
    )


@trace_tool("reserve_material")
async def reserve_material_handler(catalog: Catalog, arguments: dict[str, Any]) -> dict[str, Any]:
    """Reserve an available book or DVD for a user."""
    try:
        params = ReserveMaterialInput.model_validate(arguments)
    except ValidationError as e:
        logger.warning("Invalid reservation parameters: %s", e)
        return _error_response("reserve_material", f"Invalid reservation parameters: {e}")

    try:
        material = catalog.require_material(params.material_id)
        user = catalog.require_user(params.user_name)
        reserved = catalog.reserve(params.material_id, user.name)
    except CatalogError as e:
        logger.info("Reservation failed: %s", e)
        return _error_response("reserve_material", e)
    except Exception as e:
        logger.exception("Unexpected error in reserve_material tool")
        return _error_response("reserve_material", f"An unexpected error occurred: {e!s}")

    if not reserved:
        return _error_response(
            "reserve_material",
            f"'{material.title}' is on loan and cannot be reserved right now",
        )

    record_circulation_event("reserve", material.kind_tag)
    return _text_response(
        f"Reserved {material.kind_tag} '{material.title}' for {user.name}.",
        {"material": material_to_dict(material)},
    )


@trace_tool("cancel_reservation")
async def cancel_reservation_handler(catalog: Catalog, arguments: dict[str, Any]) -> dict[str, Any]:
    """Cancel the reservation on a book or DVD."""
    try:
        params = CancelReservationInput.model_validate(arguments)
    except ValidationError as e:
        logger.warning("Invalid cancellation parameters: %s", e)
        return _error_response("cancel_reservation", f"Invalid cancellation parameters: {e}")

    try:
        material = catalog.require_material(params.material_id)
        cancelled = catalog.cancel_reservation(params.material_id)
    except CatalogError as e:
        logger.info("Cancellation failed: %s", e)
        return _error_response("cancel_reservation", e)
    except Exception as e:
        logger.exception("Unexpected error in cancel_reservation tool")
        return _error_response("cancel_reservation", f"An unexpected error occurred: {e!s}")

    if not cancelled:
        return _error_response(
            "cancel_reservation", f"'{material.title}' has no reservation to cancel"
        )

    record_circulation_event("cancel_reservation", material.kind_tag)
    return _text_response(
        f"Cancelled the reservation on '{material.title}'.",
        {"material": material_to_dict(material)},
    )


# =============================================================================
# TOOL DEFINITIONS
# =============================================================================

checkout_material = {
    "name": "checkout_material",
    "description": (
        "Lend a catalog material to a registered user. Fails if the material does not "
        "exist, the user is unknown, or the material is already on loan."
    ),
    "inputSchema": CheckoutMaterialInput.model_json_schema(),
    "handler": checkout_material_handler,
}

return_material = {
    "name": "return_material",
    "description": (
        "Return a material to the catalog. Closes the active loan and reports the fine "
        "for late returns (books 0.50, DVDs 1.00, magazines 0.25 per day late)."
    ),
    "inputSchema": ReturnMaterialInput.model_json_schema(),
    "handler": return_material_handler,
}

reserve_material = {
    "name": "reserve_material",
    "description": (
        "Reserve an available book or DVD for a user. Magazines cannot be reserved. "
        "A new reservation replaces any existing one."
    ),
    "inputSchema": ReserveMaterialInput.model_json_schema(),
    "handler": reserve_material_handler,
}

cancel_reservation = {
    "name": "cancel_reservation",
    "description": "Cancel the current reservation on a book or DVD.",
    "inputSchema": CancelReservationInput.model_json_schema(),
    "handler": cancel_reservation_handler,
}
