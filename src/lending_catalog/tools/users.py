"""
User registration tool.

Registering validates the email address before anything is added to the
catalog; a malformed address comes back as an ``isError`` response and
leaves the user list unchanged. Names are not unique, so registering a
second user with an existing name succeeds.
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..catalog import Catalog
from ..exceptions import ValidationFailure
from ..models.user import User
from ..observability import trace_tool
from ..observability.metrics import record_tool_error
from ..resources.catalog import user_to_dict

logger = logging.getLogger(__name__)


class RegisterUserInput(BaseModel):
    """Input schema for the register_user tool."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        description="Display name; also the key used to look the user up",
        min_length=1,
        max_length=200,
        examples=["Alice"],
    )

    # Checked by the User model so the typed error reaches the caller
    email: str = Field(
        ...,
        description="Contact email address",
        min_length=1,
        max_length=320,
        examples=["alice@example.com"],
    )


@trace_tool("register_user")
async def register_user_handler(catalog: Catalog, arguments: dict[str, Any]) -> dict[str, Any]:
    """Register a new user with the catalog."""
    try:
        params = RegisterUserInput.model_validate(arguments)
    except ValidationError as e:
        logger.warning("Invalid registration parameters: %s", e)
        record_tool_error("register_user", "ValidationError")
        return {
            "isError": True,
            "content": [{"type": "text", "text": f"Invalid registration parameters: {e}"}],
        }

    try:
        user = User(params.name, params.email)
    except ValidationFailure as e:
        logger.info("Registration rejected: %s", e)
        record_tool_error("register_user", type(e).__name__)
        return {"isError": True, "content": [{"type": "text", "text": str(e)}]}

    already_known = catalog.find_user(user.name) is not None
    catalog.add_user(user)

    text = f"Registered {user.name} <{user.email}>."
    if already_known:
        text += f" Another user is already named {user.name}; lookups by name find the first one."

    return {
        "content": [{"type": "text", "text": text}],
        "data": {"user": user_to_dict(user)},
    }


register_user = {
    "name": "register_user",
    "description": (
        "Register a new catalog user with a name and a valid email address. "
        "Registered users can borrow and reserve materials."
    ),
    "inputSchema": RegisterUserInput.model_json_schema(),
    "handler": register_user_handler,
}
