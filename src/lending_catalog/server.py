"""Lending Catalog MCP Server.

The server is the hosting application for the catalog: it builds one
``Catalog`` instance at startup, hands it to every tool and resource handler,
and (optionally) snapshots it to disk on shutdown. The catalog itself knows
nothing about MCP; handlers translate its typed errors into tool responses.

Run with ``python -m lending_catalog.server`` or the ``lending-catalog``
console script.
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from .catalog import Catalog
from .config import CatalogConfig, get_config
from .observability import initialize_observability
from .resources.catalog import (
    active_loans_handler,
    catalog_statistics_handler,
    material_detail_handler,
    recent_activity_handler,
    user_detail_handler,
    users_list_handler,
)
from .seed import seed_demo_catalog
from .snapshot import load_snapshot, save_snapshot
from .tools import all_tools
from .tools.circulation import (
    cancel_reservation_handler,
    checkout_material_handler,
    reserve_material_handler,
    return_material_handler,
)
from .tools.search import search_catalog_handler
from .tools.users import register_user_handler

logger = logging.getLogger(__name__)

_DESCRIPTIONS = {tool["name"]: tool["description"] for tool in all_tools}


def create_catalog(config: CatalogConfig) -> Catalog:
    """Load the catalog from its snapshot, or build a fresh one."""
    if config.snapshot_path is not None and config.snapshot_path.exists():
        logger.info("Loading catalog snapshot from %s", config.snapshot_path)
        return load_snapshot(config.snapshot_path)

    catalog = Catalog(name=config.catalog_name, loan_limit_days=config.default_loan_days)
    if config.seed_demo_data:
        seed_demo_catalog(catalog)
    return catalog


def build_server(catalog: Catalog, config: CatalogConfig | None = None) -> FastMCP:
    """Create a FastMCP server bound to ``catalog``."""
    config = config or get_config()

    mcp = FastMCP(
        name=config.server_name,
        version=config.server_version,
        instructions=(
            f"Lending catalog for '{catalog.name}'. Materials are books, DVDs and magazines. "
            "Use search_catalog to find material ids, checkout_material and return_material "
            "to lend and take back, and reserve_material / cancel_reservation for books and "
            "DVDs. Use register_user to add borrowers. Read catalog://statistics and "
            "catalog://loans/active for an overview."
        ),
    )

    # === Tools ===

    @mcp.tool(name="checkout_material", description=_DESCRIPTIONS["checkout_material"])
    async def checkout_material(material_id: int, user_name: str) -> dict[str, Any]:
        return await checkout_material_handler(
            catalog, {"material_id": material_id, "user_name": user_name}
        )

    @mcp.tool(name="return_material", description=_DESCRIPTIONS["return_material"])
    async def return_material(material_id: int) -> dict[str, Any]:
        return await return_material_handler(catalog, {"material_id": material_id})

    @mcp.tool(name="reserve_material", description=_DESCRIPTIONS["reserve_material"])
    async def reserve_material(material_id: int, user_name: str) -> dict[str, Any]:
        return await reserve_material_handler(
            catalog, {"material_id": material_id, "user_name": user_name}
        )

    @mcp.tool(name="cancel_reservation", description=_DESCRIPTIONS["cancel_reservation"])
    async def cancel_reservation(material_id: int) -> dict[str, Any]:
        return await cancel_reservation_handler(catalog, {"material_id": material_id})

    @mcp.tool(name="search_catalog", description=_DESCRIPTIONS["search_catalog"])
    async def search_catalog(
        query: str | None = None,
        field: str = "any",
        kind: str | None = None,
        available_only: bool = False,
        limit: int = 20,
    ) -> dict[str, Any]:
        return await search_catalog_handler(
            catalog,
            {
                "query": query,
                "field": field,
                "kind": kind,
                "available_only": available_only,
                "limit": limit,
            },
        )

    @mcp.tool(name="register_user", description=_DESCRIPTIONS["register_user"])
    async def register_user(name: str, email: str) -> dict[str, Any]:
        return await register_user_handler(catalog, {"name": name, "email": email})

    # === Resources ===

    @mcp.resource(
        "catalog://statistics",
        name="catalog_statistics",
        description="Material counts by status and kind, users, loans and outstanding fines",
        mime_type="application/json",
    )
    async def statistics() -> dict[str, Any]:
        return await catalog_statistics_handler(catalog)

    @mcp.resource(
        "catalog://loans/active",
        name="active_loans",
        description="Active loans with days remaining, days late and fines",
        mime_type="application/json",
    )
    async def active_loans() -> list[dict[str, Any]]:
        return await active_loans_handler(catalog)

    @mcp.resource(
        "catalog://activity",
        name="recent_activity",
        description="Audit entries across all materials, newest first",
        mime_type="application/json",
    )
    async def activity() -> list[dict[str, Any]]:
        return await recent_activity_handler(catalog)

    @mcp.resource(
        "catalog://users",
        name="users",
        description="Registered users with how many materials each holds",
        mime_type="application/json",
    )
    async def users() -> list[dict[str, Any]]:
        return await users_list_handler(catalog)

    @mcp.resource(
        "catalog://materials/{material_id}",
        name="material_detail",
        description="One material with its lending state and audit history",
        mime_type="application/json",
    )
    async def material_detail(material_id: int) -> dict[str, Any]:
        return await material_detail_handler(catalog, material_id)

    @mcp.resource(
        "catalog://users/{user_name}",
        name="user_detail",
        description="One user with the materials they hold and their loans",
        mime_type="application/json",
    )
    async def user_detail(user_name: str) -> dict[str, Any]:
        return await user_detail_handler(catalog, user_name)

    logger.info("Registered %d tools and 6 resources for '%s'", len(all_tools), catalog.name)
    return mcp


def configure_logging(config: CatalogConfig) -> None:
    # stderr keeps stdout clean for the stdio transport
    logging.basicConfig(
        level=logging.DEBUG if config.debug else config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    if not config.debug:
        logging.getLogger("fastmcp").setLevel(logging.WARNING)


def main() -> None:
    """Entry point for the ``lending-catalog`` console script."""
    config = get_config()
    configure_logging(config)
    initialize_observability()

    logger.info("Lending Catalog MCP Server %s", config.server_version)

    catalog = create_catalog(config)
    mcp = build_server(catalog, config)

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, initiating shutdown...", signum)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        mcp.run(transport="stdio")
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)
    finally:
        if config.snapshot_path is not None:
            save_snapshot(catalog, config.snapshot_path)


if __name__ == "__main__":
    main()
