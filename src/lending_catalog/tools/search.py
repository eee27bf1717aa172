"""
Catalog search tool.

Combines the catalog's title/author substring search with kind and
availability filters. Results keep catalog order; there is no ranking.
"""

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from ..catalog import Catalog
from ..models.material import Material, MaterialKind
from ..observability import trace_tool
from ..resources.catalog import material_to_dict

logger = logging.getLogger(__name__)


class SearchCatalogInput(BaseModel):
    """Input schema for the search_catalog tool."""

    query: str | None = Field(
        default=None,
        description="Case-insensitive text to look for; omit to list everything",
        max_length=200,
        examples=["nolan", "solitude"],
    )

    field: Literal["title", "author", "any"] = Field(
        default="any",
        description="Which field the query is matched against",
    )

    kind: MaterialKind | None = Field(
        default=None,
        description="Only return materials of this kind",
        examples=["Book", "DVD", "Magazine"],
    )

    available_only: bool = Field(
        default=False,
        description="Only return materials that are on the shelf",
    )

    limit: int = Field(
        default=20,
        description="Maximum number of results",
        ge=1,
        le=100,
    )


def search_materials(catalog: Catalog, params: SearchCatalogInput) -> list[Material]:
    """Apply the search filters to ``catalog``."""
    if params.query:
        if params.field == "title":
            matches = catalog.search_by_title(params.query)
        elif params.field == "author":
            matches = catalog.search_by_author(params.query)
        else:
            matched_ids = {m.material_id for m in catalog.search_by_title(params.query)}
            matched_ids |= {m.material_id for m in catalog.search_by_author(params.query)}
            # Keep catalog order across both matches
            matches = [m for m in catalog.materials if m.material_id in matched_ids]
    else:
        matches = catalog.materials

    if params.kind is not None:
        matches = [m for m in matches if m.kind_tag == params.kind.value]
    if params.available_only:
        matches = [m for m in matches if m.available]

    return matches[: params.limit]


@trace_tool("search_catalog")
async def search_catalog_handler(catalog: Catalog, arguments: dict[str, Any]) -> dict[str, Any]:
    """Search the catalog by title or author with optional filters."""
    try:
        params = SearchCatalogInput.model_validate(arguments)
    except ValidationError as e:
        logger.warning("Invalid search parameters: %s", e)
        return {
            "isError": True,
            "content": [{"type": "text", "text": f"Invalid search parameters: {e}"}],
        }

    results = search_materials(catalog, params)

    if results:
        lines = [f"Found {len(results)} material(s):"]
        lines.extend(f"- [{m.material_id}] {m}" for m in results)
        text = "\n".join(lines)
    else:
        text = "No materials matched the search."

    return {
        "content": [{"type": "text", "text": text}],
        "data": {
            "count": len(results),
            "materials": [material_to_dict(m) for m in results],
        },
    }


search_catalog = {
    "name": "search_catalog",
    "description": (
        "Search catalog materials by title and/or author (case-insensitive substring), "
        "optionally filtered by kind (Book, DVD, Magazine) and availability."
    ),
    "inputSchema": SearchCatalogInput.model_json_schema(),
    "handler": search_catalog_handler,
}
