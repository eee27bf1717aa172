"""Custom metrics for the Lending Catalog."""

import logfire

circulation_events = logfire.metric_counter(
    "catalog.circulation", description="Circulation events (checkout/return/reserve/cancel)"
)

tool_errors = logfire.metric_counter(
    "catalog.tool.errors", description="Tool calls that ended in a user-facing error"
)


def record_circulation_event(event_type: str, kind: str) -> None:
    """Record a circulation event for a material kind."""
    circulation_events.add(1, {"event_type": event_type, "kind": kind})


def record_tool_error(tool_name: str, error_type: str) -> None:
    tool_errors.add(1, {"tool": tool_name, "error_type": error_type})
