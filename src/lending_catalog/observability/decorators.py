"""Logfire spans around MCP tool and resource handlers.

Tool handlers report failures by returning ``{"isError": True, ...}`` rather
than raising, so the tool span marks success from the response as well as
from exceptions.
"""

import functools
import time
from collections.abc import Awaitable, Callable
from typing import Any

import logfire

Handler = Callable[..., Awaitable[Any]]

TOOL_CATEGORIES = {
    "checkout_material": "circulation",
    "return_material": "circulation",
    "reserve_material": "reservation",
    "cancel_reservation": "reservation",
    "search_catalog": "discovery",
    "register_user": "users",
}


def tool_category(tool_name: str) -> str:
    return TOOL_CATEGORIES.get(tool_name, "general")


def is_error_response(result: Any) -> bool:
    return isinstance(result, dict) and bool(result.get("isError"))


def trace_tool(tool_name: str) -> Callable[[Handler], Handler]:
    """Run a tool handler inside a ``tool {tool_name}`` span."""

    def decorator(func: Handler) -> Handler:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            with logfire.span(
                "tool {tool_name}",
                tool_name=tool_name,
                tool_category=tool_category(tool_name),
            ) as span:
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.set_attribute("tool.success", False)
                    span.set_attribute("tool.error", repr(e))
                    raise
                finally:
                    elapsed_ms = (time.perf_counter() - started) * 1000
                    span.set_attribute("tool.duration_ms", round(elapsed_ms, 3))

                span.set_attribute("tool.success", not is_error_response(result))
                return result

        return wrapper

    return decorator


def trace_resource(resource_type: str) -> Callable[[Handler], Handler]:
    """Run a resource handler inside a ``resource {resource_type}`` span."""

    def decorator(func: Handler) -> Handler:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            with logfire.span("resource {resource_type}", resource_type=resource_type) as span:
                result = await func(*args, **kwargs)
                if isinstance(result, list):
                    span.set_attribute("resource.item_count", len(result))
                return result

        return wrapper

    return decorator
