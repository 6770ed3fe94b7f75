"""MCP tools exposed to chat clients."""

from .catalog import TOOL_NAMES, TOOLS, TOOLS_VERSION
from .dispatcher import ToolArgumentError, ToolDispatcher, ToolError, UnknownToolError

__all__ = [
    "TOOLS",
    "TOOL_NAMES",
    "TOOLS_VERSION",
    "ToolDispatcher",
    "ToolError",
    "ToolArgumentError",
    "UnknownToolError",
]
