"""
Scoped code-execution tools.

Each tool exposes one slice of the Anki capability object to scripts.

Usage:
    from anki_codemode.tools import get_tool, run_tool_code

    tool = get_tool("create")
    text, ok = await run_tool_code(client, tool, "return await anki.decks.list()")
"""

from __future__ import annotations

from typing import Dict, List

from .base import CodeTool, run_tool_code
from .create import TOOL as CREATE_TOOL
from .design import TOOL as DESIGN_TOOL
from .manage import TOOL as MANAGE_TOOL
from .review import TOOL as REVIEW_TOOL

# Registry of available tools, in registration order
TOOLS: Dict[str, CodeTool] = {
    tool.key: tool for tool in (CREATE_TOOL, MANAGE_TOOL, REVIEW_TOOL, DESIGN_TOOL)
}


def get_tool(key: str) -> CodeTool:
    """Get a tool by its short name.

    Raises:
        ValueError: If the tool name is not recognized.
    """
    if key not in TOOLS:
        available = ", ".join(TOOLS)
        raise ValueError(f"Unknown tool: {key}. Available: {available}")
    return TOOLS[key]


def list_tools() -> List[str]:
    """Return tool short names in registration order."""
    return list(TOOLS)


__all__ = [
    "CodeTool",
    "TOOLS",
    "get_tool",
    "list_tools",
    "run_tool_code",
]
