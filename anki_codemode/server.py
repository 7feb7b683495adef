"""
MCP server exposing the scoped Anki code-execution tools.

Each enabled tool takes one ``code`` argument: a Python script run in
the sandbox against that tool's slice of the Anki API.

MCP config (.claude.json or similar):
    {
        "mcpServers": {
            "anki": {
                "command": "anki-codemode",
                "env": {"ANKI_TOOLS": "create,review"}
            }
        }
    }
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional, Sequence

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from . import __version__
from .anki_connect import AnkiConnectClient
from .config_types import ServerConfig
from .tools import CodeTool, get_tool, run_tool_code

logger = logging.getLogger(__name__)

SERVER_NAME = "anki-mcp-codemode"

INSTRUCTIONS = (
    "Operate a running Anki instance by writing short Python scripts. "
    "Each tool exposes a different slice of the `anki` object; scripts log "
    "results with console.log() or end with an expression to return it."
)

CodeArg = Annotated[str, Field(description="Python script to execute (async body; `anki` and `console` in scope)")]


def register_tool(mcp: FastMCP, client: AnkiConnectClient, tool: CodeTool) -> None:
    """Register one code-execution tool on ``mcp``."""

    @mcp.tool(name=tool.name, description=tool.description)
    async def run_code(code: CodeArg) -> str:
        text, success = await run_tool_code(client, tool, code)
        if not success:
            raise ToolError(text)
        return text


def create_server(
    config: ServerConfig,
    client: Optional[AnkiConnectClient] = None,
    tools: Optional[Sequence[str]] = None,
) -> FastMCP:
    """Build a FastMCP server with every enabled tool registered."""
    client = client or config.create_client()
    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)
    enabled = list(tools) if tools is not None else config.tools
    for key in enabled:
        register_tool(mcp, client, get_tool(key))
    logger.info(
        "%s v%s configured (url: %s, tools: %s)",
        SERVER_NAME,
        __version__,
        config.url,
        ", ".join(enabled),
    )
    return mcp


__all__ = ["SERVER_NAME", "create_server", "register_tool"]
