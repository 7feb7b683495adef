"""
Base definitions for scoped code-execution tools.

A tool pairs an MCP-facing name and description with the slice of the
capability object its scripts may reach.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

from ..anki_connect import AnkiConnectClient
from ..api import ApiNamespace, build_anki_api
from ..sandbox import execute_sandbox, format_sandbox_result

logger = logging.getLogger(__name__)

OUTPUT_FOOTER = """
## Output
Use `console.log()` (or `print()`) to return data, or end the script with an
expression. Only logged output and the final value are returned.
"""


@dataclass(frozen=True)
class CodeTool:
    """A named tool exposing a subset of the Anki capability object."""

    key: str  # short name used in ANKI_TOOLS, e.g. "create"
    name: str  # MCP tool name, e.g. "anki-create"
    description: str
    layout: Mapping[str, Optional[Sequence[str]]]

    def build_api(self, client: AnkiConnectClient) -> ApiNamespace:
        """Build the capability object scripts of this tool receive."""
        return build_anki_api(client).select(self.layout)


async def run_tool_code(
    client: AnkiConnectClient, tool: CodeTool, code: str
) -> Tuple[str, bool]:
    """Execute a script for ``tool`` and format the result.

    Returns:
        Tuple of (formatted_text, success).
    """
    api = tool.build_api(client)
    result = await execute_sandbox(code, api)
    if not result.success:
        logger.info("%s script failed: %s", tool.name, (result.error or "").splitlines()[:1])
    return format_sandbox_result(result), result.success


__all__ = ["CodeTool", "OUTPUT_FOOTER", "run_tool_code"]
