"""
Core package for anki-codemode.

An agent submits short Python scripts; each script runs in a sandbox
against a scoped slice of Anki's AnkiConnect API and its logged output
comes back as text. Where things live:

- `anki_connect`: async AnkiConnect client and error taxonomy
- `sandbox`: script execution and result formatting
- `api`: the capability object scripts see as ``anki``
- `tools`: the four scoped tools and their descriptions
- `server` / `cli`: MCP server and command line entrypoint
"""

__version__ = "0.1.0"

__all__ = [
    "anki_connect",
    "api",
    "cli",
    "config_types",
    "prompts",
    "sandbox",
    "server",
    "tools",
]
