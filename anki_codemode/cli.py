"""
CLI entrypoint for anki-codemode.

Runs the MCP server on stdio by default. ``--check`` probes AnkiConnect
instead and prints what it finds, which is the quickest way to confirm
Anki is running and the plugin is reachable.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .anki_connect import AnkiConnectClient, AnkiConnectError
from .config_types import ServerConfig, load_config_file
from .server import SERVER_NAME, create_server
from .tools import list_tools

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="anki-codemode",
        description="MCP server that runs Python scripts against Anki via AnkiConnect.",
    )
    parser.add_argument(
        "--url",
        help="AnkiConnect endpoint (env: ANKI_CONNECT_URL, default: http://localhost:8765).",
    )
    parser.add_argument(
        "--api-key",
        help="AnkiConnect api key, if the plugin requires one (env: ANKI_CONNECT_API_KEY).",
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        help="Per-request timeout in milliseconds (env: ANKI_CONNECT_TIMEOUT, default: 10000).",
    )
    parser.add_argument(
        "--version-number",
        type=int,
        help="AnkiConnect protocol version (default: 6).",
    )
    parser.add_argument(
        "--tools",
        help=f"Comma-separated tools to enable, or 'all' (env: ANKI_TOOLS). Options: {', '.join(list_tools())}.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check the AnkiConnect connection and exit instead of serving.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging (written to stderr).",
    )
    return parser.parse_args(argv)


async def check_connection(client: AnkiConnectClient) -> bool:
    """Check AnkiConnect connection and display info."""
    print("Testing AnkiConnect...")
    print("=" * 60)

    try:
        version = await client.get_version()
        print(f"✓ Connected to Anki (AnkiConnect version: {version})")

        decks = await client.invoke("deckNames")
        print(f"✓ Found {len(decks)} decks:")
        for deck in decks[:5]:
            print(f"  - {deck}")
        if len(decks) > 5:
            print(f"  ... and {len(decks) - 5} more")

        models = await client.invoke("modelNames")
        print(f"✓ Available note types: {', '.join(models[:3])}")

        print("\n" + "=" * 60)
        print("✓ AnkiConnect is working correctly!")
        return True

    except AnkiConnectError as e:
        print(f"✗ {e.kind.value} error during {e.action}: {e}")
        print("\nMake sure:")
        print("1. Anki is running")
        print("2. AnkiConnect plugin is installed (code: 2055492159)")
        return False


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    file_config, config_path = load_config_file()
    if config_path is not None:
        logger.info("Loaded config from %s", config_path)

    try:
        config = ServerConfig.from_sources(args, file_config=file_config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.check:
        ok = asyncio.run(check_connection(config.create_client()))
        sys.exit(0 if ok else 1)

    mcp = create_server(config)
    logger.info("%s running on stdio", SERVER_NAME)
    mcp.run()


__all__ = ["check_connection", "main", "parse_args"]
