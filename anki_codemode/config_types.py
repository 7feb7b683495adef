"""Typed configuration for the AnkiConnect client and the tool server."""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .anki_connect import DEFAULT_TIMEOUT_MS, DEFAULT_URL, DEFAULT_VERSION, AnkiConnectClient
from .tools import list_tools

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ANKI_CODEMODE_CONFIG"
CONFIG_FILENAME = "anki_codemode_config.json"


def parse_enabled_tools(value: Optional[str]) -> List[str]:
    """Parse an ``ANKI_TOOLS``-style value into tool names.

    ``all`` or an empty value enables every tool. Unknown names are
    dropped; if nothing valid remains, every tool is enabled.
    """
    all_tools = list_tools()
    val = (value or "all").strip().lower()
    if val in ("", "all"):
        return all_tools

    requested = [part.strip() for part in val.split(",")]
    valid = [name for name in requested if name in all_tools]
    if not valid:
        logger.warning(
            "No valid tools in ANKI_TOOLS=%r. Valid options: %s. Enabling all tools.",
            value,
            ", ".join(all_tools),
        )
        return all_tools
    return valid


def _parse_timeout(raw: Any, source: str) -> int:
    try:
        timeout_ms = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{source} must be a positive integer (ms), got {raw!r}") from exc
    if timeout_ms <= 0:
        raise ValueError(f"{source} must be > 0, got {raw!r}")
    return timeout_ms


def load_config_file() -> Tuple[Dict[str, Any], Optional[Path]]:
    """
    Load optional configuration from a JSON file.

    Search order:
    1. Path from ANKI_CODEMODE_CONFIG (if set)
    2. ./anki_codemode_config.json in current working directory
    3. ~/.anki_codemode_config.json in the user home directory

    Returns:
        Tuple of (config dict, path it was read from). Empty dict and None
        when no usable file exists.
    """
    candidates: List[Path] = []
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path).expanduser())
    candidates.append(Path.cwd() / CONFIG_FILENAME)
    candidates.append(Path.home() / f".{CONFIG_FILENAME}")

    for path in candidates:
        if not path.is_file():
            continue
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError:
            logger.warning("Ignoring invalid config file (JSON parse error): %s", path)
            break
        if not isinstance(data, dict):
            logger.warning("Ignoring config file without a top-level object: %s", path)
            break
        return data, path

    return {}, None


@dataclass
class ServerConfig:
    """Connection and tool settings for one server process."""

    url: str = DEFAULT_URL
    api_key: Optional[str] = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    version: int = DEFAULT_VERSION
    tools: List[str] = field(default_factory=list_tools)

    @classmethod
    def from_sources(
        cls,
        args: Optional[argparse.Namespace] = None,
        environ: Optional[Mapping[str, str]] = None,
        file_config: Optional[Mapping[str, Any]] = None,
    ) -> "ServerConfig":
        """Merge settings; CLI overrides environment overrides config file."""
        env = os.environ if environ is None else environ
        file_config = file_config or {}

        def pick(arg_name: str, env_name: Optional[str], file_key: str) -> Any:
            value = getattr(args, arg_name, None) if args is not None else None
            if value is not None:
                return value
            if env_name and env.get(env_name):
                return env[env_name]
            return file_config.get(file_key)

        config = cls()
        url = pick("url", "ANKI_CONNECT_URL", "url")
        if url:
            config.url = url
        config.api_key = pick("api_key", "ANKI_CONNECT_API_KEY", "api_key") or None
        timeout = pick("timeout_ms", "ANKI_CONNECT_TIMEOUT", "timeout_ms")
        if timeout is not None:
            config.timeout_ms = _parse_timeout(timeout, "timeout_ms")
        version = pick("version_number", None, "version")
        if version is not None:
            config.version = int(version)

        tools = pick("tools", "ANKI_TOOLS", "tools")
        if isinstance(tools, (list, tuple)):
            tools = ",".join(tools)
        config.tools = parse_enabled_tools(tools)
        return config

    def create_client(self) -> AnkiConnectClient:
        """Build an AnkiConnect client from these settings."""
        return AnkiConnectClient(
            url=self.url,
            version=self.version,
            timeout_ms=self.timeout_ms,
            api_key=self.api_key,
        )
