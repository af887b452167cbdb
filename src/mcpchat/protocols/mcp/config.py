"""MCP server configuration — the ``mcp-servers.json`` file.

Example::

    {
      "servers": {
        "weather": {
          "type": "stdio",
          "command": "npx",
          "args": ["-y", "@example/weather-mcp"],
          "env": {"WEATHER_API_KEY": "${WEATHER_API_KEY}"}
        }
      }
    }

Files ending in ``.yaml`` / ``.yml`` are parsed as YAML with the same shape.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mcpchat.errors import ConfigurationError

logger = logging.getLogger(__name__)


class MCPServerConfig(BaseModel):
    """How to launch one MCP server."""

    model_config = ConfigDict(populate_by_name=True)

    transport: Literal["stdio"] = Field(default="stdio", alias="type")
    command: str
    args: list[str] = []
    env: dict[str, str] = {}


class MCPConfig(BaseModel):
    """All configured MCP servers, keyed by server name."""

    servers: dict[str, MCPServerConfig] = {}


def load_mcp_config(path: str | Path) -> MCPConfig:
    """Read and validate the MCP server file at *path*.

    A missing file yields an empty configuration.  ``${VAR}`` references are
    expanded from the environment before parsing.

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated.
    """
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("%s not found, using empty MCP configuration", config_path)
        return MCPConfig()
    except OSError as exc:
        raise ConfigurationError(f"Failed to load MCP configuration: {exc}") from exc

    return parse_mcp_config(
        os.path.expandvars(raw),
        format="yaml" if config_path.suffix in (".yaml", ".yml") else "json",
    )


def parse_mcp_config(raw: str, *, format: str = "json") -> MCPConfig:
    """Parse MCP server configuration text.

    Raises:
        ConfigurationError: On syntax or schema errors.
    """
    try:
        data: Any = yaml.safe_load(raw) if format == "yaml" else json.loads(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to load MCP configuration: {exc}") from exc

    if data is None:
        return MCPConfig()
    if not isinstance(data, dict):
        raise ConfigurationError("Failed to load MCP configuration: expected a mapping")

    try:
        return MCPConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Failed to load MCP configuration: {exc}") from exc
