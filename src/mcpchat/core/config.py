"""Assistant configuration — model, credentials, system prompt, MCP switches.

Values come from environment variables through :func:`load_config`; every
validation failure is reported as a :class:`~mcpchat.errors.ConfigurationError`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from mcpchat.errors import ConfigurationError
from mcpchat.tools.registry import ToolDescriptor

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_MCP_CONFIG_PATH = "./mcp-servers.json"
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. Be concise and helpful in your responses."
)


class AssistantConfig(BaseModel):
    """Configuration for an :class:`~mcpchat.core.assistant.Assistant`.

    The ``model`` field uses LiteLLM's naming convention, so both bare
    OpenAI names (``gpt-4o``) and ``provider/model`` strings work.
    """

    api_key: str
    base_url: str | None = None
    model: str = DEFAULT_MODEL
    system: str | None = DEFAULT_SYSTEM_PROMPT
    mcp_enabled: bool = False
    mcp_config_path: str = DEFAULT_MCP_CONFIG_PATH
    tools: list[ToolDescriptor] = Field(default_factory=lambda: list[ToolDescriptor]())

    @field_validator("api_key")
    @classmethod
    def _api_key_not_empty(cls, value: str) -> str:
        if not value.strip():
            msg = "API key cannot be empty"
            raise ValueError(msg)
        return value

    @field_validator("model")
    @classmethod
    def _model_not_empty(cls, value: str) -> str:
        if not value.strip():
            msg = "Model ID cannot be empty"
            raise ValueError(msg)
        return value

    @field_validator("base_url")
    @classmethod
    def _base_url_format(cls, value: str | None) -> str | None:
        if value is None:
            return None
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            msg = "Invalid base URL format"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _check_mcp_path(self) -> AssistantConfig:
        if not self.mcp_enabled:
            return self
        if not self.mcp_config_path.strip():
            msg = "MCP config path cannot be empty when MCP is enabled"
            raise ValueError(msg)
        if not Path(self.mcp_config_path).exists():
            logger.warning(
                "MCP config file not found at %s, will use empty configuration",
                self.mcp_config_path,
            )
        return self

    def with_tools(self, tools: list[ToolDescriptor]) -> AssistantConfig:
        """Return a copy with *tools* registered as static tools."""
        return self.model_copy(update={"tools": [*self.tools, *tools]})


def load_config(environ: Mapping[str, str] | None = None) -> AssistantConfig:
    """Build an :class:`AssistantConfig` from environment variables.

    Reads ``OPENAI_API_KEY`` (or ``OPENAI_KEY``), ``OPENAI_BASE_URL``,
    ``MODEL_ID``, ``MCP_ENABLED`` and ``MCP_CONFIG_PATH``.

    Raises:
        ConfigurationError: If the key is missing or any value is invalid.
    """
    env = os.environ if environ is None else environ

    api_key = env.get("OPENAI_API_KEY") or env.get("OPENAI_KEY")
    if not api_key:
        msg = (
            "OpenAI API key is required. "
            "Please set OPENAI_API_KEY or OPENAI_KEY environment variable."
        )
        raise ConfigurationError(msg)

    data: dict[str, Any] = {
        "api_key": api_key,
        "model": env.get("MODEL_ID") or DEFAULT_MODEL,
        "mcp_enabled": env.get("MCP_ENABLED") == "true",
        "mcp_config_path": env.get("MCP_CONFIG_PATH") or DEFAULT_MCP_CONFIG_PATH,
    }
    if env.get("OPENAI_BASE_URL"):
        data["base_url"] = env["OPENAI_BASE_URL"]

    try:
        return AssistantConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(_first_error(exc)) from exc


def _first_error(exc: ValidationError) -> str:
    """Return the message of the first validation error without pydantic's prefix."""
    errors = exc.errors()
    if not errors:
        return str(exc)
    message = str(errors[0].get("msg", exc))
    return message.removeprefix("Value error, ")
