"""Tests for AssistantConfig and load_config."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from mcpchat.core.config import (
    DEFAULT_MCP_CONFIG_PATH,
    DEFAULT_MODEL,
    AssistantConfig,
    load_config,
)
from mcpchat.errors import ConfigurationError
from mcpchat.tools.builtin import calculator_tool, time_tool


class TestLoadConfig:
    def test_defaults(self) -> None:
        config = load_config({"OPENAI_API_KEY": "sk-test"})
        assert config.api_key == "sk-test"
        assert config.model == DEFAULT_MODEL
        assert config.base_url is None
        assert config.mcp_enabled is False
        assert config.mcp_config_path == DEFAULT_MCP_CONFIG_PATH

    def test_openai_key_fallback(self) -> None:
        config = load_config({"OPENAI_KEY": "sk-alt"})
        assert config.api_key == "sk-alt"

    def test_api_key_preferred_over_fallback(self) -> None:
        config = load_config({"OPENAI_API_KEY": "sk-main", "OPENAI_KEY": "sk-alt"})
        assert config.api_key == "sk-main"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY or OPENAI_KEY"):
            load_config({})

    def test_all_variables(self, tmp_path: Path) -> None:
        servers = tmp_path / "servers.json"
        servers.write_text("{}")
        config = load_config(
            {
                "OPENAI_API_KEY": "sk-test",
                "OPENAI_BASE_URL": "http://localhost:11434/v1",
                "MODEL_ID": "gpt-4o",
                "MCP_ENABLED": "true",
                "MCP_CONFIG_PATH": str(servers),
            }
        )
        assert config.base_url == "http://localhost:11434/v1"
        assert config.model == "gpt-4o"
        assert config.mcp_enabled is True
        assert config.mcp_config_path == str(servers)

    def test_mcp_enabled_only_for_true(self) -> None:
        config = load_config({"OPENAI_API_KEY": "sk", "MCP_ENABLED": "yes"})
        assert config.mcp_enabled is False

    def test_invalid_base_url(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid base URL format"):
            load_config({"OPENAI_API_KEY": "sk", "OPENAI_BASE_URL": "not a url"})

    def test_blank_key_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="API key cannot be empty"):
            load_config({"OPENAI_API_KEY": "   "})

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.delenv("MODEL_ID", raising=False)
        monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
        assert load_config().api_key == "sk-env"


class TestAssistantConfig:
    def test_empty_model_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Model ID cannot be empty"):
            AssistantConfig(api_key="sk", model="")

    def test_empty_mcp_path_rejected_when_enabled(self) -> None:
        with pytest.raises(ValidationError, match="MCP config path"):
            AssistantConfig(api_key="sk", mcp_enabled=True, mcp_config_path="  ")

    def test_missing_mcp_file_warns(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        missing = tmp_path / "nope.json"
        with caplog.at_level(logging.WARNING, logger="mcpchat.core.config"):
            AssistantConfig(api_key="sk", mcp_enabled=True, mcp_config_path=str(missing))
        assert "MCP config file not found" in caplog.text

    def test_with_tools_appends(self) -> None:
        config = AssistantConfig(api_key="sk", tools=[calculator_tool])
        updated = config.with_tools([time_tool])
        assert [t.name for t in updated.tools] == ["calculator", "get_time"]
        assert [t.name for t in config.tools] == ["calculator"]
