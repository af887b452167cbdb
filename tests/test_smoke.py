"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import mcpchat

    assert mcpchat.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from mcpchat.cli import main

    assert callable(main)


def test_core_imports() -> None:
    from mcpchat.core import (
        Assistant,
        AssistantConfig,
        DeltaAccumulator,
        MessageStore,
        ModelClient,
        load_config,
    )

    assert Assistant is not None
    assert AssistantConfig is not None
    assert DeltaAccumulator is not None
    assert MessageStore is not None
    assert ModelClient is not None
    assert callable(load_config)


def test_mcp_imports() -> None:
    from mcpchat.protocols.mcp import MCPClient, MCPClientManager, StdioTransport

    assert MCPClient is not None
    assert MCPClientManager is not None
    assert StdioTransport is not None


def test_lazy_import_from_mcpchat() -> None:
    import mcpchat

    assert mcpchat.Assistant is not None
    assert mcpchat.AssistantConfig is not None
