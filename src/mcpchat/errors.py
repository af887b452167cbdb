"""Error taxonomy shared by every layer of mcp-chat.

Tool-level errors (:class:`ToolError` and subclasses) are always absorbed into
conversation content by the orchestration loop.  Stream errors end the current
turn.  Configuration errors are fatal and raised before a conversation starts.
"""


class MCPChatError(Exception):
    """Base error for all mcp-chat failures."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(MCPChatError):
    """Missing or invalid setup (environment, MCP server file)."""


class ElicitationNotConfiguredError(ConfigurationError):
    """A provider asked for user input but no elicitation handler is installed."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(
            f"MCP server '{provider}' requested user input but no elicitation handler is configured"
        )


# ---------------------------------------------------------------------------
# Model stream
# ---------------------------------------------------------------------------


class StreamTransportError(MCPChatError):
    """The model API was unreachable or returned something unusable."""


class StreamFormatError(MCPChatError):
    """The model stream violated the tool-call fragment format."""


# ---------------------------------------------------------------------------
# Tool execution
# ---------------------------------------------------------------------------


class ToolError(MCPChatError):
    """Base error for a single failed tool call."""


class MalformedArgumentsError(ToolError):
    """Tool arguments were not a JSON object."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Malformed arguments for tool {name}" + (f": {detail}" if detail else ""))


class UnknownToolError(ToolError):
    """No tool with the requested name is registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' not found")


class ToolExecutionFailure(ToolError):
    """The tool executor raised; the original exception is ``__cause__``."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(detail or f"Tool {name} failed")


class ProviderNotConnectedError(ToolError):
    """The MCP server owning a tool is absent or disconnected."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"MCP server '{provider}' is not connected")


# ---------------------------------------------------------------------------
# MCP protocol
# ---------------------------------------------------------------------------


class ProtocolError(MCPChatError):
    """Base error for MCP protocol-layer failures."""


class ProviderConnectionError(ProtocolError):
    """The transport to an MCP server could not be used."""


class ProviderHandshakeError(ProtocolError):
    """Connecting to or initialising an MCP server failed."""

    def __init__(self, provider: str, detail: str = "") -> None:
        self.provider = provider
        self.detail = detail
        super().__init__(
            f"Handshake with MCP server '{provider}' failed" + (f": {detail}" if detail else "")
        )


class RemoteToolError(ProtocolError):
    """An MCP server reported a failure for ``tools/call``."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Tool execution failed: {name}" + (f": {detail}" if detail else ""))
