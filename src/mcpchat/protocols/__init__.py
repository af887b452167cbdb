"""Protocol layer — MCP tool servers."""
