"""Runnable MCP servers: python -m neurosift_mcp.servers.<name>."""
