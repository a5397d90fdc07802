"""MTA subway real-time arrivals MCP server."""

__version__ = "0.1.0"
