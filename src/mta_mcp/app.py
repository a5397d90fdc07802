"""MCP application instance.

This module exists to avoid circular import issues when running with `python -m`.
All tool modules should import `mcp` from here, not from server.py.
"""

from mcp.server.fastmcp import FastMCP

# Initialize the MCP server
mcp = FastMCP(
    "MTA Subway",
    instructions=(
        "New York City subway information - real-time arrival boards per stop, "
        "raw trip updates per feed group, and which stations each line serves"
    ),
)
