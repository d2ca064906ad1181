# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK agent configuration.
#
# ARCHITECTURAL ROLE:
#   The agent is one CLIENT of the MCP server, useful for trying the tools
#   out in a terminal.  It:
#     1. Receives a question ("How do I run postgres with a volume?")
#     2. Picks the tool(s) that answer it
#     3. Turns the tool output into a short, runnable answer
#
#   Any other MCP client (an IDE, Claude Desktop, ...) can use
#   tools/mcp_server.py the same way; nothing in core/ or tools/ depends
#   on this package.
# =============================================================================
