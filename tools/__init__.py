# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP tool server.
#
# ARCHITECTURAL ROLE:
#   tools/ is the "translation layer" between MCP clients and core/.
#   mcp_server.py:
#     1. Imports the operations from core/
#     2. Wraps each in a FastMCP tool decorator
#     3. Converts dataclass answers to dicts for JSON
#     4. Turns domain errors into MCP tool errors
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT call Docker Hub themselves (that's core/dockerhub.py)
#   - They do NOT know about Google ADK
#
# TOOL CONTRACT QUALITY:
#   The docstring of each tool is what the LLM reads to decide WHEN to call
#   it and WHAT to pass.  Keep them specific.
# =============================================================================
