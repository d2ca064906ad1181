# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL business logic for the Docker Hub README server:
# the cache, the retry engine, the Docker Hub / GitHub clients, the README
# parser and the three tool operations.
#
# CRITICAL ARCHITECTURAL RULE:
#   Nothing in this package imports Google ADK or FastMCP.  The only
#   third-party import is httpx, for the HTTP clients; everything else
#   runs and tests without a network or an agent framework.
# =============================================================================
