# =============================================================================
# agent/dockerhub_agent.py  —  Google ADK Agent Configuration
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds a Google ADK agent that answers Docker Hub questions by calling
#   the tools in tools/mcp_server.py.
#
#   ADK = orchestration (tool calling, sessions)
#   LLM = reasoning, any provider via LiteLlm (OpenRouter by default)
#   MCP = the connection to our tool server
#
#   ┌──────────────────────────┐   stdio   ┌──────────────────────────┐
#   │  ADK Agent (LiteLlm)     │──────────▶│  FastMCP server          │
#   │  agent/prompt.py         │           │  tools/mcp_server.py     │
#   └──────────────────────────┘           │   • get_readme_…         │
#                                          │   • get_package_info_…   │
#                                          │   • search_packages_…    │
#                                          └────────────┬─────────────┘
#                                                       ▼
#                                          core/  →  hub.docker.com
#
# MCP CONNECTION:
#   ADK starts the server as a subprocess ("uv run python -m tools.mcp_server")
#   from the project root, so the subprocess gets the same .venv and can
#   import core/.
# =============================================================================

import os

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_dockerhub_assistant_prompt

DEFAULT_MODEL = "openrouter/openai/gpt-4o"


def create_agent(model: str = None) -> Agent:
    """Create the Docker Hub assistant agent.

    Args:
        model: LiteLlm model string.  Defaults to $AGENT_MODEL, then
               DEFAULT_MODEL.  LiteLlm reads the provider key
               (e.g. OPENROUTER_API_KEY) from the environment.
    """
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command="uv",
            args=["run", "python", "-m", "tools.mcp_server"],
            cwd=project_root,
        ),
    )

    return Agent(
        name="dockerhub_assistant",
        model=LiteLlm(model=model or os.environ.get("AGENT_MODEL", DEFAULT_MODEL)),
        instruction=get_dockerhub_assistant_prompt(),
        tools=[mcp_tools],
    )
