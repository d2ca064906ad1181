# =============================================================================
# main.py  —  Interactive Docker Hub Assistant
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py            # chat with the agent
#   uv run python -m tools.mcp_server  # just the MCP server (for other clients)
#
# WHAT HAPPENS:
#   1. Creates the Google ADK agent (agent/dockerhub_agent.py), which starts
#      the MCP server as a subprocess
#   2. Reads questions from the terminal
#   3. Streams each answer, printing the tools the agent calls on the way
# =============================================================================

import asyncio

from dotenv import load_dotenv

# LiteLlm reads the provider key (OPENROUTER_API_KEY, ...) when it initializes.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.dockerhub_agent import create_agent

APP_NAME = "dockerhub_assistant"
USER_ID = "demo_user"


async def run_agent():
    """Run the Docker Hub assistant in a read-eval-print loop."""
    print("=" * 70)
    print("  DOCKER HUB ASSISTANT")
    print("  Powered by Google ADK + FastMCP")
    print("=" * 70)
    print("\n🔧 Initializing agent...")
    agent = create_agent()

    session_service = InMemorySessionService()
    runner = Runner(
        agent=agent,
        app_name=APP_NAME,
        session_service=session_service,
    )
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    print("✅ Agent initialized and ready!\n")
    print("💬 Ask about any Docker Hub image, e.g. 'How do I run redis with persistence?'")
    print("   (Type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(role="user", parts=[types.Part(text=user_input)])

        print("\n🤖 Agent is thinking...\n")
        print("-" * 70)

        final_response = ""
        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if getattr(part, "text", None):
                        final_response = part.text
                    if getattr(part, "function_call", None):
                        print(f"  🔧 Calling tool: {part.function_call.name}")

        print("-" * 70)
        if final_response:
            print(f"\n🤖 Agent:\n\n{final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")

        print("\n" + "=" * 70)


if __name__ == "__main__":
    asyncio.run(run_agent())
