from __future__ import annotations
import asyncio
import json
from typing import NoReturn
from agent_router.orchestration.orchestrator import Orchestrator
from agent_router.orchestration.streaming import ResponseStream
from agent_router.utils.exceptions import AgentRouterError, ConfigurationError, RequestValidationError
from agent_router.utils.logger import logger
from agent_router.config.settings import config
from logging import Logger


def _init() -> tuple[Logger, Orchestrator]:
    log: Logger = logger

    log.info("Starting Agent Router CLI")
    if not config.validate():
        log.warning("Provider keys are missing; agent calls will fail until they are set.")

    try:
        orchestrator = Orchestrator.from_settings()
    except (AgentRouterError, ConfigurationError) as e:
        log.error(f"Failed to initialize orchestrator: {e}", exc_info=True)
        raise e
    except Exception as e:
        log.error(f"Unexpected error initializing orchestrator: {e}", exc_info=True)
        raise e

    return log, orchestrator
async def _system(log: Logger, orchestrator: Orchestrator) -> None:
    # All commands share this loop; the provider clients are bound to it
    print("==============================================")
    print(" Agent Router")
    while True:
        print("==============================================")
        print("Type your question or task.")
        print("Type 'health' for a health check, 'caps' for agent capabilities")
        print("Type 'route <query>' to see the routing decision only")
        print("Type 'exit' or 'quit' to exit.\n")
        print("==============================================")

        try:
            query = (await asyncio.to_thread(input, ">>> ")).strip()
        except (KeyboardInterrupt, EOFError):
            print("\nExiting. Goodbye!")
            break

        if not query:
            print("no query entered")
            continue

        command = query.lower()
        if command in {"exit", "quit", "q"}:
            print("Goodbye!")
            break
        elif command == "health":
            await _health_mode(orchestrator, log)
        elif command == "caps":
            print(json.dumps(orchestrator.capabilities(), indent=2))
        elif command.startswith("route "):
            await _route_mode(orchestrator, query[len("route "):], log)
        else:
            await _query_mode(orchestrator, query, log)
async def _query_mode(orchestrator: Orchestrator, query: str, log: Logger) -> None:
    try:
        stream = orchestrator.process_streaming({"query": query})
        print("\n--- Answer ---")
        response = await _print_stream(stream)
        print("\n--------------")

        routing = response.metadata.routing_decision
        if routing is not None:
            print(f"agent: {response.agent.value} (selected {routing.selected_agent.value}, "
                  f"confidence {routing.confidence:.2f})")
            print(f"reasoning: {routing.reasoning}")
        if response.error_details is not None:
            print(f"error: {response.error_details.code.value}")

    except RequestValidationError as e:
        print(f"Invalid request: {e}")
    except AgentRouterError as e:
        log.error(f"Agent error while handling query: {e}", exc_info=True)
        print(f"Error: Agent failed to answer the query: {e}")
    except Exception as e:
        log.error(f"Unexpected error while handling query: {e}", exc_info=True)
        print(f"Unexpected error while handling query: {e}")
async def _print_stream(stream: ResponseStream):
    async with stream:
        async for chunk in stream:
            print(chunk, end="", flush=True)
    return stream.response
async def _route_mode(orchestrator: Orchestrator, query: str, log: Logger) -> None:
    try:
        decision = await orchestrator.route(query)
        print(json.dumps(decision.to_dict(), indent=2))
    except RequestValidationError as e:
        print(f"Invalid request: {e}")
    except Exception as e:
        log.error(f"Unexpected error while routing query: {e}", exc_info=True)
        print(f"Unexpected error while routing query: {e}")
async def _health_mode(orchestrator: Orchestrator, log: Logger) -> None:
    try:
        report = await orchestrator.health_check()
        print(json.dumps(report.to_dict(), indent=2))
    except Exception as e:
        log.error(f"Health check failed: {e}", exc_info=True)
        print(f"Health check failed: {e}")

def main() -> NoReturn:
    #initialize
    log, orchestrator = _init()
    # Simple CLI loop, one event loop for the whole session
    asyncio.run(_system(log, orchestrator))


if __name__ == "__main__":
    main()
