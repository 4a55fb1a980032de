"""
Orchestrator implementation.

This component wires the agent architecture together:

1. Builds (or accepts) the capability registry, the SmartRouter and the
   retry policy from an immutable OrchestratorConfig.
2. Exposes the blocking path, process():
   - Validates the request (rejections raise before any agent runs)
   - Routes the query (intent + sources + complexity -> RoutingDecision)
   - Enhances the request with the routing insights
   - Executes the selected agent under timeout/retry, then the fallback
     agent if the primary failed
   - Stamps orchestration time and the routing summary onto the metadata
3. Exposes the streaming path, process_streaming(), which relays chunks
   through a ResponseStream and falls back to the fallback agent's blocking
   path if the primary stream breaks.
4. Exposes health_check() and capabilities().
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from agent_router.agents.base_agent import BaseAgent
from agent_router.agents.registry import build_default_agents
from agent_router.config.constants import (
    ORCHESTRATION_APOLOGY,
    UNKNOWN_MODEL,
    AgentType,
    ErrorCode,
)
from agent_router.config.orchestrator_config import OrchestratorConfig
from agent_router.llm.text_generator import LangChainTextGenerator, TextGenerator
from agent_router.orchestration.health import HealthChecker, HealthReport
from agent_router.orchestration.retry import RetryPolicy
from agent_router.orchestration.streaming import EmitFn, ResponseStream
from agent_router.retrieval.base_retriever import RetrievalService
from agent_router.retrieval.chroma_retriever import ChromaRetrievalService
from agent_router.routing.classifier import IntentClassifier
from agent_router.routing.router import SmartRouter
from agent_router.routing.source_resolver import SourceResolver
from agent_router.schema import (
    AgentRequest,
    AgentResponse,
    ErrorDetails,
    RequestContext,
    RequestOptions,
    ResponseMetadata,
    RoutingDecision,
    StreamComplete,
)
from agent_router.utils.exceptions import (
    AgentExecutionError,
    AgentTimeoutError,
    OrchestrationError,
)
from agent_router.utils.logger import get_logger


class Orchestrator:
    """
    High-level orchestration system for the agents.

    All collaborators are injected; `from_settings()` wires the default
    LangChain/ChromaDB adapters from the environment-backed configuration.
    """

    def __init__(
        self,
        generator: TextGenerator,
        retrieval: Optional[RetrievalService] = None,
        settings: Optional[OrchestratorConfig] = None,
        agents: Optional[Mapping[AgentType, BaseAgent]] = None,
        router: Optional[SmartRouter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.logger = get_logger("orchestration")
        self.settings = settings or OrchestratorConfig.from_settings()
        self._generator = generator
        self._retrieval = retrieval
        self._sleep = sleep
        self._clock = clock
        self._custom_agents = agents
        self._custom_router = router

        # Initialize all agents here (single source of truth)
        self._agents = agents if agents is not None else build_default_agents(
            generator,
            retrieval,
            default_model=self.settings.default_model,
            search_threshold=self.settings.search_threshold,
        )
        self._router = router or SmartRouter(
            IntentClassifier(generator, self.settings.routing_model),
            SourceResolver(retrieval, self.settings.fallback_sources),
            primary_source=self.settings.primary_source,
        )
        self._retry = RetryPolicy(
            max_retries=self.settings.max_retries,
            timeout_seconds=self.settings.timeout_seconds,
            sleep=sleep,
        )

        self.logger.info(
            f"[Orchestrator] Initialized with agents: {', '.join(a.value for a in self._agents)}"
        )

    @classmethod
    def from_settings(cls, settings: Optional[OrchestratorConfig] = None) -> "Orchestrator":
        """Build an orchestrator backed by ChatOpenAI and ChromaDB."""
        settings = settings or OrchestratorConfig.from_settings()
        generator = LangChainTextGenerator(health_model=settings.fallback_model)
        return cls(generator=generator, retrieval=ChromaRetrievalService(), settings=settings)

    def rebuild(self, **overrides: Any) -> "Orchestrator":
        """Return a fresh orchestrator with some configuration fields replaced."""
        return Orchestrator(
            generator=self._generator,
            retrieval=self._retrieval,
            settings=replace(self.settings, **overrides),
            agents=self._custom_agents,
            router=self._custom_router,
            sleep=self._sleep,
            clock=self._clock,
        )

    @property
    def agents(self) -> Mapping[AgentType, BaseAgent]:
        return self._agents

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------
    async def route(self, query: str, context: Optional[RequestContext] = None) -> RoutingDecision:
        return await self._router.route(query, context)

    # ------------------------------------------------------------------
    # Blocking path
    # ------------------------------------------------------------------
    async def process(self, request: Any) -> AgentResponse:
        """
        Execute the full routing + answering chain:
        Router -> selected agent (with retries) -> fallback agent -> response.

        Raises:
            RequestValidationError: If the request is malformed
        """
        validated = AgentRequest.parse(request)
        start = self._clock()
        decision: Optional[RoutingDecision] = None

        self.logger.info("[Orchestrator] Received query for processing.")

        try:
            decision = await self.route(validated.query, validated.context)
            enhanced = self._enhance_request(validated, decision, streaming=False)
            response = await self._execute_with_fallback(decision, enhanced)
        except Exception as e:
            self.logger.error(f"[Orchestrator] Request failed: {e}", exc_info=True)
            agent = decision.selected_agent if decision else AgentType.QA
            response = self._error_response(agent, ErrorCode.ORCHESTRATION_ERROR, str(e), start)

        return self._stamp(response, decision, start)

    async def _execute_with_fallback(self, decision: RoutingDecision, request: AgentRequest) -> AgentResponse:
        primary = decision.selected_agent

        try:
            response = await self._execute_with_agent(primary, request)
        except AgentExecutionError as e:
            primary_error = str(e)
        else:
            if response.error_details is None:
                self.logger.info(f"[Orchestrator] Query handled by agent_type={primary.value}")
                return response
            primary_error = response.error_details.message

        fallback = decision.fallback_agent
        if fallback is None:
            raise OrchestrationError(f"Agent {primary.value} failed: {primary_error}", agent=primary.value)

        self.logger.warning(
            f"[Orchestrator] Agent {primary.value} failed ({primary_error}); trying fallback {fallback.value}"
        )
        try:
            fallback_response = await self._execute_with_agent(fallback, request)
        except AgentExecutionError as e:
            fallback_error = str(e)
        else:
            if fallback_response.error_details is None:
                self.logger.info(f"[Orchestrator] Query handled by fallback agent_type={fallback.value}")
                return fallback_response
            fallback_error = fallback_response.error_details.message

        raise OrchestrationError(
            f"Agent {primary.value} failed: {primary_error}; "
            f"fallback agent {fallback.value} failed: {fallback_error}",
            agent=primary.value,
        )

    async def _execute_with_agent(self, agent_type: AgentType, request: AgentRequest) -> AgentResponse:
        agent = self._get_agent(agent_type)
        return await self._retry.run(agent_type.value, partial(agent.execute, request))

    # ------------------------------------------------------------------
    # Streaming path
    # ------------------------------------------------------------------
    def process_streaming(self, request: Any) -> ResponseStream:
        """
        Start a streamed execution.

        Validation happens here, synchronously; the returned ResponseStream
        yields text chunks and exposes the final response via `.response`.

        Raises:
            RequestValidationError: If the request is malformed
        """
        validated = AgentRequest.parse(request)
        start = self._clock()
        return ResponseStream(
            producer=partial(self._stream, validated, start),
            on_failure=lambda e: self._stamp(
                self._error_response(AgentType.QA, ErrorCode.STREAMING_ERROR, str(e), start),
                None,
                start,
            ),
            buffer_size=self.settings.stream_buffer_size,
        )

    async def _stream(self, request: AgentRequest, start: float, emit: EmitFn) -> AgentResponse:
        decision = await self.route(request.query, request.context)
        try:
            agent = self._get_agent(decision.selected_agent)
        except OrchestrationError as e:
            self.logger.error(f"[Orchestrator] {e}")
            await emit(ORCHESTRATION_APOLOGY)
            response = self._error_response(decision.selected_agent, ErrorCode.ORCHESTRATION_ERROR, str(e), start)
            return self._stamp(response, decision, start)

        enhanced = self._enhance_request(request, decision, streaming=True)

        if not agent.capability.supports_streaming:
            # Degrade to the blocking path, emitted as a single chunk
            try:
                response = await self._execute_with_fallback(decision, enhanced)
            except OrchestrationError as e:
                self.logger.error(f"[Orchestrator] Request failed: {e}")
                response = self._error_response(
                    decision.selected_agent, ErrorCode.ORCHESTRATION_ERROR, str(e), start
                )
            await emit(response.content)
            return self._stamp(response, decision, start)

        try:
            response = await self._relay_stream(agent, enhanced, emit)
        except Exception as e:
            self.logger.warning(f"[Orchestrator] Stream from agent {decision.selected_agent.value} failed: {e}")
            response = await self._stream_fallback(decision, enhanced, emit, str(e), start)

        return self._stamp(response, decision, start)

    async def _relay_stream(self, agent: BaseAgent, request: AgentRequest, emit: EmitFn) -> AgentResponse:
        events = agent.execute_streaming(request)
        try:
            while True:
                try:
                    event = await asyncio.wait_for(events.__anext__(), timeout=self.settings.timeout_seconds)
                except StopAsyncIteration:
                    raise AgentExecutionError(
                        f"Agent {agent.agent_type.value} stream ended without a final response",
                        code=ErrorCode.STREAMING_ERROR,
                    )
                except asyncio.TimeoutError:
                    raise AgentTimeoutError(
                        f"Agent {agent.agent_type.value} stream stalled for {self.settings.timeout_seconds}s"
                    )

                if isinstance(event, StreamComplete):
                    return event.response
                await emit(event.text)
        finally:
            await events.aclose()

    async def _stream_fallback(
        self,
        decision: RoutingDecision,
        request: AgentRequest,
        emit: EmitFn,
        primary_error: str,
        start: float,
    ) -> AgentResponse:
        fallback = decision.fallback_agent
        if fallback is None or fallback not in self._agents:
            await emit(ORCHESTRATION_APOLOGY)
            return self._error_response(decision.selected_agent, ErrorCode.STREAMING_ERROR, primary_error, start)

        # Streaming is not retried mid-stream: the fallback runs its blocking path
        try:
            response = await self._execute_with_agent(fallback, request)
        except AgentExecutionError as e:
            fallback_error = str(e)
        else:
            if response.error_details is None:
                self.logger.info(f"[Orchestrator] Stream completed by fallback agent_type={fallback.value}")
                await emit(response.content)
                return response
            fallback_error = response.error_details.message

        await emit(ORCHESTRATION_APOLOGY)
        return self._error_response(
            decision.selected_agent,
            ErrorCode.STREAMING_ERROR,
            f"{primary_error}; fallback agent {fallback.value} failed: {fallback_error}",
            start,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    async def health_check(self, include_providers: bool = True) -> HealthReport:
        checker = HealthChecker(
            agents=self._agents,
            generator=self._generator,
            check_model=self.settings.fallback_model,
            check_timeout_seconds=self.settings.health_check_timeout_seconds,
            clock=self._clock,
        )
        return await checker.check(include_providers=include_providers)

    def capabilities(self) -> Dict[str, Dict[str, Any]]:
        return {
            agent_type.value: {**agent.capability.to_dict(), "available": True}
            for agent_type, agent in self._agents.items()
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _get_agent(self, agent_type: AgentType) -> BaseAgent:
        agent = self._agents.get(agent_type)
        if agent is None:
            raise OrchestrationError(f"Agent {agent_type} not found", agent=str(agent_type))
        return agent

    def _enhance_request(self, request: AgentRequest, decision: RoutingDecision, streaming: bool) -> AgentRequest:
        """Merge routing insights into a new request; the original is untouched."""
        original_context = request.context
        original_options = request.options

        context = RequestContext(
            sources=decision.suggested_sources,
            max_results=(
                original_context.max_results if original_context else self.settings.default_max_results
            ),
            requires_citations=original_context.requires_citations if original_context else True,
            complexity=decision.estimated_complexity,
            user_intent=original_context.user_intent if original_context else None,
            domain_keywords=original_context.domain_keywords if original_context else (),
        )
        options = RequestOptions(
            model_id=(original_options.model_id if original_options else None) or self.settings.default_model,
            streaming=streaming,
            max_tokens=original_options.max_tokens if original_options else None,
            temperature=original_options.temperature if original_options else None,
            use_tools=original_options.use_tools if original_options else False,
        )
        return replace(request, context=context, options=options)

    def _elapsed_ms(self, start: float) -> int:
        return int((self._clock() - start) * 1000)

    def _error_response(self, agent: AgentType, code: ErrorCode, message: str, start: float) -> AgentResponse:
        return AgentResponse(
            content=ORCHESTRATION_APOLOGY,
            agent=agent,
            metadata=ResponseMetadata(model_used=UNKNOWN_MODEL, response_time_ms=self._elapsed_ms(start)),
            streaming_supported=False,
            error_details=ErrorDetails(code=code, message=message, retryable=True),
        )

    def _stamp(self, response: AgentResponse, decision: Optional[RoutingDecision], start: float) -> AgentResponse:
        metadata = replace(
            response.metadata,
            orchestration_time_ms=self._elapsed_ms(start),
            routing_decision=decision.summary() if decision else None,
        )
        return replace(response, metadata=metadata)
