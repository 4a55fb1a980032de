"""
Pytest configuration and shared fixtures for tests.

The fixtures wire the scripted fakes from tests.fakes into an Orchestrator,
with time driven by a fake clock advanced only by the injected sleep.
"""

import pytest

from agent_router.config.orchestrator_config import OrchestratorConfig
from agent_router.config.settings import config
from agent_router.orchestration.orchestrator import Orchestrator
from tests.fakes import FakeClock, FakeRetrievalService, FakeTextGenerator, RecordingSleep


@pytest.fixture
def fake_generator() -> FakeTextGenerator:
    return FakeTextGenerator()


@pytest.fixture
def fake_retrieval() -> FakeRetrievalService:
    return FakeRetrievalService()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep(fake_clock) -> RecordingSleep:
    return RecordingSleep(fake_clock)


@pytest.fixture
def orchestrator_settings() -> OrchestratorConfig:
    return OrchestratorConfig(
        default_model="test-default-model",
        fallback_model="test-fallback-model",
        routing_model="test-routing-model",
        timeout_seconds=0.2,
        max_retries=2,
        health_check_timeout_seconds=0.2,
    )


@pytest.fixture
def orchestrator(fake_generator, fake_retrieval, orchestrator_settings, fake_sleep, fake_clock) -> Orchestrator:
    """
    Orchestrator wired to the fakes.

    Usage:
        async def test_something(orchestrator):
            response = await orchestrator.process({"query": "What is 2+2?"})
    """
    return Orchestrator(
        generator=fake_generator,
        retrieval=fake_retrieval,
        settings=orchestrator_settings,
        sleep=fake_sleep,
        clock=fake_clock,
    )


@pytest.fixture
def provider_key(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", "sk-test")
