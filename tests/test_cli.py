"""Interactive CLI helpers driven against the fake-backed orchestrator."""

import asyncio
import json

import pytest

import main
from agent_router.utils.logger import logger
from tests.fakes import DEFAULT_REPLY


def _scripted_input(lines):
    remaining = list(lines)

    def fake_input(prompt=""):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return fake_input


@pytest.mark.asyncio
async def test_sequential_queries_run_on_one_event_loop(orchestrator, fake_retrieval, capsys):
    await main._query_mode(orchestrator, "What is 2+2?", logger)
    await main._query_mode(orchestrator, "What is 3+3?", logger)

    out = capsys.readouterr().out
    assert out.count(DEFAULT_REPLY) == 2
    assert out.count("agent: qa (selected qa, confidence 0.80)") == 2
    assert [s["query"] for s in fake_retrieval.searches] == ["What is 2+2?", "What is 3+3?"]
    loop = asyncio.get_running_loop()
    assert fake_retrieval.search_loops == [loop, loop]


@pytest.mark.asyncio
async def test_session_keeps_retrieval_working_across_commands(orchestrator, fake_retrieval, monkeypatch, capsys):
    monkeypatch.setattr(
        "builtins.input",
        _scripted_input(["What is 2+2?", "", "route What is 3+3?", "What is 4+4?", "quit"]),
    )

    await main._system(logger, orchestrator)

    out = capsys.readouterr().out
    assert out.count(DEFAULT_REPLY) == 2
    assert "no query entered" in out
    assert '"selected_agent": "qa"' in out
    assert out.rstrip().endswith("Goodbye!")
    assert [s["query"] for s in fake_retrieval.searches] == ["What is 2+2?", "What is 4+4?"]
    assert len(set(fake_retrieval.search_loops)) == 1


@pytest.mark.asyncio
async def test_session_ends_on_eof(orchestrator, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", _scripted_input([]))

    await main._system(logger, orchestrator)

    assert "Exiting. Goodbye!" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_route_mode_prints_decision(orchestrator, fake_generator, capsys):
    await main._route_mode(orchestrator, "What is 2+2?", logger)

    decision = json.loads(capsys.readouterr().out)
    assert decision["selected_agent"] == "qa"
    assert decision["suggested_sources"] == ["openai"]
    assert fake_generator.calls == []


@pytest.mark.asyncio
async def test_invalid_query_is_reported(orchestrator, capsys):
    await main._query_mode(orchestrator, "   ", logger)

    assert "Invalid request" in capsys.readouterr().out
