"""Application logger and component child loggers."""

import logging

from agent_router.config.settings import config
from agent_router.utils.logger import ROOT_LOGGER_NAME, get_logger, logger, setup_logger


def test_component_logger_is_child_of_application_logger():
    routing_logger = get_logger("routing")

    assert routing_logger.name == "AgentRouter.routing"
    assert routing_logger.parent is logger
    assert routing_logger.handlers == []
    assert routing_logger.getEffectiveLevel() == logger.level


def test_blank_component_returns_application_logger():
    assert get_logger("") is logger
    assert get_logger(" . ") is logger


def test_component_records_reach_application_handlers(caplog):
    with caplog.at_level(logging.WARNING, logger=ROOT_LOGGER_NAME):
        get_logger("agents.qa").warning("[QA] Retrieval failed, continuing without context")

    record = caplog.records[-1]
    assert record.name == "AgentRouter.agents.qa"
    assert record.getMessage() == "[QA] Retrieval failed, continuing without context"


def test_setup_is_idempotent_and_updates_level():
    handler_count = len(logger.handlers)
    try:
        configured = setup_logger(level="DEBUG")

        assert configured is logger
        assert len(logger.handlers) == handler_count
        assert logger.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in logger.handlers)
        assert get_logger("orchestration").isEnabledFor(logging.DEBUG)
    finally:
        setup_logger(level=config.LOG_LEVEL)


def test_components_log_under_their_own_names(orchestrator):
    assert orchestrator.logger.name == "AgentRouter.orchestration"
    assert orchestrator._router.logger.name == "AgentRouter.routing"
