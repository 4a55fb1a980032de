"""
Centralized logging configuration.

One application logger ("AgentRouter") owns the console and file handlers.
Components log through child loggers from get_logger(), e.g.
"AgentRouter.orchestration" or "AgentRouter.agents.qa"; child records
propagate to the application handlers, and the file log records which
component emitted each line.
"""

import logging
import sys
from typing import Optional

from agent_router.config.settings import config

ROOT_LOGGER_NAME = "AgentRouter"

CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    return handler


def _file_handler(level: int) -> logging.Handler:
    config.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(config.LOG_FILE, encoding='utf-8')
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


def setup_logger(name: str = ROOT_LOGGER_NAME, level: Optional[str] = None) -> logging.Logger:
    """
    Set up and configure the application logger.

    Calling it again only updates the level; handlers are attached once.

    Args:
        name: Name of the logger (default: "AgentRouter")
        level: Logging level name (default: LOG_LEVEL from config, INFO if unknown)

    Returns:
        logging.Logger: Configured logger instance
    """
    numeric_level = getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(numeric_level)
        return logger

    logger.addHandler(_console_handler(numeric_level))
    logger.addHandler(_file_handler(numeric_level))
    return logger


def get_logger(component: str) -> logging.Logger:
    """
    Return the child logger for one component.

    Child loggers carry no handlers of their own and inherit the
    application level, so setup_logger() still controls all output.

    Args:
        component: Dotted component name, e.g. "routing" or "agents.qa"
    """
    component = component.strip(". ")
    if not component:
        return logger
    return logger.getChild(component)


# Create default logger instance
logger = setup_logger()
