"""
Application-wide configuration management.

This module loads configuration from environment variables and provides
a singleton Config object that can be accessed throughout the application.
Uses Singleton pattern to ensure consistent configuration access.

Runtime wiring (timeouts, retry count, model defaults) is not read from this
object directly by the orchestrator: it is copied into an immutable
OrchestratorConfig at construction time (see orchestrator_config.py).
"""

import logging
import os
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """
    Singleton configuration class for application settings.

    This class follows the Singleton pattern to ensure only one instance
    of configuration exists throughout the application lifecycle.
    """

    _instance: Optional['Config'] = None
    _initialized: bool = False

    # Provider keys that must be present for the configured LLM backend
    REQUIRED_PROVIDER_KEYS = ("OPENAI_API_KEY",)

    def __new__(cls):
        """Singleton pattern: return the same instance if already created."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize configuration (only once due to Singleton pattern)."""
        if self._initialized:
            return

        # ====================================================================
        # API KEYS
        # ====================================================================
        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")

        # ====================================================================
        # PATHS
        # ====================================================================
        # Get the project root directory (parent of agent_router/)
        project_root = Path(__file__).parent.parent.parent

        self.PROJECT_ROOT = project_root
        self.DATA_DIR = project_root / "data"
        self.RESULTS_DIR = project_root / "results"
        self.LOGS_DIR = self.RESULTS_DIR / "logs"

        # Ensure directories exist
        self._ensure_directories()

        # ====================================================================
        # LLM SETTINGS
        # ====================================================================
        self.LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
        self.FALLBACK_LLM_MODEL = os.getenv("FALLBACK_LLM_MODEL", "gpt-4.1-mini")
        self.ROUTING_LLM_MODEL = os.getenv("ROUTING_LLM_MODEL", "gpt-4.1-mini")  # Fast model for intent labels
        self.EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")

        # ====================================================================
        # ORCHESTRATION SETTINGS
        # ====================================================================
        self.AGENT_TIMEOUT_SECONDS = float(os.getenv("AGENT_TIMEOUT_SECONDS", "30"))
        self.AGENT_MAX_RETRIES = int(os.getenv("AGENT_MAX_RETRIES", "2"))
        self.HEALTH_CHECK_TIMEOUT_SECONDS = float(os.getenv("HEALTH_CHECK_TIMEOUT_SECONDS", "5"))
        self.STREAM_BUFFER_SIZE = int(os.getenv("STREAM_BUFFER_SIZE", "32"))

        # ====================================================================
        # RETRIEVAL SETTINGS
        # ====================================================================
        self.SEARCH_THRESHOLD = float(os.getenv("SEARCH_THRESHOLD", "0.3"))
        self.DEFAULT_MAX_RESULTS = int(os.getenv("DEFAULT_MAX_RESULTS", "10"))
        self.PRIMARY_SOURCE = os.getenv("PRIMARY_SOURCE", "openai")
        self.FALLBACK_SOURCES = _split_csv(os.getenv("FALLBACK_SOURCES", "openai,memory"))

        # ====================================================================
        # LOGGING SETTINGS
        # ====================================================================
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FILE = self.LOGS_DIR / "app.log"

        # ====================================================================
        # CHROMADB SETTINGS
        # ====================================================================
        self.CHROMA_PERSIST_DIR = os.getenv("CHROMA_PERSIST_DIR", str(self.DATA_DIR / "chroma"))

        # Mark as initialized
        self._initialized = True

    def _ensure_directories(self):
        """Create necessary directories if they don't exist."""
        directories = [
            self.DATA_DIR,
            self.RESULTS_DIR,
            self.LOGS_DIR,
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def missing_provider_keys(self) -> List[str]:
        """Return the names of required provider keys that are not set."""
        return [key for key in self.REQUIRED_PROVIDER_KEYS if not getattr(self, key, "")]

    def validate(self) -> bool:
        """
        Validate that required configuration is present.

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        missing = self.missing_provider_keys()
        if missing:
            logging.getLogger(__name__).warning(
                "Missing provider keys in environment variables: %s", ", ".join(missing)
            )
            return False
        return True


# Global singleton instance
config = Config()
