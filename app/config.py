"""Application settings loaded from environment variables.

Groups the configuration surface into small frozen dataclasses so each
component receives only the section it needs (database URLs, background job
cadence, document store credentials, assistant credentials).
"""
from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass
from typing import List

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1/"

# Local development falls back to SQLite files next to the project root
backend_dir = pathlib.Path(__file__).parent.parent
DEFAULT_SOURCE_URL = f"sqlite+aiosqlite:///{backend_dir / 'source.db'}"
DEFAULT_CATALOG_URL = f"sqlite+aiosqlite:///{backend_dir / 'catalog.db'}"


@dataclass(frozen=True)
class BackgroundJobSettings:
    run_interval_minutes: float = 10
    publish_page_size: int = 5000

    @property
    def run_interval_seconds(self) -> float:
        return self.run_interval_minutes * 60


@dataclass(frozen=True)
class VectorStoreSettings:
    api_key: str = ""
    base_url: str = DEFAULT_OPENAI_BASE_URL
    vector_store_id: str = ""


@dataclass(frozen=True)
class AiAnswerSettings:
    api_key: str = ""
    base_url: str = DEFAULT_OPENAI_BASE_URL
    assistant_id: str = ""
    beta_header_value: str = "assistants=v2"


@dataclass(frozen=True)
class Settings:
    source_database_url: str
    catalog_database_url: str
    background_jobs: BackgroundJobSettings
    vector_store: VectorStoreSettings
    ai_answer: AiAnswerSettings
    error_log_dir: str = "errors"

    def missing_required(self) -> List[str]:
        """Names of required values that are still empty."""
        missing = []
        if not self.vector_store.api_key:
            missing.append("VECTOR_STORE_API_KEY")
        if not self.vector_store.vector_store_id:
            missing.append("VECTOR_STORE_ID")
        if not self.ai_answer.api_key:
            missing.append("AI_ANSWER_API_KEY")
        if not self.ai_answer.assistant_id:
            missing.append("AI_ANSWER_ASSISTANT_ID")
        return missing


def load_settings() -> Settings:
    """Read the current environment into a ``Settings`` value."""
    return Settings(
        source_database_url=os.getenv("SOURCE_DATABASE_URL", DEFAULT_SOURCE_URL),
        catalog_database_url=os.getenv(
            "CATALOG_DATABASE_URL", DEFAULT_CATALOG_URL
        ),
        background_jobs=BackgroundJobSettings(
            run_interval_minutes=float(os.getenv("SYNC_INTERVAL_MINUTES", "10")),
            publish_page_size=int(os.getenv("VECTOR_PUBLISH_PAGE_SIZE", "5000")),
        ),
        vector_store=VectorStoreSettings(
            api_key=os.getenv("VECTOR_STORE_API_KEY", ""),
            base_url=os.getenv("VECTOR_STORE_BASE_URL", DEFAULT_OPENAI_BASE_URL),
            vector_store_id=os.getenv("VECTOR_STORE_ID", ""),
        ),
        ai_answer=AiAnswerSettings(
            api_key=os.getenv("AI_ANSWER_API_KEY", ""),
            base_url=os.getenv("AI_ANSWER_BASE_URL", DEFAULT_OPENAI_BASE_URL),
            assistant_id=os.getenv("AI_ANSWER_ASSISTANT_ID", ""),
            beta_header_value=os.getenv("AI_ANSWER_BETA_HEADER", "assistants=v2"),
        ),
        error_log_dir=os.getenv("ERROR_LOG_DIR", "errors"),
    )
