"""
Central settings for the quiz widget service.

ASSUMPTIONS / CHECK:
- Every field can be overridden from the environment (or a `.env` file) with the
  QUIZ_ prefix, e.g. QUIZ_HOST_BACKEND=prisma, QUIZ_DEBOUNCE_DELAY=0.25.
  List/dict fields take JSON.
- The Prisma backend uses DATABASE_URL (see db/client.py).
- Defaults below are what a brand-new quiz shows before anything is saved.
"""
from __future__ import annotations
from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ANSWER_DATA: List[Dict[str, str]] = [
    {"id": "1", "text": "Answer 1"},
    {"id": "2", "text": "Answer 2"},
]
DEFAULT_ANSWER_TYPE = "single"  # 'single' or 'multiple'
DEFAULT_CORRECT_SELECTION: Dict[str, bool] = {"1": True, "2": False}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="QUIZ_", env_file=".env", extra="ignore")

    service_name: str = "quiz-answers-widget"
    version: str = "0.1.0"

    # "memory" (in-process) or "prisma"
    host_backend: str = "memory"

    # Prisma uses DATABASE_URL; see db/client.py
    prisma_log_queries: bool = False

    # Quiet period before a text edit is persisted (seconds)
    debounce_delay: float = 0.5

    log_level: str = "INFO"

    default_answers: List[Dict[str, str]] = Field(default_factory=lambda: [dict(a) for a in DEFAULT_ANSWER_DATA])
    default_type: str = DEFAULT_ANSWER_TYPE
    default_criteria: Dict[str, bool] = Field(default_factory=lambda: dict(DEFAULT_CORRECT_SELECTION))


settings = Settings()
