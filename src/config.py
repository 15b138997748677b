from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Tables touched by the processing job
    meetings_table: str = "meetings"
    participants_table: str = "users"
    agents_table: str = "agents"
    job_steps_table: str = "job_steps"

    # Summarization
    summary_provider: str = "anthropic"  # "anthropic" or "openai"
    llm_model: str = "claude-sonnet-4-20250514"
    openai_summary_model: str = "gpt-4o"
    summary_max_tokens: int = 4096

    # Job behaviour
    transcript_fetch_timeout: float = 30.0
    commit_on_early_failure: bool = True

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
