import logging

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # GitHub
    github_token: str = ""

    # LLM
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_model: str = "gpt-3.5-turbo"
    llm_timeout: float = 20.0

    # Database
    database_url: str = "sqlite+aiosqlite:///./libfinder.db"
    database_auto_create: bool = True

    # App
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    cors_origins: list[str] = ["http://localhost:5173"]

    # Search
    search_fan_out: bool = True
    search_per_term_limit: int = 5
    search_legacy_limit: int = 10
    search_result_limit: int = 10
    search_max_terms: int = 5
    readme_excerpt_chars: int = 1500
    upstream_call_timeout: float = 30.0
    search_rate_limit: str = "10/minute"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

if not settings.openai_api_key:
    logger.warning("OPENAI_API_KEY is not set. Term expansion and analysis will be disabled.")
