"""Application settings with environment variable support."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator
from typing import Optional
from pathlib import Path


# Compute base_dir at module level
_BASE_DIR = Path(__file__).parent.parent.parent.resolve()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NEWSFEED_",  # NEWSFEED_MAX_ARTICLES, NEWSFEED_LLM_PROVIDER, etc.
        extra="ignore",
    )

    # Paths - computed from base_dir
    base_dir: Path = _BASE_DIR
    data_dir: Path = _BASE_DIR / "data"
    sources_path: Optional[Path] = None
    articles_path: Optional[Path] = None

    # Article store: JSON file unless a database URL is given
    article_store_url: Optional[str] = None
    max_articles: int = 200

    # Ingestion
    # Per request. Retries and backoff must fit inside source_timeout_seconds:
    # 3 attempts x 15s plus about 3s of backoff stays under 60s.
    fetch_timeout_seconds: int = 15
    fetch_max_retries: int = 3
    source_timeout_seconds: int = 60
    fetch_concurrency: int = 5
    user_agent: str = "NewsfeedBot/1.0"

    # Summarization
    llm_provider: str = "none"  # "none", "gemini", "anthropic", or "openai"
    gemini_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    llm_model: str = "gemini-2.0-flash"
    llm_max_tokens: int = 300
    llm_temperature: float = 0.0
    summary_max_chars: int = 300
    summarize_timeout_seconds: int = 20
    summarize_concurrency: int = 4

    # Scheduling
    fetch_interval_minutes: int = 60  # 0 disables the interval job
    fetch_on_startup: bool = True
    startup_fetch_delay_seconds: int = 1

    # Alerts (Slack-compatible incoming webhook)
    alert_webhook_url: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    @model_validator(mode="after")
    def _default_paths(self) -> "Settings":
        if self.sources_path is None:
            self.sources_path = self.data_dir / "sources.json"
        if self.articles_path is None:
            self.articles_path = self.data_dir / "articles.json"
        return self

    def llm_api_key(self, provider: str = None) -> Optional[str]:
        """API key for `provider` (default: the configured one), if any."""
        return {
            "gemini": self.gemini_api_key,
            "anthropic": self.anthropic_api_key,
            "openai": self.openai_api_key,
        }.get(provider or self.llm_provider)


settings = Settings()
