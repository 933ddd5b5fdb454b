from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from pathlib import Path
from typing import List

from feedbeep.exceptions import ConfigurationError
from feedbeep.feeds_config import DEFAULT_RSS_FEEDS

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # System
    LOG_LEVEL: str = "INFO"
    LOG_FILE_ENABLED: bool = True
    DATA_DIR: Path = Path("./data")
    DB_FILENAME: str = "articles.db"

    # Feed providers (tried in this order)
    NEWSDATA_API_KEY: str | None = None
    NEWSDATA_BASE_URL: str = "https://newsdata.io/api/1/news"
    GNEWS_API_KEY: str | None = None
    GNEWS_BASE_URL: str = "https://gnews.io/api/v4/search"
    RSS_FEEDS: List[str] = Field(default_factory=lambda: list(DEFAULT_RSS_FEEDS))
    MAX_ARTICLES_PER_FETCH: int = 10
    FETCH_TIMEOUT: float = 15.0

    # LLM
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3.1"
    LLM_MAX_ATTEMPTS: int = 3

    # Scraper fallback
    SCRAPER_ENABLED: bool = True
    SCRAPER_TIMEOUT: float = 10.0
    SCRAPER_MIN_CONTENT_LENGTH: int = 100

    # Rate limits (requests per window)
    AI_RATE_LIMIT_MAX_REQUESTS: int = 10
    AI_RATE_LIMIT_WINDOW_SECONDS: float = 60.0
    HTTP_RATE_LIMIT_MAX_REQUESTS: int = 10
    HTTP_RATE_LIMIT_WINDOW_SECONDS: float = 60.0

    # Quality gate
    ENFORCE_QUALITY_STANDARDS: bool = False

    @property
    def db_path(self) -> Path:
        return self.DATA_DIR / self.DB_FILENAME

    def ensure_dirs(self):
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)


def validate_config(cfg: Settings) -> None:
    """Fail before any run starts if the pipeline cannot possibly work."""
    problems = []
    if not (cfg.NEWSDATA_API_KEY or cfg.GNEWS_API_KEY or cfg.RSS_FEEDS):
        problems.append("no feed provider configured (NEWSDATA_API_KEY, GNEWS_API_KEY or RSS_FEEDS)")
    if not cfg.OLLAMA_BASE_URL.strip():
        problems.append("OLLAMA_BASE_URL is empty")
    if not cfg.OLLAMA_MODEL.strip():
        problems.append("OLLAMA_MODEL is empty")

    if problems:
        raise ConfigurationError("Invalid configuration: " + "; ".join(problems))

settings = Settings()
