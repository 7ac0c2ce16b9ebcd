# src/wordwise/config.py
"""
Settings from the environment (WORDWISE_*) and .env.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from wordwise.core.documents import DEFAULT_CHUNK_SIZE
from wordwise.core.markup import DEFAULT_MAX_TEXT_SIZE


class Settings(BaseSettings):
    """
    Attributes:
        data_dir: Directory holding wordwise-dict.<lang>.csv and lemmatization-<lang>.csv.
        language: Default lexicon language.
        hint_level: Default minimum difficulty of annotated terms.
        detail: Default definition detail (1 short, 2 long).
        show_phoneme: Prefix glosses with the pronunciation by default.
        formatter: Default gloss formatter name.
        redis_host / redis_port / redis_db: Job store connection.
        api_url: Base URL the CLI uses to reach the API server.
        chunk_size: Bytes read per step when streaming a document.
        max_text_size: Longest text run kept in memory before it is split.
        log_level: Root log level.
    """

    data_dir: Path = Field(Path("resources"), description="Lexicon data directory")
    language: str = Field("en", description="Default lexicon language")
    hint_level: int = Field(1, description="Default minimum difficulty")
    detail: int = Field(1, ge=1, le=2, description="Default definition detail")
    show_phoneme: bool = Field(False, description="Include pronunciation")
    formatter: str = Field("ruby", description="Default gloss formatter")

    redis_host: str = Field("localhost", description="Redis host")
    redis_port: int = Field(6379, description="Redis port")
    redis_db: int = Field(0, description="Redis database")

    api_url: str = Field("http://localhost:8000/api", description="API base URL for the CLI")

    chunk_size: int = Field(DEFAULT_CHUNK_SIZE, gt=0, description="Streaming read size")
    max_text_size: int = Field(DEFAULT_MAX_TEXT_SIZE, gt=0, description="Largest buffered text run")

    log_level: str = Field("INFO", description="Log level")

    model_config = SettingsConfigDict(
        env_prefix="WORDWISE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Returns a cached Settings instance."""
    return Settings()
