from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gemini (OpenAI-compatible endpoint). An empty key disables the provider.
    GEMINI_API_KEY: str = ""
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    GEMINI_MODEL: str = "gemini-1.5-flash-latest"

    # DeepSeek. An empty key disables the provider.
    DEEPSEEK_API_KEY: str = ""
    DEEPSEEK_BASE_URL: str = "https://api.deepseek.com"
    DEEPSEEK_MODEL: str = "deepseek-chat"

    # Provider routing
    AI_PREFERRED_PROVIDER: Literal["auto", "gemini", "deepseek"] = "auto"
    AI_RANDOM_SEED: int | None = None
    AI_TEMPERATURE: float = 0.3
    AI_MAX_TOKENS: int = 2048
    AI_TIMEOUT_SECONDS: float = 60.0

    # Neo4j graph store. An empty URI disables it.
    NEO4J_URI: str = ""
    NEO4J_USER: str = "neo4j"
    NEO4J_PASSWORD: str = "password"

    # Redis document store and Celery broker. An empty URL keeps everything in memory.
    REDIS_URL: str = ""

    # Pipeline execution
    PIPELINE_BACKEND: Literal["inline", "celery"] = "inline"
    PIPELINE_CONCURRENCY: int = 2
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024
    PROCESSED_TEXT_CHARS: int = 1000

    # Extraction thresholds
    KEYWORD_LIMIT: int = 30
    KEYWORD_MIN_IMPORTANCE: float = 0.3
    ENTITY_MIN_CONFIDENCE: float = 0.7
    GRAPH_MIN_IMPORTANCE: float = 0.3
    DOCUMENT_MAX_NODES: int = 30
    COLLECTION_MAX_NODES: int = 50

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")


def get_settings() -> Settings:
    return Settings()
