"""Centralized configuration for bm25-svector using Pydantic Settings."""

from functools import lru_cache
import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``SVECTOR_*`` environment variables.

    Only defaults live here. The exposed operations always take explicit
    arguments; the CLI falls back to these values when a flag is omitted.
    """

    model_config = SettingsConfigDict(
        env_prefix="SVECTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="info", description="Root logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs instead of plain text")

    # BM25 parameters
    default_b: float = Field(default=0.75, ge=0.0, le=1.0, description="Length normalization for document vectors")
    default_k1: float = Field(default=1.2, ge=0.0, description="Term frequency saturation for document vectors")

    # Rendering and tokenization defaults
    default_style: str = Field(default="pgvecto.rs", description="Sparse vector text dialect")
    default_tokenizer: str = Field(default="whitespace", description="Tokenizer kind used when none is given")

    # HuggingFace hub access
    hf_revision: str = Field(default="main", description="Hub revision used when loading HuggingFace tokenizers")
    hf_token: str | None = Field(default=None, description="Optional HuggingFace access token")

    # Term statistics storage
    term_table: str = Field(default="term_statistics", description="SQLite table holding term statistics")
    sqlite_busy_timeout_ms: int = Field(default=30000, ge=0, description="SQLite busy timeout in milliseconds")

    @field_validator("term_table")
    @classmethod
    def _check_term_table(cls, value: str) -> str:
        if not _IDENTIFIER_RE.match(value):
            raise ValueError(f"term_table must be a plain SQL identifier, got {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().lower() or "info"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
