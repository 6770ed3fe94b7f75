from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ------------------------------------------------------------------
    # Text completion (Anthropic Messages API)
    # ------------------------------------------------------------------
    anthropic_api_key: Optional[str] = None
    anthropic_base_url: Optional[str] = None
    analysis_model: str = "claude-opus-4-1-20250805"
    analysis_max_tokens: int = 2000
    completion_timeout: float = 120.0  # seconds, applied to the SDK client

    # ------------------------------------------------------------------
    # n8n
    # ------------------------------------------------------------------
    n8n_url: str = "https://n8n.hmd.services"
    n8n_api_key: Optional[str] = None   # X-N8N-API-KEY header
    n8n_timeout: float = 30.0

    # ------------------------------------------------------------------
    # Storage and logging
    # ------------------------------------------------------------------
    data_dir: Path = Path("data")       # planning.db lives here
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
