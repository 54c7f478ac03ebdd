"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SKIRACER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Enables the collision toggle key and the debug overlay
    debug: bool = False

    # Leaderboard backend; empty means scores stay local
    leaderboard_url: str = ""
    leaderboard_timeout: float = Field(default=5.0, gt=0.0)

    # Local mirror of the remote leaderboard
    cache_path: Path = Field(default_factory=lambda: Path.home() / ".skiracer" / "cache.json")

    # Simulator window
    fps: int = 60
    window_scale: float = Field(default=1.0, gt=0.0, le=3.0)
    fullscreen: bool = False
    mute: bool = False

    # Fixed RNG seed for obstacle placement (None = random)
    seed: Optional[int] = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
