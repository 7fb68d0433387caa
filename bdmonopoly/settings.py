"""
Engine runtime settings using pydantic-settings.

Game rule parameters live in `bdmonopoly.config.GameConfig`; these are the
environment-level knobs of a running engine (where data and saves live,
log verbosity, default seed).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bdmonopoly.config import DATA_DIR


class EngineSettings(BaseSettings):
    """
    Configuration for the game engine process.

    Environment variables (prefix: BDMONOPOLY_):
        BDMONOPOLY_DATA_DIR   - Directory with board.json and the deck files
        BDMONOPOLY_SAVE_DIR   - Directory for saved games (default: ./saves)
        BDMONOPOLY_LOG_LEVEL  - Logging level name (default: INFO)
        BDMONOPOLY_LOG_DIR    - Directory for JSONL game logs (default: ./logs)
        BDMONOPOLY_SEED       - Optional default RNG seed
        BDMONOPOLY_LANGUAGE   - en | bn (default: en)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="BDMONOPOLY_",
    )

    data_dir: Path = Field(
        default=DATA_DIR,
        description="Directory holding the board and card data files.",
    )
    save_dir: Path = Field(
        default=Path("saves"),
        description="Directory where saved games are written.",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level name.",
    )
    log_dir: Path = Field(
        default=Path("logs"),
        description="Directory for JSONL game event logs.",
    )
    seed: Optional[int] = Field(
        default=None,
        description="Default RNG seed when none is given on the command line.",
    )
    language: str = Field(
        default="en",
        description="Display language for tile names and card text (en | bn).",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return value

    @field_validator("language")
    @classmethod
    def check_language(cls, value: str) -> str:
        value = value.lower()
        if value not in ("en", "bn"):
            raise ValueError("language must be 'en' or 'bn'")
        return value


@lru_cache
def get_settings() -> EngineSettings:
    """Return cached engine settings."""
    return EngineSettings()
