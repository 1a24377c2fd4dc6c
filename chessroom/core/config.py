"""Centralized configuration.

Settings are read from CHESSROOM_* environment variables (or a .env.chessroom file).
Every field has a default, so a host can embed the engine without any setup.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHESSROOM_",
        env_file=".env.chessroom",
        env_file_encoding="utf-8",
    )

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    # Rendering of the board distribution
    empty_square_symbol: str = Field(default=".", min_length=1, max_length=1)

    # In-memory game registry. None means unbounded
    max_games: Optional[int] = Field(default=None, ge=1)
