"""
Application configuration management.

Uses pydantic-settings for type-safe environment variable parsing.
All configuration is centralized here to support dependency injection
and avoid scattering os.getenv() calls throughout the codebase.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from blackjack.rules import TableRules


class Settings(BaseSettings):
    """
    Application settings with validation and type coercion.

    Values are loaded from environment variables or .env file.
    All fields have sensible defaults for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Backend Selection
    # Options: "sqlite", "memory"
    storage_backend: Literal["sqlite", "memory"] = "sqlite"

    # SQLite Configuration
    stand_cache_path: str = "cacheDB/stand_odds.db"
    odds_db_path: str = "odds.db"
    sqlite_echo: bool = False

    # Default table rules (8 decks, S17, DAS, no RSA, 3:2)
    num_decks: int = 8
    dealer_stands_soft_17: bool = True
    double_after_split: bool = True
    ace_resplits: bool = False
    blackjack_pays: float = 1.5
    max_splits: int = 2

    # Logging
    log_level: str = "INFO"

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    debug: bool = True

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite backend."""
        return self.storage_backend == "sqlite"

    @property
    def default_rules(self) -> TableRules:
        """Table rules built from the configured defaults."""
        return TableRules(
            num_decks=self.num_decks,
            dealer_stands_soft_17=self.dealer_stands_soft_17,
            double_after_split=self.double_after_split,
            ace_resplits=self.ace_resplits,
            blackjack_pays=self.blackjack_pays,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings singleton.

    Use this function to get settings instance throughout the application.
    The @lru_cache ensures we only parse environment once.
    """
    return Settings()


# Convenience export for direct import
settings = get_settings()
