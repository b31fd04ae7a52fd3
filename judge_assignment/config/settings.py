"""
Engine Settings

Centralized configuration for the assignment engine.
All values are loaded from environment variables (a local .env file is
honoured via python-dotenv).
"""
import os

from dotenv import load_dotenv

load_dotenv()


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


def get_int_env(key: str, default: int) -> int:
    """Get an integer value from environment variable, falling back on bad input."""
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Settings:
    """
    Settings for the assignment engine.

    To add a new setting:
    1. Add it here as a class attribute
    2. Load it from an environment variable
    3. Read it through the `settings` singleton
    """

    # Persistence
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./judge_assignment.db")
    SQL_ECHO: bool = get_bool_env('SQL_ECHO', False)

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Judge-facing assignment list pagination
    JUDGE_ASSIGNMENTS_PAGE_SIZE: int = get_int_env('JUDGE_ASSIGNMENTS_PAGE_SIZE', 10)
    JUDGE_ASSIGNMENTS_MAX_PAGE_SIZE: int = get_int_env('JUDGE_ASSIGNMENTS_MAX_PAGE_SIZE', 100)

    # Feature flags
    FEATURE_AUTO_BALANCE: bool = get_bool_env('FEATURE_AUTO_BALANCE', True)

    @classmethod
    def is_enabled(cls, flag_name: str) -> bool:
        """Check if a feature flag is enabled by name."""
        return bool(getattr(cls, flag_name, False))

    @classmethod
    def get_all_flags(cls) -> dict:
        """Get all feature flags as a dictionary."""
        return {
            key: value
            for key, value in cls.__dict__.items()
            if key.startswith('FEATURE_') and isinstance(value, bool)
        }


# Singleton instance for easy importing
settings = Settings()
