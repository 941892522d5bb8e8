"""
Application settings read from the environment (and ``.env``).

Variables:
- MONGODB_URI / MONGODB_DATABASE: persistence
- GEMINI_API_KEY: LLM sentiment (absent = keyword analyzer)
- WEATHER_API_KEY: OpenWeatherMap (absent = Unknown weather)
- TODAY_MOODS_PER_USER: per-user cap on today's moods (0 = no cap)
- AUTO_REGISTER_USERS: register unknown emails on first post
- LOG_DIR: log file directory
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if parsed < 0:
        raise ValueError(f"{name} must be >= 0, got {parsed}")
    return parsed


@dataclass(frozen=True)
class Settings:
    """Resolved runtime configuration."""
    mongodb_uri: Optional[str] = None
    mongodb_database: str = "geomood"
    gemini_api_key: Optional[str] = None
    weather_api_key: Optional[str] = None
    today_moods_per_user: int = 1
    auto_register_users: bool = False
    log_dir: str = "logs"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        """
        Loads ``.env`` (without overriding the real environment) then reads
        the variables.

        Raises:
            ValueError: If a numeric variable is malformed.
        """
        load_dotenv(dotenv_path=dotenv_path)
        return cls(
            mongodb_uri=os.environ.get("MONGODB_URI") or None,
            mongodb_database=os.environ.get("MONGODB_DATABASE") or "geomood",
            gemini_api_key=os.environ.get("GEMINI_API_KEY") or None,
            weather_api_key=os.environ.get("WEATHER_API_KEY") or None,
            today_moods_per_user=_env_int("TODAY_MOODS_PER_USER", 1),
            auto_register_users=_env_bool("AUTO_REGISTER_USERS"),
            log_dir=os.environ.get("LOG_DIR") or "logs",
        )
