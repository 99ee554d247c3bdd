from dataclasses import dataclass, field
from typing import Any

from ligmir.infrastructure.platform_manager import get_parameters
from ligmir.services.character_service import CharacterUrlPatterns, build_url_patterns

# Constants that don't change
ENV_PREFIX = "ligmir_"
SKILL_PREFIX = "/skill"
CHARACTER_PREFIX = "/character"
DEFAULT_SKILL = "Perception"
DEFAULT_CHARACTER_ID = 27570282
DEFAULT_TELEGRAM_BOT_NAME = "@ligmir_bot"
TRANSPORTS = ("telegram", "slack")


@dataclass
class BotSettings:
    """Bot configuration settings loaded from the environment."""

    # Required settings
    browser_url: str
    browser_timeout: float
    redis_url: str

    # Optional settings
    telegram_bot_name: str = DEFAULT_TELEGRAM_BOT_NAME
    default_character_id: int = DEFAULT_CHARACTER_ID
    workers: int = 4
    queue_size: int = 32
    log_level: str = "INFO"

    # Compiled once and shared read-only by every request
    url_patterns: CharacterUrlPatterns = field(default_factory=build_url_patterns)


class Config:
    """Singleton configuration manager for the bot."""

    _instance = None
    _settings = None

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def get_settings(self) -> BotSettings:
        """Get bot settings, loading from the environment if not already cached."""
        if self._settings is None:
            self._settings = self._load_settings()
        return self._settings

    def _load_settings(self) -> BotSettings:
        """Load and validate settings from LIGMIR_* environment variables."""
        required = get_parameters(["browser_url", "browser_timeout", "redis_url"], ENV_PREFIX)
        optional = get_parameters(
            [
                "telegram_bot_name",
                "default_character_id",
                "workers",
                "queue_size",
                "log_level",
            ],
            ENV_PREFIX,
        )

        # Validate required fields
        for name, value in required.items():
            if not value:
                raise ValueError(f"Configuration value is invalid: {_env_name(name)}")

        settings = BotSettings(
            browser_url=required["browser_url"] or "",
            browser_timeout=_parse_number(required, "browser_timeout", float, minimum=0.1),
            redis_url=required["redis_url"] or "",
        )
        if optional["telegram_bot_name"]:
            settings.telegram_bot_name = optional["telegram_bot_name"]
        if optional["default_character_id"]:
            settings.default_character_id = _parse_number(optional, "default_character_id", int)
        if optional["workers"]:
            settings.workers = _parse_number(optional, "workers", int)
        if optional["queue_size"]:
            settings.queue_size = _parse_number(optional, "queue_size", int, minimum=0)
        if optional["log_level"]:
            settings.log_level = optional["log_level"].upper()

        return settings


def _env_name(name: str) -> str:
    return f"{ENV_PREFIX}{name}".upper()


def _parse_number(
    params: dict[str, str | None], name: str, kind: type, minimum: float = 1
) -> Any:
    """Parse a numeric parameter, rejecting garbage and values below `minimum`."""
    try:
        value = kind(params[name])
    except (TypeError, ValueError) as e:
        raise ValueError(f"Configuration value is invalid: {_env_name(name)}") from e
    if value < minimum:
        raise ValueError(f"Configuration value is invalid: {_env_name(name)}")
    return value


# Create singleton instance
config = Config()


# Convenience functions
def get_settings() -> BotSettings:
    """Get bot settings from the singleton config."""
    return config.get_settings()
