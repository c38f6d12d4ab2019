"""Environment configuration management."""

import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

DEFAULT_API_URL = "https://api.devassist.dev/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_SYNC_INTERVAL = 30
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# env_logger style filters such as "info" or "devassist=debug" map onto loguru levels
_RUST_LOG_LEVELS = {
    "trace": "DEBUG",
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "error": "ERROR",
}

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class EnvironmentError(Exception):
    """Base exception for environment configuration errors."""

    pass


class ConfigurationError(EnvironmentError):
    """Raised when a required setting is missing or malformed."""


def is_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ["true", "1", "yes"]


def mask_sensitive_value(value: str) -> str:
    """
    Mask a sensitive value for display.

    Args:
        value: The value to mask

    Returns:
        Masked value (first 2 chars + 3 stars)
    """
    if not value or len(value) <= 2:
        return "***"
    return value[:2] + "***"


def _level_from_rust_log(value: str) -> Optional[str]:
    # Only the bare level or the last "module=level" directive is considered
    directive = value.split(",")[-1].strip()
    if "=" in directive:
        directive = directive.split("=", 1)[1]
    return _RUST_LOG_LEVELS.get(directive.strip().lower())


def resolve_log_level(debug: bool = False) -> str:
    """Work out the log level from DEVASSIST_LOG_LEVEL, falling back to RUST_LOG."""
    if debug or is_truthy(os.getenv("DEVASSIST_DEBUG")):
        return "DEBUG"

    level = os.getenv("DEVASSIST_LOG_LEVEL")
    if level:
        level = level.strip().upper()
        if level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid DEVASSIST_LOG_LEVEL: {level}. Valid choices: {', '.join(VALID_LOG_LEVELS)}"
            )
        return level

    rust_log = os.getenv("RUST_LOG")
    if rust_log:
        return _level_from_rust_log(rust_log) or "INFO"
    return "INFO"


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default handler with a stderr sink at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)


def _read_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be greater than 0")
    return value


def _read_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be greater than 0")
    return value


class EnvironmentConfig(BaseModel):
    """Settings read from the process environment and an optional .env file."""

    DEVASSIST_API_KEY: Optional[str] = Field(None, description="DevAssist API key")
    DEVASSIST_API_URL: str = Field(DEFAULT_API_URL, description="Base URL of the DevAssist API")
    DEVASSIST_TIMEOUT: float = Field(DEFAULT_TIMEOUT, description="HTTP timeout in seconds")
    DEVASSIST_SYNC_INTERVAL: int = Field(
        DEFAULT_SYNC_INTERVAL, description="Seconds between synchronization passes"
    )
    DEVASSIST_LOG_LEVEL: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    def require_api_key(self) -> str:
        """Return the API key or raise if it was never set."""
        if not self.DEVASSIST_API_KEY:
            raise ConfigurationError(
                "DEVASSIST_API_KEY must be set (in the environment or a .env file)"
            )
        return self.DEVASSIST_API_KEY

    @property
    def masked_api_key(self) -> str:
        return mask_sensitive_value(self.DEVASSIST_API_KEY or "")

    @classmethod
    def load(cls, env_file: str | Path | None = None, debug: bool = False) -> "EnvironmentConfig":
        """Load configuration from the environment and configure logging.

        Args:
            env_file: Explicit .env file. Falls back to ./.env when it exists.
            debug: Force DEBUG logging regardless of the environment.

        Raises:
            ConfigurationError: If env_file is missing or a value is malformed.
        """
        if env_file is not None:
            env_path = Path(env_file)
            if not env_path.exists():
                raise ConfigurationError(f"Environment file not found: {env_path}")
            load_dotenv(env_path)
        else:
            default_env = Path(".env")
            if default_env.exists():
                load_dotenv(default_env)

        log_level = resolve_log_level(debug)
        configure_logging(log_level)

        config = cls(
            DEVASSIST_API_KEY=os.getenv("DEVASSIST_API_KEY") or None,
            DEVASSIST_API_URL=(os.getenv("DEVASSIST_API_URL") or DEFAULT_API_URL).rstrip("/"),
            DEVASSIST_TIMEOUT=_read_float("DEVASSIST_TIMEOUT", DEFAULT_TIMEOUT),
            DEVASSIST_SYNC_INTERVAL=_read_int("DEVASSIST_SYNC_INTERVAL", DEFAULT_SYNC_INTERVAL),
            DEVASSIST_LOG_LEVEL=log_level,
        )
        logger.debug(
            f"Loaded configuration: api_url={config.DEVASSIST_API_URL} "
            f"api_key={config.masked_api_key} log_level={log_level}"
        )
        return config
