from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


DEFAULT_EMPLOYEE_SERVER_URL = "http://localhost:8112/api/v1/employee"

# backend/employee_api/config.py -> project root
_project_root = Path(__file__).resolve().parent.parent.parent


def load_env() -> None:
    """
    Load a .env file from the project root or the current working directory.

    Already-set environment variables are never overridden (shell should win).
    """
    for env_path in (_project_root / ".env", Path.cwd() / ".env"):
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)
            return
    load_dotenv(override=False)


def _env_str(name: str, default: str) -> str:
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name, str(default))
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name, str(default))
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class Settings:
    employee_server_url: str = DEFAULT_EMPLOYEE_SERVER_URL
    http_timeout_seconds: float = 10.0

    retry_max_attempts: int = 5
    retry_initial_delay_seconds: float = 2.0
    retry_multiplier: float = 2.0
    retry_max_delay_seconds: float = 30.0

    cache_ttl_seconds: float = 60.0

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @staticmethod
    def from_env() -> "Settings":
        """
        Central configuration.

        Env:
          - EMPLOYEE_SERVER_URL: upstream base URL (no trailing slash needed)
          - EMPLOYEE_HTTP_TIMEOUT_SECONDS
          - EMPLOYEE_RETRY_MAX_ATTEMPTS / EMPLOYEE_RETRY_INITIAL_DELAY_SECONDS /
            EMPLOYEE_RETRY_MULTIPLIER / EMPLOYEE_RETRY_MAX_DELAY_SECONDS
          - EMPLOYEE_CACHE_TTL_SECONDS
          - EMPLOYEE_API_LOG_LEVEL
          - EMPLOYEE_API_HOST / EMPLOYEE_API_PORT (used by `python -m employee_api`)
        """
        load_env()

        base_url = _env_str("EMPLOYEE_SERVER_URL", DEFAULT_EMPLOYEE_SERVER_URL)
        if not base_url:
            raise ValueError("EMPLOYEE_SERVER_URL is not set")

        max_attempts = _env_int("EMPLOYEE_RETRY_MAX_ATTEMPTS", 5)
        if max_attempts < 1:
            raise ValueError("EMPLOYEE_RETRY_MAX_ATTEMPTS must be >= 1")

        return Settings(
            employee_server_url=base_url.rstrip("/"),
            http_timeout_seconds=_env_float("EMPLOYEE_HTTP_TIMEOUT_SECONDS", 10.0),
            retry_max_attempts=max_attempts,
            retry_initial_delay_seconds=_env_float("EMPLOYEE_RETRY_INITIAL_DELAY_SECONDS", 2.0),
            retry_multiplier=_env_float("EMPLOYEE_RETRY_MULTIPLIER", 2.0),
            retry_max_delay_seconds=_env_float("EMPLOYEE_RETRY_MAX_DELAY_SECONDS", 30.0),
            cache_ttl_seconds=_env_float("EMPLOYEE_CACHE_TTL_SECONDS", 60.0),
            log_level=_env_str("EMPLOYEE_API_LOG_LEVEL", "INFO").upper(),
            host=_env_str("EMPLOYEE_API_HOST", "127.0.0.1"),
            port=_env_int("EMPLOYEE_API_PORT", 8000),
        )


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the package logger."""
    logger = logging.getLogger("employee_api")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
