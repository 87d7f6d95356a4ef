import os
import logging
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from stop_search.errors import InvalidArgument

DEFAULT_API_BASE = "https://data.police.uk/api"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    api_base: str = DEFAULT_API_BASE
    timeout: float = 30.0
    max_retries: int = 5
    backoff: float = 1.0
    throttle_delay: float = 0.1  # Keep within API limits
    months_back: int = 12
    strict_records: bool = False


def _number(name, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise InvalidArgument(f"{name} must be a number, got {raw!r}")


def _flag(name, default):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env_file=None):
    """Read settings from the environment, after loading a .env file."""
    if env_file is not None:
        load_dotenv(Path(env_file))
    else:
        load_dotenv()

    settings = Settings(
        api_base=os.getenv("POLICE_API_BASE", DEFAULT_API_BASE).rstrip("/"),
        timeout=_number("POLICE_API_TIMEOUT", 30.0, float),
        max_retries=_number("POLICE_API_MAX_RETRIES", 5, int),
        backoff=_number("POLICE_API_BACKOFF", 1.0, float),
        throttle_delay=_number("POLICE_API_THROTTLE", 0.1, float),
        months_back=_number("STOP_SEARCH_MONTHS_BACK", 12, int),
        strict_records=_flag("STOP_SEARCH_STRICT", False),
    )
    if settings.max_retries < 1:
        raise InvalidArgument("POLICE_API_MAX_RETRIES must be at least 1")
    if settings.timeout <= 0:
        raise InvalidArgument("POLICE_API_TIMEOUT must be positive")
    return settings


def setup_logging(log_path=None, level=logging.INFO):
    """Log to the console, and to ``log_path`` as well when given."""
    handlers = [logging.StreamHandler()]
    if log_path is not None:
        handlers.append(logging.FileHandler(log_path))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
