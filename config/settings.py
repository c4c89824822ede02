import logging
import os

from dotenv import load_dotenv

"""
Configuration settings for the Pokedex data layer.

This module loads environment variables, defines constants for the data
layer's operation, and validates the configuration to ensure stability. It
handles the catalog endpoint, transport limits, local storage location,
list defaults and logging options.
"""

load_dotenv()

logger = logging.getLogger("pokedex.config")


def _int_from_env(name: str, default: int) -> int:
    """
    Read an integer setting from the environment.

    Args:
        name: Environment variable name.
        default: Value used when the variable is unset or empty.

    Returns:
        The parsed integer.

    Raises:
        ValueError: If the variable is set but is not a valid integer.
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"❌ {name} must be a valid integer (got {raw!r})!\n\n"
            f"Fix the value in your .env file, e.g.:\n"
            f"  {name}={default}"
        )


def _bool_from_env(name: str, default: bool) -> bool:
    """Read a boolean flag ('1', 'true', 'yes', 'on') from the environment."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# API Configuration
POKEAPI_URL = os.getenv("POKEAPI_URL", "https://pokeapi.co/api/v2").rstrip("/")
USER_AGENT = os.getenv("USER_AGENT", "Pokedex-Data-Layer/1.0")

# API Rate Limiting (for the external catalog, not user rate limiting)
MAX_CONCURRENT_API_REQUESTS = _int_from_env("MAX_CONCURRENT_API_REQUESTS", 6)
API_REQUEST_TIMEOUT = _int_from_env("API_REQUEST_TIMEOUT", 30)  # Timeout in seconds

# Join concurrent cold requests for the same cache key onto one network call.
# Off by default: two back-to-back cold ensure calls each reach the network.
COALESCE_REQUESTS = _bool_from_env("COALESCE_REQUESTS", False)

# Local Storage Configuration
# Format: scheme://path_or_host
# Defaults to a local SQLite file if not specified in environment
STORAGE_CONNECTION_STRING = os.getenv(
    "STORAGE_CONNECTION_STRING", "sqlite:///data/pokedex.db"
)

# List Defaults
POKEMON_LIST_DEFAULT_LIMIT = _int_from_env("POKEMON_LIST_DEFAULT_LIMIT", 20)
MOVE_LIST_DEFAULT_LIMIT = _int_from_env("MOVE_LIST_DEFAULT_LIMIT", 50)
LOCATION_LIST_DEFAULT_LIMIT = _int_from_env("LOCATION_LIST_DEFAULT_LIMIT", 20)

# Filters
FILTERS_DEFAULT_PAGE_SIZE = _int_from_env("FILTERS_DEFAULT_PAGE_SIZE", 20)

# Team Configuration
TEAM_SIZE = 6

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")  # Optional file handler target


def validate_settings():
    """
    Validate all configuration settings to catch errors at startup.

    Raises:
        ValueError: If any configuration value is invalid (e.g., negative
            timeouts, non-http catalog URL, empty list page sizes).
    """
    # Validate API settings
    if not POKEAPI_URL.startswith(("http://", "https://")):
        raise ValueError("POKEAPI_URL must be an http(s) URL")

    if MAX_CONCURRENT_API_REQUESTS < 1:
        raise ValueError("MAX_CONCURRENT_API_REQUESTS must be at least 1")

    if API_REQUEST_TIMEOUT <= 0:
        raise ValueError("API_REQUEST_TIMEOUT must be positive")

    # Validate list defaults
    for name, value in (
        ("POKEMON_LIST_DEFAULT_LIMIT", POKEMON_LIST_DEFAULT_LIMIT),
        ("MOVE_LIST_DEFAULT_LIMIT", MOVE_LIST_DEFAULT_LIMIT),
        ("LOCATION_LIST_DEFAULT_LIMIT", LOCATION_LIST_DEFAULT_LIMIT),
        ("FILTERS_DEFAULT_PAGE_SIZE", FILTERS_DEFAULT_PAGE_SIZE),
    ):
        if value < 1:
            raise ValueError(f"{name} must be at least 1")

    # Validate storage settings
    if "://" not in STORAGE_CONNECTION_STRING:
        raise ValueError("STORAGE_CONNECTION_STRING must look like 'scheme://path'")

    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ValueError(f"LOG_LEVEL {LOG_LEVEL!r} is not a valid logging level")

    logger.info("✅ Configuration validation completed successfully")
