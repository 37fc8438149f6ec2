"""
Environment configuration loader with defaults.
Loads .env file and provides typed access to configuration values.
"""

import os
from typing import Optional
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def get_env(key: str, default: Optional[str] = None) -> str:
    """Get environment variable with optional default"""
    value = os.getenv(key, default)
    if value is None:
        raise ValueError(f"Environment variable {key} is required but not set")
    return value


def get_env_optional(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get optional environment variable"""
    return os.getenv(key, default)


def get_env_int(key: str, default: int) -> int:
    """Get integer environment variable"""
    raw = get_env(key, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be an integer, got {raw!r}")


# Fine policy (decimal strings, validated when the policy is built)
FINE_RATE_PER_DAY = get_env("FINE_RATE_PER_DAY", "0.50")
FINE_MAX = get_env("FINE_MAX", "25.00")

# Circulation
DEFAULT_BORROW_DAYS = get_env_int("DEFAULT_BORROW_DAYS", 14)
CATALOG_NAME = get_env("CATALOG_NAME", "City Library")

# Logging
LOG_LEVEL = get_env("LOG_LEVEL", "INFO")
LOG_PRETTY = get_env("LOG_PRETTY", "false").lower() in ("1", "true", "yes")

# Replay tool
REQUESTS_FILE = get_env_optional("REQUESTS_FILE", "data/sample_requests.txt")
