"""
Environment configuration module.

Loads a local .env file (if present) and exposes the settings read from the
environment as module-level constants. Nothing here is mandatory: without an
API key the client falls back to the key-free endpoint.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def get_env_bool(key: str, default: bool) -> bool:
    """Read a boolean flag from the environment ("true"/"false")."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Credentials
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_API_KEY_ORIGIN = os.getenv("GEMINI_API_KEY_ORIGIN", "default")

# Model and network
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-pro")
GEMINI_PROXY = os.getenv("GEMINI_PROXY", "")
GEMINI_FREE_MODE = get_env_bool("GEMINI_FREE_MODE", True)
REQUEST_TIMEOUT = float(os.getenv("GEMINI_REQUEST_TIMEOUT", "600"))

# Logging
APP_LOG_FILE = os.getenv("APP_LOG_FILE", "")
APP_LOG_LEVEL = os.getenv("APP_LOG_LEVEL", "WARNING")
