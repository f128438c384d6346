"""Configuration loading and validation for vidgrab."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Get the project root directory (parent of src)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load environment variables from .env file in project root
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_RELAY_URL = "https://api.allorigins.win/get"


def load_config() -> dict:
    """Load configuration from environment variables."""

    config = {
        # Response cache
        "cache_enabled": os.getenv("CACHE_ENABLED", "true").lower() == "true",
        "cache_capacity": int(os.getenv("CACHE_CAPACITY", "50")),
        "cache_ttl_ms": int(os.getenv("CACHE_TTL_MS", "300000")),
        # Direct metadata fetch
        "direct_attempts": int(os.getenv("DIRECT_ATTEMPTS", "3")),
        "direct_timeout_seconds": float(os.getenv("DIRECT_TIMEOUT_SECONDS", "15")),
        "send_forwarded_for": os.getenv("SEND_FORWARDED_FOR", "true").lower() == "true",
        "ytdlp_cookies_file": os.getenv("YTDLP_COOKIES_FILE"),  # Optional cookie file path
        # Relay fallback
        "relay_url": os.getenv("RELAY_URL", DEFAULT_RELAY_URL),
        "relay_timeout_seconds": float(os.getenv("RELAY_TIMEOUT_SECONDS", "10")),
        # Files above this size are returned as a URL instead of bytes
        "large_file_threshold": int(os.getenv("LARGE_FILE_THRESHOLD", "100000000")),
        "media_timeout_seconds": float(os.getenv("MEDIA_TIMEOUT_SECONDS", "60")),
        # Server
        "cors_origins": [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ],
        "port": int(os.getenv("PORT", "10000")),
        # Logging
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "log_json": os.getenv("LOG_JSON", "false").lower() == "true",
    }

    return config


def validate_config(config: dict) -> list[str]:
    """Validate configuration and return list of errors."""
    errors = []

    if config.get("cache_capacity", 0) < 1:
        errors.append("CACHE_CAPACITY must be at least 1")

    if config.get("cache_ttl_ms", 0) <= 0:
        errors.append("CACHE_TTL_MS must be positive")

    if config.get("direct_attempts", 0) < 1:
        errors.append("DIRECT_ATTEMPTS must be at least 1")

    for key, name in (
        ("direct_timeout_seconds", "DIRECT_TIMEOUT_SECONDS"),
        ("relay_timeout_seconds", "RELAY_TIMEOUT_SECONDS"),
        ("media_timeout_seconds", "MEDIA_TIMEOUT_SECONDS"),
    ):
        if config.get(key, 0) <= 0:
            errors.append(f"{name} must be positive")

    relay_url = config.get("relay_url") or ""
    if not relay_url.startswith(("http://", "https://")):
        errors.append("RELAY_URL must be an http(s) URL")

    if config.get("large_file_threshold", 0) < 0:
        errors.append("LARGE_FILE_THRESHOLD cannot be negative")

    cookies_file = config.get("ytdlp_cookies_file")
    if cookies_file and not Path(cookies_file).exists():
        errors.append(f"YTDLP_COOKIES_FILE not found: {cookies_file}")

    return errors
