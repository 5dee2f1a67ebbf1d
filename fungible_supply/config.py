"""
Configuration module for the fungible supply tooling.

Centralizes configuration with environment variable support.
"""

import os

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("FUNGIBLE_SUPPLY_ENV", "dev")  # dev|stage|prod

# Logging
LOG_LEVEL = os.getenv("FUNGIBLE_SUPPLY_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("FUNGIBLE_SUPPLY_LOG_JSON", "true").lower() in ("1", "true", "yes")
LOG_FILE = os.getenv("FUNGIBLE_SUPPLY_LOG_FILE", "") or None

# Report signing
SIGNING_KEY_PATH = os.getenv("FUNGIBLE_SUPPLY_SIGNING_KEY_PATH", "secrets/report_signing_key.json")
KEY_ID = os.getenv("FUNGIBLE_SUPPLY_KEY_ID", "kid:supply-report-001")


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("FUNGIBLE_SUPPLY_DEBUG", "").lower() in ("1", "true", "yes")


def effective_log_level() -> str:
    """Debug mode overrides the configured level outside of production."""
    if is_debug() and not is_production():
        return "DEBUG"
    return LOG_LEVEL.upper()
