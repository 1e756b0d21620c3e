"""
Configuration module for fintrack.

Contains constants, settings, and configuration values used throughout the application.
"""

import os
from pathlib import Path

# Version
VERSION = "0.1.0"

# Application paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOG_DIR = PROJECT_ROOT / "logs"

# Database configuration
DEFAULT_DB_PATH = DATA_DIR / "fintrack.db"
DB_TIMEOUT = 10.0  # seconds


def get_db_path() -> Path:
    """Database path, overridable with FINTRACK_DB_PATH."""
    override = os.getenv("FINTRACK_DB_PATH")
    return Path(override) if override else DEFAULT_DB_PATH


# Money
CENTS_PER_UNIT = 100
MAX_AMOUNT = 999_999_999_999.99

# Budget status
NEARING_LIMIT_RATIO = 0.10
STATUS_OVER_BUDGET = "Over Budget"
STATUS_NEARING_LIMIT = "Nearing Limit"
STATUS_ON_TRACK = "On Track"

# Summaries and estimates
PREDICTION_MONTHS = 3
TREND_MONTHS = 6

# Export configuration
MAX_EXPORT_ENTRIES = 10000

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "fintrack.log"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# User input limits
MAX_USERNAME_LENGTH = 50
MAX_ACCOUNT_NAME_LENGTH = 100
MAX_CATEGORY_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 255

# Database query limits
DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 500


def ensure_directories():
    """Ensure required directories exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)


def get_log_level():
    """Get the configured log level."""
    import logging

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(os.getenv("LOG_LEVEL", LOG_LEVEL).upper(), logging.INFO)
