"""
Runner script for fintrack.

Loads configuration, sets up logging and initializes the database.
Optionally provisions default accounts and categories for a user.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from fintrack.config import (
    LOG_DIR,
    LOG_FILE,
    LOG_FORMAT,
    ensure_directories,
    get_log_level,
)
from fintrack.db import FinanceRepository
from fintrack.errors import FinanceError
from fintrack.services import ProvisioningService

logger = logging.getLogger(__name__)


def configure_logging(log_file: Optional[Path] = None):
    """Log to a file and stdout at the configured level."""
    logging.basicConfig(
        level=get_log_level(),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_file or LOG_DIR / LOG_FILE),
            logging.StreamHandler(sys.stdout),
        ],
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Initialize the database schema, optionally seeding a user's defaults."""
    parser = argparse.ArgumentParser(description="Initialize the fintrack database")
    parser.add_argument("--db", type=Path, help="Path to the SQLite database file")
    parser.add_argument(
        "--user",
        help="Username to provision with default accounts and categories",
    )
    args = parser.parse_args(argv)

    # Environment first so FINTRACK_DB_PATH and LOG_LEVEL apply
    env_path = Path(__file__).parent.parent / ".env"
    env_loaded = load_dotenv(env_path)
    ensure_directories()
    configure_logging()
    if env_loaded:
        logger.info(f"Loaded environment from {env_path}")

    try:
        repository = FinanceRepository(args.db)
        print(f"Database ready at {repository.db_path}")

        if args.user:
            user = repository.users.get_user_by_username(args.user)
            if user is None:
                logger.error(f"User '{args.user}' not found")
                print(f"Error: user '{args.user}' not found.")
                return 1
            inserted = ProvisioningService(repository).ensure_defaults(user.id)
            print(
                f"Provisioned {inserted['accounts']} accounts and "
                f"{inserted['categories']} categories for '{user.username}'"
            )
    except FinanceError as e:
        logger.error(f"Initialization failed: {e}", exc_info=True)
        print(f"\nError: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
