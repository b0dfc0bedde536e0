"""
Environment-driven settings, read once at import.

Load env vars from .env if present (dev convenience; in prod the platform
injects them).
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "local")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./codebreaker.db")

RANDOM_ORG_ENABLED = os.getenv("RANDOM_ORG_ENABLED", "0") == "1"
RANDOM_ORG_TIMEOUT = float(os.getenv("RANDOM_ORG_TIMEOUT", "3.0"))

HINT_WORKERS = int(os.getenv("HINT_WORKERS", "2"))
SOLVER_SEED = int(os.getenv("SOLVER_SEED", "0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
