# config.py
# Role: Central configuration for the invoices dashboard.
#       Loads `.env` (local dev) and exposes a frozen AppConfig.
#       This is the ONLY place environment variables are read.

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Project root (where this module lives)
BASE_DIR = Path(__file__).resolve().parent

# Default SQLite location: <project_root>/database/dashboard.db
DEFAULT_DB_PATH = BASE_DIR / "database" / "dashboard.db"
DEFAULT_DATABASE_URL = f"sqlite:///{DEFAULT_DB_PATH}"


@dataclass(frozen=True)
class AppConfig:
    # SQLAlchemy connection URL (SQLite for dev, Postgres in production)
    database_url: str

    # Key used to sign the session cookie
    auth_secret: str

    # Root logging level name, e.g. "INFO" / "DEBUG"
    log_level: str


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name, default)
    if v is None:
        return None
    v = v.strip()
    return v if v else default


def get_config() -> AppConfig:
    """
    Build the app configuration.
    - Loads `.env` from the project root if present
    - Real environment variables win over `.env`
    """
    load_dotenv(BASE_DIR / ".env", override=False)

    return AppConfig(
        database_url=_getenv("DATABASE_URL", DEFAULT_DATABASE_URL) or DEFAULT_DATABASE_URL,
        auth_secret=_getenv("AUTH_SECRET", "CHANGE_ME_SECRET") or "CHANGE_ME_SECRET",
        log_level=(_getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
