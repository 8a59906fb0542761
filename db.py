# db.py
# Role: Database bootstrap for the invoices dashboard.
#       Defines the SQLAlchemy engine, session factory, and declarative Base.
#       Also ensures the on-disk SQLite directory exists when the default URL is used.

"""
Database setup for the invoices dashboard.

- Connection URL comes from config (DATABASE_URL)
- Default: SQLite database at <project_root>/database/dashboard.db
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import DEFAULT_DATABASE_URL, DEFAULT_DB_PATH, get_config

cfg = get_config()

# Folder for the default SQLite DB (created on startup if missing)
if cfg.database_url == DEFAULT_DATABASE_URL:
    DEFAULT_DB_PATH.parent.mkdir(parents=True, exist_ok=True)


def make_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    For SQLite we need check_same_thread=False: FastAPI serves sync routes from
    a thread pool and the card queries run on worker threads.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


engine = make_engine(cfg.database_url)

# Standard session factory used via dependency injection (see app/deps.py:get_db)
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Declarative base class for ORM models
Base = declarative_base()


def init_db(bind: Engine = engine) -> None:
    """Create tables that don't exist yet. No migrations."""
    # models must be imported so their tables are registered on Base.metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=bind)
