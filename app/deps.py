# app/deps.py
# Role: Shared application-level dependencies and globals.
#       Provides the Jinja2 templates loader, the in-memory page cache used by
#       the invoices listing, the database session dependency, and the
#       signed-in user dependencies.

"""
Shared dependencies and globals for the invoices dashboard.
"""

from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Hashable, Optional

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from db import SessionLocal
from models import User
from app.errors import LoginRequired
from app.services.formatting import format_currency, format_date_to_local

APP_DIR = Path(__file__).resolve().parent

# -------------------------------------------------------------------
# Templates
# -------------------------------------------------------------------

# Jinja2 templates loader (used by all HTML-rendering routes)
templates = Jinja2Templates(directory=str(APP_DIR / "templates"))
templates.env.filters["currency"] = format_currency
templates.env.filters["local_date"] = format_date_to_local

# -------------------------------------------------------------------
# In-memory page cache
# -------------------------------------------------------------------

# Process-wide cache of page data, keyed by route path.
# Mutations call revalidate_path() so the next request re-queries.
#
# Structure (least recently used first):
# PAGE_CACHE["/dashboard/invoices"] = OrderedDict({
#     ("query", page): {...page data...},
# })
PAGE_CACHE: Dict[str, "OrderedDict[Hashable, Any]"] = {}

# Entries kept per path; older ones are evicted
MAX_CACHED_PAGES = 32


def cached_page(path: str, key: Hashable, loader: Callable[[], Any]) -> Any:
    """
    Return cached data for (path, key), calling `loader` on a miss.
    Loader errors propagate and nothing is cached.
    """
    entries = PAGE_CACHE.setdefault(path, OrderedDict())
    if key in entries:
        entries.move_to_end(key)
        return entries[key]

    entries[key] = loader()
    while len(entries) > MAX_CACHED_PAGES:
        entries.popitem(last=False)
    return entries[key]


def revalidate_path(path: str) -> None:
    """Drop every cached entry stored under `path`."""
    PAGE_CACHE.pop(path, None)


# -------------------------------------------------------------------
# Database dependency
# -------------------------------------------------------------------

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session and ensures it is closed.

    Typical usage in routes:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# -------------------------------------------------------------------
# Signed-in user
# -------------------------------------------------------------------

def get_current_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """The user stored in the session cookie, or None."""
    user_id = request.session.get("user_id")
    if not user_id:
        return None
    return db.get(User, user_id)


def require_user(request: Request, user: Optional[User] = Depends(get_current_user)) -> User:
    """
    Guard for /dashboard pages: raises LoginRequired (answered with a
    redirect to /login) when nobody is signed in.
    """
    if user is None:
        callback = request.url.path
        if request.url.query:
            callback += "?" + request.url.query
        raise LoginRequired(callback)
    return user
