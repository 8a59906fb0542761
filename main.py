# main.py
# Role: Application entry point for the invoices dashboard.
#       Configures logging, creates database tables on startup,
#       mounts static assets, installs the session middleware,
#       and registers all route modules and error pages.

"""
Main FastAPI app for the invoices dashboard.

Here we only:
- create the FastAPI app
- set up logging, sessions and static files
- create DB tables
- include route modules
"""

import logging
from contextlib import asynccontextmanager
from urllib.parse import urlencode

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from config import get_config
from db import init_db
from app.deps import APP_DIR, templates
from app.errors import DatabaseError, LoginRequired
from app.routes_root import router as root_router
from app.routes_auth import router as auth_router
from app.routes_dashboard import router as dashboard_router
from app.routes_invoices import router as invoices_router
from app.routes_customers import router as customers_router

cfg = get_config()

# -------------------------------------------------------------------
# Logging
# -------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, cfg.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("dashboard")


# -------------------------------------------------------------------
# App & DB setup
# -------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables (only if they don't exist yet)
    init_db()
    logger.info("Database ready")
    yield


# FastAPI application instance
app = FastAPI(title="Invoices Dashboard", lifespan=lifespan)

# Signed cookie session (holds the signed-in user id)
app.add_middleware(SessionMiddleware, secret_key=cfg.auth_secret, same_site="lax")

# Serve static files (CSS, avatars) from /static
app.mount("/static", StaticFiles(directory=str(APP_DIR / "static")), name="static")


# -------------------------------------------------------------------
# Error pages
# -------------------------------------------------------------------

@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse(
        url="/login?" + urlencode({"callbackUrl": exc.callback_url}),
        status_code=303,
    )


@app.exception_handler(DatabaseError)
async def database_error_handler(request: Request, exc: DatabaseError):
    # Generic message only, the cause was logged where it happened
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": str(exc)},
        status_code=500,
    )


# -------------------------------------------------------------------
# Include routers
# -------------------------------------------------------------------

# Root / landing routes
app.include_router(root_router)

# Login / logout
app.include_router(auth_router)

# Overview (cards, revenue chart, latest invoices)
app.include_router(dashboard_router)

# Invoices table + create / edit / delete
app.include_router(invoices_router)

# Customers table
app.include_router(customers_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
