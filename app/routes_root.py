# routes_root.py
"""
Root / landing endpoint.
"""

from fastapi import APIRouter
from fastapi.responses import RedirectResponse

router = APIRouter()


@router.get("/")
def read_root():
    """
    Landing page is the dashboard (which sends anonymous visitors to /login).
    """
    return RedirectResponse(url="/dashboard", status_code=302)
