# app/routes_auth.py
"""
Login / logout pages.
"""

from typing import Optional

from fastapi import APIRouter, Request, Depends, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from models import User
from app.auth import DEFAULT_REDIRECT, sign_out
from app.deps import get_current_user, get_db, templates
from app.results import Redirect
from app.services.actions import authenticate

router = APIRouter()


@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    callbackUrl: str = Query(DEFAULT_REDIRECT),
    user: Optional[User] = Depends(get_current_user),
):
    # Already signed in -> straight to the dashboard
    if user is not None:
        return RedirectResponse(url=DEFAULT_REDIRECT, status_code=303)

    return templates.TemplateResponse(
        request,
        "login.html",
        {"callback_url": callbackUrl, "error": None},
    )


@router.post("/login")
async def login_submit(request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    result = authenticate(request, db, form)

    if isinstance(result, Redirect):
        return RedirectResponse(url=result.url, status_code=303)

    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "callback_url": form.get("callbackUrl") or DEFAULT_REDIRECT,
            "email": form.get("email") or "",
            "error": result,
        },
        status_code=401,
    )


@router.post("/logout")
def logout(request: Request):
    result = sign_out(request)
    return RedirectResponse(url=result.url, status_code=303)
