# app/auth.py
# Role: Credentials sign-in for the dashboard.
#       Password hashing, user lookup, the authorize callback, and the thin
#       cookie-session layer (Starlette SessionMiddleware) built on top of it.

import logging
from typing import Any, Mapping, Optional

from fastapi import Request
from passlib.context import CryptContext
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import User
from app.errors import AuthError, CredentialsSignin, DatabaseError
from app.results import Redirect
from app.schemas import CredentialsIn

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT = "/dashboard"

# PBKDF2 has no 72-byte password limit
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def get_user(db: Session, email: str) -> Optional[User]:
    try:
        return db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        logger.error("Failed to fetch user: %r", e)
        raise DatabaseError("Failed to fetch user.") from None


def authorize(db: Session, credentials: Mapping[str, Any]) -> Optional[User]:
    """
    Credentials callback: the matching user, or None.

    Email must be a valid address and the password at least 6 characters;
    otherwise nobody is looked up.
    """
    try:
        parsed = CredentialsIn.model_validate(
            {"email": credentials.get("email"), "password": credentials.get("password")}
        )
    except ValidationError:
        parsed = None

    if parsed is not None:
        user = get_user(db, parsed.email)
        if user is None:
            return None
        if verify_password(parsed.password, user.password):
            return user

    logger.info("Invalid credentials")
    return None


# -------------------------------------------------------------------
# Session layer
# -------------------------------------------------------------------

def _safe_callback(url: Any) -> str:
    # only same-site paths
    if isinstance(url, str) and url.startswith("/") and not url.startswith("//"):
        return url
    return DEFAULT_REDIRECT


def sign_in(request: Request, db: Session, form: Mapping[str, Any]) -> Redirect:
    """
    Sign the user in with the submitted credentials.

    Raises CredentialsSignin when authorize() rejects them, and
    AuthError("CallbackRouteError") when authorize() itself fails.
    """
    try:
        user = authorize(db, form)
    except DatabaseError as e:
        raise AuthError("CallbackRouteError", str(e)) from e

    if user is None:
        raise CredentialsSignin()

    request.session.clear()
    request.session["user_id"] = user.id
    return Redirect(url=_safe_callback(form.get("callbackUrl")))


def sign_out(request: Request) -> Redirect:
    request.session.clear()
    return Redirect(url="/login")
