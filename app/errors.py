# app/errors.py
# Role: Exceptions shared by the query layer, the auth adapter and the routes.


class DatabaseError(RuntimeError):
    """
    A query failed. Carries a generic, user-safe message only; the
    underlying driver error is logged and then dropped.
    """


class AuthError(Exception):
    """Sign-in failed. `type` names the failure class."""

    type = "AuthError"

    def __init__(self, type: str | None = None, message: str | None = None):
        if type:
            self.type = type
        super().__init__(message or self.type)


class CredentialsSignin(AuthError):
    """Unknown user or wrong password."""

    type = "CredentialsSignin"


class LoginRequired(Exception):
    """A protected page was requested without a signed-in user."""

    def __init__(self, callback_url: str):
        self.callback_url = callback_url
        super().__init__(callback_url)
