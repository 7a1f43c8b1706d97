"""
Session-cookie authentication for protected routes.
"""
from functools import wraps

from flask import g, request

from portal.errors import SessionInvalidError, UnauthorizedError
from .sessions import SessionService


class AuthGuard:
    """Resolves the session cookie to a user and stores both on ``flask.g``."""

    def __init__(self, session_service: SessionService, cookie_name: str = "session_token"):
        self.session_service = session_service
        self.cookie_name = cookie_name

    def get_session_token(self):
        token = request.cookies.get(self.cookie_name)
        if not token:
            return None
        return token.strip() or None

    def authenticate(self) -> None:
        """
        Require a valid session. Usable directly as a ``before_request`` hook.

        Raises:
            UnauthorizedError: no session cookie
            SessionInvalidError: unknown, expired or orphaned session
        """
        if request.method == "OPTIONS":
            return
        token = self.get_session_token()
        if not token:
            raise UnauthorizedError()

        result = self.session_service.validate_session(token)
        if result is None:
            raise SessionInvalidError()

        g.user, g.session = result

    def required(self, view):
        """Decorator form of ``authenticate`` for single routes."""
        @wraps(view)
        def wrapper(*args, **kwargs):
            self.authenticate()
            return view(*args, **kwargs)
        return wrapper
