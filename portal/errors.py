"""
Application errors and their JSON rendering.

Every expected failure is an ``AppError`` subclass carrying a machine-readable
code, a user-facing message and an HTTP status. The Flask handlers registered
by ``register_error_handlers`` turn them into ``{"error": {...}}`` bodies.
"""

import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


ERROR_MESSAGES = {
    "VALIDATION_ERROR": "Validation failed",
    "UNAUTHORIZED": "Authentication required",
    "INVALID_CREDENTIALS": "Invalid email or password",
    "SESSION_INVALID": "Invalid session. Please log in again.",
    "FORBIDDEN": "You do not have permission to access this resource",
    "QUOTA_EXCEEDED": "You have reached your content limit. Please upgrade your membership.",
    "NOT_FOUND": "The requested resource was not found",
    "USER_NOT_FOUND": "User not found",
    "ARTICLE_NOT_FOUND": "Article not found",
    "VIDEO_NOT_FOUND": "Video not found",
    "EMAIL_EXISTS": "An account with this email already exists",
    "DUPLICATE_ENTRY": "This entry already exists",
    "RATE_LIMITED": "Too many requests. Please try again later.",
    "INTERNAL_ERROR": "An unexpected error occurred. Please try again.",
}


class AppError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500
    is_operational = True

    def __init__(
        self,
        code: str,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, ERROR_MESSAGES["INTERNAL_ERROR"])
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert to the JSON error body."""
        error = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class ValidationError(AppError):
    """Invalid input, with per-field messages."""

    status_code = 400

    def __init__(self, fields: Dict[str, str], message: Optional[str] = None):
        super().__init__("VALIDATION_ERROR", message, details={"fields": fields})
        self.fields = fields

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": self.message, "fields": self.fields}}


class UnauthorizedError(AppError):
    status_code = 401

    def __init__(self, code: str = "UNAUTHORIZED", message: Optional[str] = None):
        super().__init__(code, message)


class InvalidCredentialsError(UnauthorizedError):
    def __init__(self, message: Optional[str] = None):
        super().__init__("INVALID_CREDENTIALS", message)


class SessionInvalidError(UnauthorizedError):
    def __init__(self, message: Optional[str] = None):
        super().__init__("SESSION_INVALID", message)


class QuotaExceededError(AppError):
    """The user's tier ceiling for this content type is used up."""

    status_code = 403

    def __init__(
        self,
        current_usage: int,
        limit: Optional[int],
        membership_type: str,
        message: Optional[str] = None,
    ):
        super().__init__(
            "QUOTA_EXCEEDED",
            message,
            details={
                "currentUsage": current_usage,
                "limit": limit,
                "membershipType": membership_type,
            },
        )
        self.current_usage = current_usage
        self.limit = limit
        self.membership_type = membership_type


class NotFoundError(AppError):
    status_code = 404

    def __init__(
        self,
        resource: Optional[str] = None,
        code: str = "NOT_FOUND",
        message: Optional[str] = None,
    ):
        if not message and resource and code == "NOT_FOUND":
            message = f"{resource} not found"
        super().__init__(code, message, details={"resource": resource} if resource else None)
        self.resource = resource


class UserNotFoundError(NotFoundError):
    def __init__(self, message: Optional[str] = None):
        super().__init__("User", "USER_NOT_FOUND", message)


class ArticleNotFoundError(NotFoundError):
    def __init__(self, message: Optional[str] = None):
        super().__init__("Article", "ARTICLE_NOT_FOUND", message)


class VideoNotFoundError(NotFoundError):
    def __init__(self, message: Optional[str] = None):
        super().__init__("Video", "VIDEO_NOT_FOUND", message)


class ConflictError(AppError):
    status_code = 409

    def __init__(self, code: str = "DUPLICATE_ENTRY", message: Optional[str] = None):
        super().__init__(code, message)


class EmailExistsError(ConflictError):
    def __init__(self, message: Optional[str] = None):
        super().__init__("EMAIL_EXISTS", message)


class RateLimitedError(AppError):
    status_code = 429

    def __init__(self, message: Optional[str] = None, retry_after: Optional[int] = None):
        super().__init__("RATE_LIMITED", message)
        self.retry_after = retry_after


class InternalError(AppError):
    """Unexpected failure wrapped with context; not operational."""

    status_code = 500
    is_operational = False

    def __init__(self, message: Optional[str] = None, original_error: Optional[BaseException] = None):
        super().__init__(
            "INTERNAL_ERROR",
            message,
            details={"originalMessage": str(original_error)} if original_error else None,
        )
        self.original_error = original_error


def register_error_handlers(app: Flask) -> None:
    """Install JSON error handlers on the Flask app."""

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        if error.is_operational:
            logger.info(f"{request.method} {request.path} -> {error.status_code} {error.code}")
        else:
            logger.error(f"{request.method} {request.path} -> {error.status_code} {error.code}: {error.message}")
        body = error.to_dict()
        if not error.is_operational and not app.debug:
            body["error"].pop("details", None)
        response = jsonify(body)
        response.status_code = error.status_code
        if isinstance(error, RateLimitedError) and error.retry_after:
            response.headers["Retry-After"] = str(error.retry_after)
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        if error.code == 404:
            body = {"error": {"code": "NOT_FOUND", "message": f"Cannot {request.method} {request.path}"}}
        else:
            body = {"error": {"code": error.name.upper().replace(" ", "_"), "message": error.description}}
        return jsonify(body), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        message = str(error) if app.debug and str(error) else "An unexpected error occurred"
        return jsonify({"error": {"code": "INTERNAL_ERROR", "message": message}}), 500
