"""
Factory for creating the authentication module.
"""
import logging

from config_manager import OAuthConfig, PasswordConfig, RateLimitConfig, SessionConfig
from membership_service.document_store import JsonDocumentStore
from portal.user_management.repository import UserRepository
from .guards import AuthGuard
from .oauth import FacebookOAuthClient, GoogleOAuthClient
from .rate_limit import RateLimiter
from .routes import create_auth_routes
from .services import AuthService
from .sessions import SessionRepository, SessionService

logger = logging.getLogger(__name__)


def create_auth_module(
    store: JsonDocumentStore,
    user_repository: UserRepository,
    session_config: SessionConfig,
    password_config: PasswordConfig,
    rate_limit_config: RateLimitConfig,
    oauth_config: OAuthConfig,
    frontend_url: str,
) -> dict:
    """Create authentication module with services, guard and routes.

    Returns:
        Dictionary containing:
        - service: AuthService
        - session_service: SessionService
        - guard: AuthGuard shared by every protected blueprint
        - rate_limiter: RateLimiter for register/login
        - blueprint: Flask blueprint mounted at /api/auth
    """
    session_service = SessionService(
        session_repository=SessionRepository(store),
        user_repository=user_repository,
        max_age_seconds=session_config.max_age_seconds,
    )

    google_client = GoogleOAuthClient(oauth_config)
    facebook_client = FacebookOAuthClient(oauth_config)
    for client in (google_client, facebook_client):
        missing = client.missing_settings()
        if missing:
            logger.warning(f"OAuth not fully configured, missing: {', '.join(missing)}")

    auth_service = AuthService(
        user_repository=user_repository,
        session_service=session_service,
        google_client=google_client,
        facebook_client=facebook_client,
        password_min_length=password_config.min_length,
        bcrypt_rounds=password_config.bcrypt_rounds,
    )

    guard = AuthGuard(session_service, cookie_name=session_config.cookie_name)
    rate_limiter = RateLimiter(
        max_requests=rate_limit_config.auth_max_requests,
        window_seconds=rate_limit_config.window_seconds,
    )

    blueprint = create_auth_routes(
        auth_service=auth_service,
        auth_guard=guard,
        rate_limiter=rate_limiter,
        session_config=session_config,
        frontend_url=frontend_url,
    )

    return {
        "service": auth_service,
        "session_service": session_service,
        "guard": guard,
        "rate_limiter": rate_limiter,
        "blueprint": blueprint,
    }
