"""
Authentication routes: registration, login, logout and OAuth callbacks.
"""
import logging

from flask import Blueprint, g, jsonify, make_response, redirect, request

from config_manager import SessionConfig
from portal.errors import AppError
from .guards import AuthGuard
from .models import AuthResult
from .rate_limit import RateLimiter
from .services import AuthService

logger = logging.getLogger(__name__)


def create_auth_routes(
    auth_service: AuthService,
    auth_guard: AuthGuard,
    rate_limiter: RateLimiter,
    session_config: SessionConfig,
    frontend_url: str,
) -> Blueprint:
    """Create authentication routes."""
    bp = Blueprint('auth', __name__, url_prefix='/api/auth')

    def set_session_cookie(response, result: AuthResult):
        response.set_cookie(
            session_config.cookie_name,
            result.session_token,
            max_age=session_config.max_age_seconds,
            httponly=True,
            secure=session_config.secure,
            samesite="Strict",
            path="/",
        )
        return response

    def client_info() -> dict:
        return {
            "user_agent": request.headers.get("User-Agent"),
            "ip_address": request.remote_addr,
        }

    @bp.route("/register", methods=["POST"])
    def register():
        rate_limiter.limit_request()
        data = request.get_json(silent=True) or {}
        auth_service.register(
            email=data.get("email"),
            password=data.get("password"),
            display_name=data.get("displayName"),
        )
        return jsonify({"data": {"message": "Registration successful. Please log in."}}), 201

    @bp.route("/login", methods=["POST"])
    def login():
        rate_limiter.limit_request()
        data = request.get_json(silent=True) or {}
        result = auth_service.login(data.get("email"), data.get("password"), **client_info())
        response = make_response(jsonify({"data": result.to_dict()}))
        return set_session_cookie(response, result)

    @bp.route("/logout", methods=["POST"])
    @auth_guard.required
    def logout():
        auth_service.logout(g.session.token)
        response = make_response(jsonify({"data": {"message": "Logged out successfully"}}))
        response.delete_cookie(
            session_config.cookie_name,
            path="/",
            secure=session_config.secure,
            httponly=True,
            samesite="Strict",
        )
        return response

    @bp.route("/me", methods=["GET"])
    @auth_guard.required
    def me():
        return jsonify({"data": g.user.to_public().to_dict()})

    def oauth_callback(provider: str, handler):
        code = request.args.get("code")
        if not code:
            return redirect(f"{frontend_url}/login?error=missing_code")
        try:
            result = handler(code, **client_info())
        except AppError as e:
            logger.error(f"{provider} OAuth error: {e.message}")
            return redirect(f"{frontend_url}/login?error=oauth_failed")
        return set_session_cookie(make_response(redirect(f"{frontend_url}/dashboard")), result)

    @bp.route("/google", methods=["GET"])
    def google_login():
        return redirect(auth_service.google_client.get_auth_url(request.args.get("state")))

    @bp.route("/google/callback", methods=["GET"])
    def google_callback():
        return oauth_callback("Google", auth_service.handle_google_callback)

    @bp.route("/facebook", methods=["GET"])
    def facebook_login():
        return redirect(auth_service.facebook_client.get_auth_url(request.args.get("state")))

    @bp.route("/facebook/callback", methods=["GET"])
    def facebook_callback():
        return oauth_callback("Facebook", auth_service.handle_facebook_callback)

    return bp
