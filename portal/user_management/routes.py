"""
User routes: profile and usage for the signed-in user.
"""
from flask import Blueprint, g, jsonify

from portal.auth.guards import AuthGuard
from .services import UserService


def create_user_routes(user_service: UserService, auth_guard: AuthGuard) -> Blueprint:
    """Create user routes. Every route requires a session."""
    bp = Blueprint('user_management', __name__, url_prefix='/api/user')
    bp.before_request(auth_guard.authenticate)

    @bp.route("/profile", methods=["GET"])
    def profile():
        return jsonify({"data": user_service.get_profile(g.user.id).to_dict()})

    @bp.route("/usage", methods=["GET"])
    def usage():
        return jsonify({"data": user_service.get_usage(g.user.id).to_dict()})

    return bp
