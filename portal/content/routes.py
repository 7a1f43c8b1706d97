"""
Article and video routes. All of them require a session.
"""
from flask import Blueprint, g, jsonify, request

from portal.auth.guards import AuthGuard
from .repository import DEFAULT_LIST_LIMIT
from .services import ContentRenderer, ContentService

MAX_LIST_LIMIT = 100


def _get_list_limit() -> int:
    """Read ``?limit=`` and clamp it to 1..MAX_LIST_LIMIT."""
    try:
        limit = int(request.args.get("limit", DEFAULT_LIST_LIMIT))
    except (TypeError, ValueError):
        limit = DEFAULT_LIST_LIMIT
    return max(1, min(limit, MAX_LIST_LIMIT))


def create_article_routes(content_service: ContentService, renderer: ContentRenderer,
                          auth_guard: AuthGuard) -> Blueprint:
    bp = Blueprint('articles', __name__, url_prefix='/api/articles')
    bp.before_request(auth_guard.authenticate)

    @bp.route("", methods=["GET"])
    def list_articles():
        result = content_service.list_articles_for_user(g.user.id, _get_list_limit())
        return jsonify({"data": result.to_dict()})

    @bp.route("/<article_id>", methods=["GET"])
    def get_article(article_id):
        article = content_service.get_article(g.user.id, article_id)
        return jsonify({"data": renderer.render_article(article)})

    return bp


def create_video_routes(content_service: ContentService, auth_guard: AuthGuard) -> Blueprint:
    bp = Blueprint('videos', __name__, url_prefix='/api/videos')
    bp.before_request(auth_guard.authenticate)

    @bp.route("", methods=["GET"])
    def list_videos():
        result = content_service.list_videos_for_user(g.user.id, _get_list_limit())
        return jsonify({"data": result.to_dict()})

    @bp.route("/<video_id>", methods=["GET"])
    def get_video(video_id):
        video = content_service.get_video(g.user.id, video_id)
        return jsonify({"data": video.to_dict()})

    return bp
