"""
Flask application factory for the membership content portal.
"""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from config_manager import ConfigManager
from membership_service.document_store import JsonDocumentStore
from portal.auth.factory import create_auth_module
from portal.content.factory import create_content_module
from portal.errors import register_error_handlers
from portal.quota.factory import create_quota_module
from portal.user_management.factory import create_user_management_module
from portal.user_management.repository import UserRepository

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 10 * 1024 * 1024
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]


def create_app(config_manager: ConfigManager, store: Optional[JsonDocumentStore] = None) -> Flask:
    """
    Build the application.

    Args:
        config_manager: Loaded configuration
        store: Document store to use; defaults to one rooted at the configured
            data directory

    The wired services are exposed on ``app.extensions["portal"]`` for
    scripts and tests.
    """
    app_config = config_manager.get_app_config()

    if store is None:
        store = JsonDocumentStore(Path(config_manager.get_paths_config().data_dir))

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_CONTENT_LENGTH
    app.debug = app_config.debug
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    # Only the configured frontend may make credentialed calls
    CORS(
        app,
        origins=[app_config.frontend_url],
        supports_credentials=True,
        methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    user_repository = UserRepository(store)

    quota_module = create_quota_module(
        store=store,
        user_repository=user_repository,
        limits=config_manager.get_membership_limits(),
    )

    auth_module = create_auth_module(
        store=store,
        user_repository=user_repository,
        session_config=config_manager.get_session_config(),
        password_config=config_manager.get_password_config(),
        rate_limit_config=config_manager.get_rate_limit_config(),
        oauth_config=config_manager.get_oauth_config(),
        frontend_url=app_config.frontend_url,
    )

    user_management_module = create_user_management_module(
        user_repository=user_repository,
        quota_manager=quota_module["manager"],
        auth_guard=auth_module["guard"],
    )

    content_module = create_content_module(
        store=store,
        quota_manager=quota_module["manager"],
        auth_guard=auth_module["guard"],
    )

    app.register_blueprint(auth_module["blueprint"])
    app.register_blueprint(content_module["article_blueprint"])
    app.register_blueprint(content_module["video_blueprint"])
    app.register_blueprint(user_management_module["blueprint"])

    register_error_handlers(app)

    @app.get("/api/health")
    def health():
        return jsonify({
            "data": {
                "status": "ok",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        })

    app.extensions["portal"] = {
        "store": store,
        "user_repository": user_repository,
        "quota": quota_module,
        "auth": auth_module,
        "users": user_management_module,
        "content": content_module,
    }

    logger.info(f"Application created (data dir: {store.root_dir}, frontend: {app_config.frontend_url})")
    return app
