"""
Test cases for the configuration management system.
Tests config loading, merging, environment overrides and typed access.
"""

import os
import json
import shutil
import tempfile
from pathlib import Path
from unittest.mock import patch

from config_manager import (
    AppConfig,
    ConfigManager,
    OAuthConfig,
    PasswordConfig,
    PathsConfig,
    RateLimitConfig,
    SessionConfig,
)
from membership_service.membership import ContentType, MembershipType


class TestConfigManager:
    """Test the ConfigManager class functionality."""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.config_file = self.temp_dir / "config.json"

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def write_config(self, data):
        self.config_file.write_text(json.dumps(data), encoding="utf-8")

    def test_defaults_without_file(self):
        """Missing config file gives the built-in defaults."""
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(self.config_file))

        app = manager.get_app_config()
        assert isinstance(app, AppConfig)
        assert app.port == 3001
        assert app.debug is False
        assert app.frontend_url == "http://localhost:3000"

        session = manager.get_session_config()
        assert isinstance(session, SessionConfig)
        assert session.cookie_name == "session_token"
        assert session.max_age_seconds == 7 * 24 * 60 * 60
        assert session.secure is False

        password = manager.get_password_config()
        assert isinstance(password, PasswordConfig)
        assert password.bcrypt_rounds == 12
        assert password.min_length == 8

        rate_limit = manager.get_rate_limit_config()
        assert isinstance(rate_limit, RateLimitConfig)
        assert (rate_limit.auth_max_requests, rate_limit.window_seconds) == (5, 60)

        assert isinstance(manager.get_paths_config(), PathsConfig)
        assert manager.get_paths_config().data_dir == "data"

    def test_default_membership_limits(self):
        with patch.dict(os.environ, {}, clear=True):
            limits = ConfigManager(str(self.config_file)).get_membership_limits()

        assert limits.ceiling(MembershipType.A, ContentType.ARTICLE).limit == 3
        assert limits.ceiling(MembershipType.B, ContentType.VIDEO).limit == 10
        assert limits.ceiling(MembershipType.C, ContentType.ARTICLE).is_unbounded

    def test_file_values_merge_over_defaults(self):
        self.write_config({
            "app": {"port": 8080, "frontend_url": "https://portal.example.com/"},
            "password": {"bcrypt_rounds": 10},
            "membership": {"A": {"articles": 5, "videos": 2}},
        })
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(self.config_file))

        app = manager.get_app_config()
        assert app.port == 8080
        assert app.host == "0.0.0.0"
        # Trailing slash is dropped so redirects can append paths
        assert app.frontend_url == "https://portal.example.com"
        assert manager.get_password_config().bcrypt_rounds == 10
        assert manager.get_password_config().min_length == 8

        limits = manager.get_membership_limits()
        assert limits.ceiling(MembershipType.A, ContentType.ARTICLE).limit == 5
        assert limits.ceiling(MembershipType.A, ContentType.VIDEO).limit == 2

    def test_invalid_json_falls_back_to_defaults(self):
        self.config_file.write_text("{not json", encoding="utf-8")
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(self.config_file))
        assert manager.get_app_config().port == 3001

    def test_environment_overrides(self):
        self.write_config({"app": {"port": 8080}})
        env = {
            "APP_PORT": "9000",
            "APP_DEBUG": "true",
            "FRONTEND_URL": "https://app.example.com",
            "SESSION_MAX_AGE": "3600",
            "SESSION_COOKIE_SECURE": "true",
            "BCRYPT_ROUNDS": "6",
            "AUTH_RATE_LIMIT": "20",
            "DATA_DIR": "/var/lib/portal",
        }
        with patch.dict(os.environ, env, clear=True):
            manager = ConfigManager(str(self.config_file))

        app = manager.get_app_config()
        assert app.port == 9000
        assert app.debug is True
        assert app.frontend_url == "https://app.example.com"
        assert manager.get_session_config().max_age_seconds == 3600
        assert manager.get_session_config().secure is True
        assert manager.get_password_config().bcrypt_rounds == 6
        assert manager.get_rate_limit_config().auth_max_requests == 20
        assert manager.get_paths_config().data_dir == "/var/lib/portal"

    def test_oauth_credentials_from_environment(self):
        env = {
            "GOOGLE_CLIENT_ID": "gid",
            "GOOGLE_CLIENT_SECRET": "gsecret",
            "FACEBOOK_APP_ID": "fid",
            "FACEBOOK_APP_SECRET": "fsecret",
        }
        with patch.dict(os.environ, env, clear=True):
            oauth = ConfigManager(str(self.config_file)).get_oauth_config()

        assert isinstance(oauth, OAuthConfig)
        assert oauth.google_client_id == "gid"
        assert oauth.facebook_app_secret == "fsecret"
        assert oauth.facebook_api_version == "v18.0"
        assert oauth.google_callback_url.endswith("/api/auth/google/callback")
