"""
Configuration management for the Membership Portal.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass

from membership_service.membership import MembershipLimits


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool
    frontend_url: str


@dataclass
class SessionConfig:
    """Session cookie settings."""
    cookie_name: str
    max_age_seconds: int
    secure: bool


@dataclass
class PasswordConfig:
    """Password hashing and policy settings."""
    bcrypt_rounds: int
    min_length: int


@dataclass
class RateLimitConfig:
    """Rate limiting for the authentication endpoints."""
    window_seconds: int
    auth_max_requests: int


@dataclass
class OAuthConfig:
    """OAuth provider credentials."""
    google_client_id: str
    google_client_secret: str
    google_callback_url: str
    facebook_app_id: str
    facebook_app_secret: str
    facebook_callback_url: str
    facebook_api_version: str


@dataclass
class PathsConfig:
    """Path configuration settings."""
    data_dir: str


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "web_app_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app": {
                "host": "0.0.0.0",
                "port": 3001,
                "debug": False,
                "frontend_url": "http://localhost:3000"
            },
            "session": {
                "cookie_name": "session_token",
                "max_age_seconds": 7 * 24 * 60 * 60,
                "secure": False
            },
            "password": {
                "bcrypt_rounds": 12,
                "min_length": 8
            },
            "rate_limit": {
                "window_seconds": 60,
                "auth_max_requests": 5
            },
            "oauth": {
                "google_client_id": "",
                "google_client_secret": "",
                "google_callback_url": "http://localhost:3001/api/auth/google/callback",
                "facebook_app_id": "",
                "facebook_app_secret": "",
                "facebook_callback_url": "http://localhost:3001/api/auth/facebook/callback",
                "facebook_api_version": "v18.0"
            },
            "membership": {
                "A": {"articles": 3, "videos": 3},
                "B": {"articles": 10, "videos": 10},
                "C": {"articles": None, "videos": None}
            },
            "paths": {
                "data_dir": "data"
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config:
                if isinstance(values, dict):
                    self._config[section].update(values)
                else:
                    self._config[section] = values
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        if os.getenv("FRONTEND_URL"):
            self._config["app"]["frontend_url"] = os.getenv("FRONTEND_URL")

        # Session settings
        if os.getenv("SESSION_MAX_AGE"):
            self._config["session"]["max_age_seconds"] = int(os.getenv("SESSION_MAX_AGE"))

        if os.getenv("SESSION_COOKIE_SECURE"):
            self._config["session"]["secure"] = os.getenv("SESSION_COOKIE_SECURE").lower() == "true"

        # Password and rate limit settings
        if os.getenv("BCRYPT_ROUNDS"):
            self._config["password"]["bcrypt_rounds"] = int(os.getenv("BCRYPT_ROUNDS"))

        if os.getenv("AUTH_RATE_LIMIT"):
            self._config["rate_limit"]["auth_max_requests"] = int(os.getenv("AUTH_RATE_LIMIT"))

        # OAuth credentials
        oauth_env = {
            "GOOGLE_CLIENT_ID": "google_client_id",
            "GOOGLE_CLIENT_SECRET": "google_client_secret",
            "GOOGLE_CALLBACK_URL": "google_callback_url",
            "FACEBOOK_APP_ID": "facebook_app_id",
            "FACEBOOK_APP_SECRET": "facebook_app_secret",
            "FACEBOOK_CALLBACK_URL": "facebook_callback_url",
        }
        for env_name, key in oauth_env.items():
            if os.getenv(env_name):
                self._config["oauth"][key] = os.getenv(env_name)

        # Paths
        if os.getenv("DATA_DIR"):
            self._config["paths"]["data_dir"] = os.getenv("DATA_DIR")

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"],
            frontend_url=app_config["frontend_url"].rstrip("/")
        )

    def get_session_config(self) -> SessionConfig:
        """Get session configuration."""
        session_config = self._config["session"]
        return SessionConfig(
            cookie_name=session_config["cookie_name"],
            max_age_seconds=session_config["max_age_seconds"],
            secure=session_config["secure"]
        )

    def get_password_config(self) -> PasswordConfig:
        """Get password configuration."""
        password_config = self._config["password"]
        return PasswordConfig(
            bcrypt_rounds=password_config["bcrypt_rounds"],
            min_length=password_config["min_length"]
        )

    def get_rate_limit_config(self) -> RateLimitConfig:
        """Get rate limit configuration."""
        rl_config = self._config["rate_limit"]
        return RateLimitConfig(
            window_seconds=rl_config["window_seconds"],
            auth_max_requests=rl_config["auth_max_requests"]
        )

    def get_oauth_config(self) -> OAuthConfig:
        """Get OAuth configuration."""
        oauth = self._config["oauth"]
        return OAuthConfig(
            google_client_id=oauth["google_client_id"],
            google_client_secret=oauth["google_client_secret"],
            google_callback_url=oauth["google_callback_url"],
            facebook_app_id=oauth["facebook_app_id"],
            facebook_app_secret=oauth["facebook_app_secret"],
            facebook_callback_url=oauth["facebook_callback_url"],
            facebook_api_version=oauth["facebook_api_version"]
        )

    def get_membership_limits(self) -> MembershipLimits:
        """Get the tier -> ceiling table."""
        return MembershipLimits.from_dict(self._config["membership"])

    def get_paths_config(self) -> PathsConfig:
        """Get paths configuration."""
        paths_config = self._config["paths"]
        return PathsConfig(data_dir=paths_config["data_dir"])
