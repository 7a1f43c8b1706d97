"""
Google and Facebook OAuth clients (authorization-code flow) over requests.
"""
import logging
from typing import List, Optional
from urllib.parse import urlencode

import requests

from config_manager import OAuthConfig
from .models import OAuthProfile

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class OAuthError(Exception):
    """Raised when a provider rejects a request or returns incomplete data."""


class GoogleOAuthClient:
    """OAuth 2.0 client for Google sign-in."""

    AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
    SCOPES = [
        "https://www.googleapis.com/auth/userinfo.email",
        "https://www.googleapis.com/auth/userinfo.profile",
    ]

    def __init__(self, config: OAuthConfig, http: Optional[requests.Session] = None,
                 timeout: int = DEFAULT_TIMEOUT):
        self.client_id = config.google_client_id
        self.client_secret = config.google_client_secret
        self.callback_url = config.google_callback_url
        self.http = http or requests.Session()
        self.timeout = timeout

    def missing_settings(self) -> List[str]:
        missing = []
        if not self.client_id:
            missing.append("GOOGLE_CLIENT_ID")
        if not self.client_secret:
            missing.append("GOOGLE_CLIENT_SECRET")
        return missing

    def get_auth_url(self, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{self.AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> str:
        """Trade an authorization code for an access token."""
        response = self.http.post(
            self.TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.callback_url,
                "grant_type": "authorization_code",
            },
            timeout=self.timeout,
        )
        data = response.json()
        if not response.ok or "error" in data:
            raise OAuthError(data.get("error_description") or data.get("error") or "Failed to exchange code for token")
        return data["access_token"]

    def fetch_user_info(self, access_token: str) -> OAuthProfile:
        response = self.http.get(
            self.USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=self.timeout,
        )
        data = response.json()
        if not response.ok or "error" in data:
            raise OAuthError("Failed to fetch user info")
        if not data.get("id") or not data.get("email"):
            raise OAuthError("Missing required user info from Google")
        return OAuthProfile(
            provider_id=str(data["id"]),
            email=data["email"],
            name=data.get("name"),
            picture=data.get("picture"),
        )

    def authenticate(self, code: str) -> OAuthProfile:
        return self.fetch_user_info(self.exchange_code(code))


class FacebookOAuthClient:
    """OAuth client for Facebook Login via the Graph API."""

    SCOPES = ["email", "public_profile"]

    def __init__(self, config: OAuthConfig, http: Optional[requests.Session] = None,
                 timeout: int = DEFAULT_TIMEOUT):
        self.app_id = config.facebook_app_id
        self.app_secret = config.facebook_app_secret
        self.callback_url = config.facebook_callback_url
        self.api_version = config.facebook_api_version
        self.http = http or requests.Session()
        self.timeout = timeout

    @property
    def graph_url(self) -> str:
        return f"https://graph.facebook.com/{self.api_version}"

    def missing_settings(self) -> List[str]:
        missing = []
        if not self.app_id:
            missing.append("FACEBOOK_APP_ID")
        if not self.app_secret:
            missing.append("FACEBOOK_APP_SECRET")
        return missing

    def get_auth_url(self, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.app_id,
            "redirect_uri": self.callback_url,
            "scope": ",".join(self.SCOPES),
            "response_type": "code",
        }
        if state:
            params["state"] = state
        return f"https://www.facebook.com/{self.api_version}/dialog/oauth?{urlencode(params)}"

    @staticmethod
    def _error_message(data: dict, default: str) -> str:
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        return default

    def exchange_code(self, code: str) -> str:
        response = self.http.get(
            f"{self.graph_url}/oauth/access_token",
            params={
                "client_id": self.app_id,
                "client_secret": self.app_secret,
                "redirect_uri": self.callback_url,
                "code": code,
            },
            timeout=self.timeout,
        )
        data = response.json()
        if not response.ok or "error" in data:
            raise OAuthError(self._error_message(data, "Failed to exchange code for token"))
        return data["access_token"]

    def fetch_user_info(self, access_token: str) -> OAuthProfile:
        response = self.http.get(
            f"{self.graph_url}/me",
            params={"fields": "id,email,name,picture", "access_token": access_token},
            timeout=self.timeout,
        )
        data = response.json()
        if not response.ok or "error" in data:
            raise OAuthError(self._error_message(data, "Failed to fetch user info"))
        if not data.get("id") or not data.get("email"):
            raise OAuthError("Missing required user info from Facebook")
        picture = (data.get("picture") or {}).get("data", {}).get("url")
        return OAuthProfile(
            provider_id=str(data["id"]),
            email=data["email"],
            name=data.get("name"),
            picture=picture,
        )

    def authenticate(self, code: str) -> OAuthProfile:
        return self.fetch_user_info(self.exchange_code(code))
