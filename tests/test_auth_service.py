"""
Tests for registration, login, sessions and OAuth account resolution.
"""
import shutil
import tempfile
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from membership_service.document_store import JsonDocumentStore
from membership_service.membership import MembershipType
from portal.auth.models import OAuthProfile
from portal.auth.oauth import OAuthError
from portal.auth.passwords import hash_password, verify_password
from portal.auth.services import AuthService
from portal.auth.sessions import SessionRepository, SessionService, generate_session_token
from portal.errors import (
    EmailExistsError,
    InternalError,
    InvalidCredentialsError,
    ValidationError,
)
from portal.user_management.models import AuthProvider, utc_now
from portal.user_management.repository import UserRepository

TEST_ROUNDS = 4


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("correct horse", bcrypt_rounds=TEST_ROUNDS)
        assert hashed.startswith("$2")
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("secret123", TEST_ROUNDS) != hash_password("secret123", TEST_ROUNDS)

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            hash_password("", TEST_ROUNDS)

    def test_malformed_hash_never_matches(self):
        assert not verify_password("secret123", "not-a-bcrypt-hash")
        assert not verify_password("secret123", None)

    def test_long_passwords_supported(self):
        long_password = "x" * 100
        hashed = hash_password(long_password, TEST_ROUNDS)
        assert verify_password(long_password, hashed)


class AuthTestBase:

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.store = JsonDocumentStore(self.temp_dir / "data")
        self.users = UserRepository(self.store)
        self.sessions = SessionRepository(self.store)
        self.session_service = SessionService(self.sessions, self.users, max_age_seconds=3600)
        self.google = MagicMock()
        self.facebook = MagicMock()
        self.auth = AuthService(
            user_repository=self.users,
            session_service=self.session_service,
            google_client=self.google,
            facebook_client=self.facebook,
            bcrypt_rounds=TEST_ROUNDS,
        )

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)


class TestRegisterAndLogin(AuthTestBase):

    def test_register_creates_basic_email_user(self):
        user = self.auth.register("  Reader@Example.COM ", "password123", "  Reader  ")
        assert user.email == "reader@example.com"
        assert user.display_name == "Reader"
        assert user.membership_type == MembershipType.A
        assert user.auth_provider == AuthProvider.EMAIL

        stored = self.users.find_by_email("reader@example.com")
        assert stored.password_hash != "password123"
        assert verify_password("password123", stored.password_hash)

    def test_register_duplicate_email(self):
        self.auth.register("reader@example.com", "password123", "Reader")
        with pytest.raises(EmailExistsError):
            self.auth.register("READER@example.com", "password456", "Other")
        assert len(self.users.list_all()) == 1

    def test_register_validation(self):
        with pytest.raises(ValidationError) as exc_info:
            self.auth.register("not-an-email", "short", "   ")
        fields = exc_info.value.fields
        assert set(fields) == {"email", "password", "displayName"}
        assert fields["password"] == "Password must be at least 8 characters"
        assert exc_info.value.status_code == 400

    def test_register_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            self.auth.register(None, None, None)
        assert exc_info.value.fields["email"] == "email is required"

    def test_login_success_opens_session(self):
        self.auth.register("reader@example.com", "password123", "Reader")
        result = self.auth.login("Reader@example.com", "password123", user_agent="pytest", ip_address="10.0.0.1")

        assert len(result.session_token) == 64
        assert result.user.email == "reader@example.com"
        assert result.expires_at > utc_now()

        session = self.sessions.find_by_token(result.session_token)
        assert session.user_agent == "pytest"
        assert session.ip_address == "10.0.0.1"

        data = result.to_dict()
        assert "sessionToken" not in data
        assert data["user"]["membershipType"] == "A"

    def test_login_wrong_password(self):
        self.auth.register("reader@example.com", "password123", "Reader")
        with pytest.raises(InvalidCredentialsError):
            self.auth.login("reader@example.com", "password124")

    def test_login_unknown_email(self):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            self.auth.login("ghost@example.com", "password123")
        assert exc_info.value.message == "Invalid email or password"

    def test_login_social_account_without_password(self):
        self.users.create("social@example.com", "Social", AuthProvider.GOOGLE, google_id="g-1")
        with pytest.raises(InvalidCredentialsError) as exc_info:
            self.auth.login("social@example.com", "password123")
        assert "social login" in exc_info.value.message

    def test_login_requires_fields(self):
        with pytest.raises(ValidationError):
            self.auth.login("", "")

    def test_logout_invalidates_session(self):
        self.auth.register("reader@example.com", "password123", "Reader")
        result = self.auth.login("reader@example.com", "password123")
        self.auth.logout(result.session_token)
        assert self.session_service.validate_session(result.session_token) is None
        # Second logout is a no-op
        self.auth.logout(result.session_token)


class TestSessions(AuthTestBase):

    def _user(self):
        return self.users.create("reader@example.com", "Reader", AuthProvider.EMAIL, password_hash="x")

    def test_token_format(self):
        token = generate_session_token()
        assert len(token) == 64
        int(token, 16)

    def test_validate_returns_user_and_session(self):
        user = self._user()
        session = self.session_service.create_session(user.id)
        found_user, found_session = self.session_service.validate_session(session.token)
        assert found_user.id == user.id
        assert found_session.token == session.token

    def test_expired_session_is_invalid(self):
        user = self._user()
        self.sessions.create("expiredtoken", user.id, utc_now() - timedelta(seconds=1))
        assert self.sessions.find_by_token("expiredtoken") is None
        assert self.session_service.validate_session("expiredtoken") is None

    def test_orphaned_session_is_deleted(self):
        user = self._user()
        session = self.session_service.create_session(user.id)
        self.store.delete("users", user.id)
        assert self.session_service.validate_session(session.token) is None
        assert self.store.get("sessions", session.token) is None

    def test_unknown_or_malformed_token(self):
        assert self.session_service.validate_session("nope") is None
        assert self.session_service.validate_session("../escape") is None
        assert self.session_service.validate_session("") is None

    def test_refresh_session(self):
        user = self._user()
        old = self.session_service.create_session(user.id)
        new = self.session_service.refresh_session(old.token)
        assert new.token != old.token
        assert self.session_service.validate_session(old.token) is None
        assert self.session_service.validate_session(new.token) is not None
        assert self.session_service.refresh_session("unknown") is None

    def test_delete_expired(self):
        user = self._user()
        self.sessions.create("old1", user.id, utc_now() - timedelta(days=1))
        self.sessions.create("old2", user.id, utc_now() - timedelta(days=2))
        live = self.session_service.create_session(user.id)
        assert self.sessions.delete_expired() == 2
        assert self.sessions.find_by_token(live.token) is not None

    def test_delete_user_sessions(self):
        user = self._user()
        other = self.users.create("other@example.com", "Other", AuthProvider.EMAIL, password_hash="x")
        self.session_service.create_session(user.id)
        self.session_service.create_session(user.id)
        kept = self.session_service.create_session(other.id)
        assert self.sessions.delete_user_sessions(user.id) == 2
        assert self.sessions.find_by_token(kept.token) is not None


class TestOAuthSignIn(AuthTestBase):

    def test_new_google_user_created(self):
        self.google.authenticate.return_value = OAuthProfile(
            provider_id="g-123", email="New.User@Gmail.com", name="New User"
        )
        result = self.auth.handle_google_callback("code")

        assert result.user.email == "new.user@gmail.com"
        assert result.user.display_name == "New User"
        assert result.user.auth_provider == AuthProvider.GOOGLE
        assert result.user.membership_type == MembershipType.A
        assert self.users.find_by_google_id("g-123").id == result.user.id
        self.google.authenticate.assert_called_once_with("code")

    def test_returning_google_user_found_by_id(self):
        existing = self.users.create("g@example.com", "G", AuthProvider.GOOGLE, google_id="g-1")
        self.google.authenticate.return_value = OAuthProfile(provider_id="g-1", email="changed@example.com")
        result = self.auth.handle_google_callback("code")
        assert result.user.id == existing.id
        assert len(self.users.list_all()) == 1

    def test_google_links_existing_email_account(self):
        self.auth.register("reader@example.com", "password123", "Reader")
        self.google.authenticate.return_value = OAuthProfile(provider_id="g-9", email="READER@example.com")
        result = self.auth.handle_google_callback("code")

        stored = self.users.find_by_email("reader@example.com")
        assert result.user.id == stored.id
        assert stored.google_id == "g-9"
        # Linking keeps the original provider and password
        assert stored.auth_provider == AuthProvider.EMAIL
        assert self.auth.login("reader@example.com", "password123").user.id == stored.id

    def test_facebook_user_without_name_uses_email_prefix(self):
        self.facebook.authenticate.return_value = OAuthProfile(provider_id="fb-1", email="fan@example.com")
        result = self.auth.handle_facebook_callback("code")
        assert result.user.display_name == "fan"
        assert result.user.auth_provider == AuthProvider.FACEBOOK
        assert self.users.find_by_facebook_id("fb-1") is not None

    @pytest.mark.parametrize("error", [OAuthError("denied"), requests.ConnectionError("down")])
    def test_provider_failure_becomes_internal_error(self, error):
        self.google.authenticate.side_effect = error
        with pytest.raises(InternalError) as exc_info:
            self.auth.handle_google_callback("code")
        assert exc_info.value.message == "Failed to authenticate with Google"
        assert exc_info.value.original_error is error
        assert self.users.list_all() == []
