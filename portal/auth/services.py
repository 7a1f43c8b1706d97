"""
Account registration, password login and OAuth sign-in.
"""
import logging
import re
from typing import Optional

import requests

from membership_service.membership import DEFAULT_MEMBERSHIP_TYPE
from portal.errors import (
    EmailExistsError,
    InternalError,
    InvalidCredentialsError,
    ValidationError,
)
from portal.user_management.models import AuthProvider, PublicUser, UserRecord
from portal.user_management.repository import UserRepository
from .models import AuthResult, OAuthProfile
from .oauth import FacebookOAuthClient, GoogleOAuthClient, OAuthError
from .passwords import DEFAULT_BCRYPT_ROUNDS, hash_password, verify_password
from .sessions import SessionService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EMAIL_LENGTH = 255
MAX_PASSWORD_LENGTH = 128
MAX_DISPLAY_NAME_LENGTH = 100


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


class AuthService:
    """Authentication flows on top of the user and session stores."""

    def __init__(
        self,
        user_repository: UserRepository,
        session_service: SessionService,
        google_client: Optional[GoogleOAuthClient] = None,
        facebook_client: Optional[FacebookOAuthClient] = None,
        password_min_length: int = 8,
        bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
    ):
        self.user_repository = user_repository
        self.session_service = session_service
        self.google_client = google_client
        self.facebook_client = facebook_client
        self.password_min_length = password_min_length
        self.bcrypt_rounds = bcrypt_rounds

    def validate_registration(self, email, password, display_name) -> dict:
        """Collect per-field problems with a registration request."""
        errors = {}

        if not isinstance(email, str) or not email.strip():
            errors["email"] = "email is required"
        elif len(email) > MAX_EMAIL_LENGTH or not is_valid_email(normalize_email(email)):
            errors["email"] = "Invalid email format"

        if not isinstance(password, str) or not password:
            errors["password"] = "password is required"
        elif len(password) < self.password_min_length:
            errors["password"] = f"Password must be at least {self.password_min_length} characters"
        elif len(password) > MAX_PASSWORD_LENGTH:
            errors["password"] = f"Password must be at most {MAX_PASSWORD_LENGTH} characters"

        if not isinstance(display_name, str) or not display_name.strip():
            errors["displayName"] = "Display name is required"
        elif len(display_name.strip()) > MAX_DISPLAY_NAME_LENGTH:
            errors["displayName"] = f"Display name must be at most {MAX_DISPLAY_NAME_LENGTH} characters"

        return errors

    def register(self, email: str, password: str, display_name: str) -> PublicUser:
        """
        Create an email/password account on the default tier.

        Raises:
            ValidationError: if any field is invalid
            EmailExistsError: if the email is already registered
        """
        errors = self.validate_registration(email, password, display_name)
        if errors:
            raise ValidationError(errors)

        email = normalize_email(email)
        password_hash = hash_password(password, bcrypt_rounds=self.bcrypt_rounds)

        # Existence check and insert must not interleave with another register
        with self.user_repository.store.transaction():
            if self.user_repository.find_by_email(email):
                logger.warning(f"Registration rejected, email already in use: {email}")
                raise EmailExistsError()
            user = self.user_repository.create(
                email=email,
                display_name=display_name.strip(),
                auth_provider=AuthProvider.EMAIL,
                password_hash=password_hash,
                membership_type=DEFAULT_MEMBERSHIP_TYPE,
            )

        return user.to_public()

    def login(
        self,
        email: str,
        password: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> AuthResult:
        """
        Verify credentials and open a session.

        Raises:
            ValidationError: if email or password is missing
            InvalidCredentialsError: on any credential mismatch
        """
        errors = {}
        if not isinstance(email, str) or not email.strip():
            errors["email"] = "email is required"
        elif not is_valid_email(normalize_email(email)):
            errors["email"] = "email must be a valid email address"
        if not isinstance(password, str) or not password:
            errors["password"] = "password is required"
        if errors:
            raise ValidationError(errors)

        user = self.user_repository.find_by_email(normalize_email(email))
        if user is None:
            logger.warning("Login failed: unknown email")
            raise InvalidCredentialsError()

        if user.auth_provider != AuthProvider.EMAIL or not user.password_hash:
            logger.warning(f"Password login attempted on {user.auth_provider.value} account {user.id}")
            raise InvalidCredentialsError(
                "This account uses social login. Please sign in with your social provider."
            )

        if not verify_password(password, user.password_hash):
            logger.warning(f"Login failed: wrong password for user {user.id}")
            raise InvalidCredentialsError()

        return self._open_session(user, user_agent, ip_address)

    def logout(self, session_token: str) -> None:
        self.session_service.invalidate_session(session_token)

    def _open_session(self, user: UserRecord, user_agent, ip_address) -> AuthResult:
        session = self.session_service.create_session(
            user.id, user_agent=user_agent, ip_address=ip_address
        )
        return AuthResult(
            user=user.to_public(),
            session_token=session.token,
            expires_at=session.expires_at,
        )

    # =====================
    # OAuth
    # =====================

    def handle_google_callback(self, code: str, user_agent: Optional[str] = None,
                               ip_address: Optional[str] = None) -> AuthResult:
        """Complete Google sign-in: fetch the profile, resolve the account, open a session."""
        try:
            profile = self.google_client.authenticate(code)
        except (OAuthError, requests.RequestException, KeyError) as e:
            raise InternalError("Failed to authenticate with Google", original_error=e)

        user = self._resolve_oauth_user(profile, AuthProvider.GOOGLE)
        return self._open_session(user, user_agent, ip_address)

    def handle_facebook_callback(self, code: str, user_agent: Optional[str] = None,
                                 ip_address: Optional[str] = None) -> AuthResult:
        """Complete Facebook sign-in: fetch the profile, resolve the account, open a session."""
        try:
            profile = self.facebook_client.authenticate(code)
        except (OAuthError, requests.RequestException, KeyError) as e:
            raise InternalError("Failed to authenticate with Facebook", original_error=e)

        user = self._resolve_oauth_user(profile, AuthProvider.FACEBOOK)
        return self._open_session(user, user_agent, ip_address)

    def _resolve_oauth_user(self, profile: OAuthProfile, provider: AuthProvider) -> UserRecord:
        """
        Find the account for an OAuth identity.

        Order: an account already linked to this provider id, then an account
        with the same email (which gets linked), then a new default-tier account.
        """
        id_field = "google_id" if provider == AuthProvider.GOOGLE else "facebook_id"
        email = normalize_email(profile.email)

        with self.user_repository.store.transaction():
            if provider == AuthProvider.GOOGLE:
                user = self.user_repository.find_by_google_id(profile.provider_id)
            else:
                user = self.user_repository.find_by_facebook_id(profile.provider_id)
            if user is not None:
                return user

            existing = self.user_repository.find_by_email(email)
            if existing is not None:
                logger.info(f"Linking {provider.value} account to existing user {existing.id}")
                return self.user_repository.update(existing.id, **{id_field: profile.provider_id})

            return self.user_repository.create(
                email=email,
                display_name=profile.display_name,
                auth_provider=provider,
                membership_type=DEFAULT_MEMBERSHIP_TYPE,
                **{id_field: profile.provider_id},
            )
