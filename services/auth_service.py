"""
Admin session handling on top of Supabase Auth.

Passwords are checked by Supabase; this service only exchanges them for
an access token and validates that token on later requests.
"""

from typing import Callable, Optional
import structlog

from config import get_admin_client, get_auth_client, get_supabase_client, settings
from models.auth import AdminSession, LoginRequest
from exceptions import AuthenticationError

logger = structlog.get_logger(__name__)


class AuthService:
    """
    Sign-in, token validation and sign-out for admins.
    """

    def __init__(
        self,
        client=None,
        auth_client_factory: Optional[Callable] = None,
        admin_client_factory: Optional[Callable] = None
    ):
        self.db = client or get_supabase_client()
        self.auth_client_factory = auth_client_factory or get_auth_client
        self.admin_client_factory = admin_client_factory or get_admin_client

    def sign_in(self, credentials: LoginRequest) -> AdminSession:
        """
        Exchange email and password for an admin session.

        Raises:
            AuthenticationError: If Supabase rejects the credentials
        """
        logger.info("admin_sign_in_attempt", email=credentials.email)

        try:
            response = self.auth_client_factory().auth.sign_in_with_password({
                "email": credentials.email,
                "password": credentials.password,
            })
        except Exception as e:
            logger.warning("admin_sign_in_failed", email=credentials.email, error=str(e))
            raise AuthenticationError(
                message="Invalid email or password",
                code="INVALID_CREDENTIALS",
                login_path=settings.login_path
            )

        if response.session is None or response.user is None:
            logger.warning("admin_sign_in_failed", email=credentials.email, error="no_session")
            raise AuthenticationError(
                message="Invalid email or password",
                code="INVALID_CREDENTIALS",
                login_path=settings.login_path
            )

        logger.info("admin_signed_in", user_id=response.user.id)

        return AdminSession(
            user_id=str(response.user.id),
            email=response.user.email,
            access_token=response.session.access_token
        )

    def verify_token(self, access_token: Optional[str]) -> AdminSession:
        """
        Validate an access token with Supabase Auth.

        Raises:
            AuthenticationError: If the token is missing, expired or unknown
        """
        if not access_token:
            raise AuthenticationError(login_path=settings.login_path)

        try:
            response = self.db.auth.get_user(access_token)
        except Exception as e:
            logger.info("admin_token_rejected", error=str(e))
            raise AuthenticationError(
                message="Session expired or invalid",
                code="INVALID_SESSION",
                login_path=settings.login_path
            )

        if response is None or response.user is None:
            raise AuthenticationError(
                message="Session expired or invalid",
                code="INVALID_SESSION",
                login_path=settings.login_path
            )

        return AdminSession(
            user_id=str(response.user.id),
            email=response.user.email,
            access_token=access_token
        )

    def sign_out(self, access_token: Optional[str]) -> bool:
        """
        Revoke a session when an admin client is configured.

        Revocation is best-effort: the caller clears the cookie either way.

        Returns:
            True when the token was revoked server-side
        """
        if not access_token:
            return False

        admin = self.admin_client_factory()
        if admin is None:
            return False

        try:
            admin.auth.admin.sign_out(access_token)
        except Exception as e:
            logger.warning("admin_sign_out_failed", error=str(e))
            return False

        logger.info("admin_signed_out")
        return True


# Singleton instance for convenience
_auth_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get or create AuthService instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
