"""
Admin session routes and the guard for admin routers.

The session is an HTTP-only cookie holding the Supabase access token.
API clients may send the same token as a Bearer header instead.
"""

from typing import Optional

from fastapi import APIRouter, Request, Response
from fastapi.responses import RedirectResponse
import structlog

from config import settings
from models.auth import AdminSession, LoginRequest, LoginResponse
from services.auth_service import get_auth_service
from exceptions import AuthenticationError
from routes.errors import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


def session_token(request: Request) -> Optional[str]:
    """Access token from the session cookie or an Authorization header."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


def require_session(request: Request) -> AdminSession:
    """
    Dependency guarding every admin router.

    Raises:
        AuthenticationError: Handled in main.py (redirect for browsers,
            401 JSON otherwise)
    """
    session = get_auth_service().verify_token(session_token(request))
    request.state.admin = session
    return session


def wants_html(request: Request) -> bool:
    """True for top-level browser navigations."""
    return "text/html" in request.headers.get("accept", "")


# ===================
# ROUTES
# ===================

@router.post("/auth/login", response_model=LoginResponse)
async def login(data: LoginRequest, response: Response):
    """
    Sign in with email and password.

    Sets the session cookie and returns where to go next.

    Raises:
        401: Invalid credentials
    """
    try:
        session = get_auth_service().sign_in(data)

        response.set_cookie(
            key=settings.session_cookie_name,
            value=session.access_token,
            max_age=settings.session_cookie_max_age,
            httponly=True,
            secure=settings.is_production,
            samesite="lax",
            path="/"
        )

        return LoginResponse(
            user_id=session.user_id,
            email=session.email,
            redirect_to=settings.dashboard_path
        )

    except Exception as e:
        return handle_error(e)


@router.post("/auth/logout")
async def logout(request: Request):
    """
    Sign out and go back to the login screen.

    The cookie is always cleared, even when revocation fails.
    """
    revoked = get_auth_service().sign_out(session_token(request))
    logger.info("admin_logout", revoked=revoked)

    redirect = RedirectResponse(url=settings.login_path, status_code=303)
    redirect.delete_cookie(settings.session_cookie_name, path="/")
    return redirect


@router.get("/login")
async def login_screen(request: Request):
    """
    Login screen descriptor.

    Admins that already hold a valid session are sent to the dashboard.
    """
    token = session_token(request)
    if token:
        try:
            get_auth_service().verify_token(token)
            return RedirectResponse(url=settings.dashboard_path, status_code=303)
        except AuthenticationError:
            pass

    return {
        "title": "Admin Login",
        "action": "/auth/login",
        "fields": ["email", "password"],
        "redirect_to": settings.dashboard_path
    }
