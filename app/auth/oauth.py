"""Google OAuth authentication for the admin dashboard."""

import logging
import secrets
from os import getenv

from authlib.integrations.httpx_client import AsyncOAuth2Client
from litestar import Request
from litestar.connection import ASGIConnection
from litestar.exceptions import NotAuthorizedException
from litestar.handlers.base import BaseRouteHandler
from litestar.response import Redirect, Response
from litestar.stores.memory import MemoryStore

from app.utils import get_base_path

logger = logging.getLogger("Echo.auth")

# OAuth configuration
GOOGLE_CLIENT_ID = getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = getenv("GOOGLE_CLIENT_SECRET")
# Comma-separated list of Google accounts allowed into the dashboard
AUTHORIZED_EMAILS = {
    email.strip().lower()
    for email in getenv("GOOGLE_AUTHORIZED_EMAIL", "").split(",")
    if email.strip()
}
SESSION_COOKIE = "session_id"
ADMIN_SESSION_KEY = "admin_authenticated"
ADMIN_EMAIL_KEY = "admin_email"
ADMIN_SESSION_TTL = 86400  # 24 hours
OAUTH_STATE_TTL = 600

# OAuth endpoints
GOOGLE_AUTHORIZATION_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

# Session store (in-memory, one process)
session_store = MemoryStore()


def _as_text(value) -> str:
    """MemoryStore may hand values back as bytes."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def is_authorized_email(email: str) -> bool:
    return bool(email) and email.lower() in AUTHORIZED_EMAILS


def get_redirect_uri(request: Request) -> str:
    """OAuth redirect URI for the host the request came in on."""
    url = request.url
    default_port = 443 if url.scheme == "https" else 80
    host = url.hostname
    if url.port and url.port != default_port:
        host = f"{host}:{url.port}"
    return f"{url.scheme}://{host}{get_base_path(request)}/admin/callback"


def _error(message: str, status_code: int) -> Response:
    return Response(content={"error": message}, status_code=status_code, media_type="application/json")


async def grant_admin_session(session_id: str, email: str) -> None:
    """Mark ``session_id`` as an authenticated admin session."""
    await session_store.set(f"{ADMIN_SESSION_KEY}:{session_id}", "true", expires_in=ADMIN_SESSION_TTL)
    await session_store.set(f"{ADMIN_EMAIL_KEY}:{session_id}", email, expires_in=ADMIN_SESSION_TTL)


async def admin_login(request: Request) -> Redirect:
    """Initiate Google OAuth login."""
    if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
        logger.error("Google OAuth credentials not configured")
        raise NotAuthorizedException("OAuth not configured")

    # State token for CSRF protection, keyed by the browser's session cookie
    state = secrets.token_urlsafe(32)
    session_id = request.cookies.get(SESSION_COOKIE) or secrets.token_urlsafe(32)
    await session_store.set(f"oauth_state:{session_id}", state, expires_in=OAUTH_STATE_TTL)

    client = AsyncOAuth2Client(
        client_id=GOOGLE_CLIENT_ID,
        client_secret=GOOGLE_CLIENT_SECRET,
        redirect_uri=get_redirect_uri(request),
    )
    auth_url, _ = client.create_authorization_url(
        GOOGLE_AUTHORIZATION_BASE_URL,
        state=state,
        scope="openid email profile",
    )

    response = Redirect(auth_url)
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="lax",
        path="/",
    )
    logger.debug(f"Set session cookie {session_id[:8]}... for redirect to Google")
    return response


async def admin_callback(request: Request) -> Redirect | Response:
    """Handle Google OAuth callback."""
    code = request.query_params.get("code")
    state = request.query_params.get("state")
    error = request.query_params.get("error")

    if error:
        logger.warning(f"OAuth error: {error}")
        return _error("Authentication failed", 400)
    if not code or not state:
        return _error("Missing code or state", 400)

    session_id = request.cookies.get(SESSION_COOKIE)
    if not session_id:
        logger.warning(f"No session cookie in callback. Cookies: {list(request.cookies.keys())}")
        return _error("No session found", 400)

    stored_state = await session_store.get(f"oauth_state:{session_id}")
    if not stored_state:
        logger.warning(f"No stored state for session {session_id[:8]}...")
        return _error("State token expired or not found", 400)
    if _as_text(stored_state) != state:
        logger.warning(f"OAuth state mismatch for session {session_id[:8]}...")
        return _error("Invalid state token", 400)

    try:
        async with AsyncOAuth2Client(
            client_id=GOOGLE_CLIENT_ID,
            client_secret=GOOGLE_CLIENT_SECRET,
            redirect_uri=get_redirect_uri(request),
        ) as client:
            token_response = await client.fetch_token(GOOGLE_TOKEN_URL, code=code)
            access_token = token_response.get("access_token")
            if not access_token:
                raise ValueError("No access token in response")
            user_info = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            email = str(user_info.json().get("email") or "")
    except Exception:
        logger.exception("OAuth token exchange failed")
        return _error("Authentication failed", 500)

    if not is_authorized_email(email):
        logger.warning(f"Unauthorized email attempt: {email}")
        return _error("Unauthorized email address", 403)

    await grant_admin_session(session_id, email)
    await session_store.delete(f"oauth_state:{session_id}")
    logger.info(f"Admin authenticated: {email}")

    return Redirect(f"{get_base_path(request)}/admin")


async def admin_logout(request: Request) -> Redirect:
    """Log out admin user."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if session_id:
        await session_store.delete(f"{ADMIN_SESSION_KEY}:{session_id}")
        await session_store.delete(f"{ADMIN_EMAIL_KEY}:{session_id}")
        logger.info(f"Admin logged out: session {session_id[:8]}...")

    response = Redirect(f"{get_base_path(request)}/admin/login-page")
    response.delete_cookie(SESSION_COOKIE, path="/")
    return response


async def require_admin_guard(connection: ASGIConnection, handler: BaseRouteHandler) -> None:
    """Guard to require admin authentication (HTTP routes and websockets)."""
    path = connection.url.path
    session_id = connection.cookies.get(SESSION_COOKIE)

    if not session_id:
        logger.warning(f"Admin access attempted without session: {path}")
        raise NotAuthorizedException("Not authenticated")

    if not await session_store.get(f"{ADMIN_SESSION_KEY}:{session_id}"):
        logger.warning(f"Admin access attempted without authentication: {path}")
        raise NotAuthorizedException("Not authenticated")

    email_raw = await session_store.get(f"{ADMIN_EMAIL_KEY}:{session_id}")
    email = _as_text(email_raw) if email_raw else ""
    if not is_authorized_email(email):
        logger.warning(f"Admin access attempted with unauthorized email: {email!r}")
        raise NotAuthorizedException("Unauthorized")

    logger.debug(f"Admin access granted for {email} on {path}")
