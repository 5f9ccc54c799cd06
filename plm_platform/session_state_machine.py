"""Session lifecycle helpers for the facade.

The facade is either LoggedOut or LoggedIn. Login is atomic from the caller's
point of view; logout and a failed re-initialisation both return to LoggedOut.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from contracts.v1.schemas import SessionContract

from .errors import AppError, ErrorType


class SessionPhase(str, Enum):
    LOGGED_OUT = "LoggedOut"
    LOGGED_IN = "LoggedIn"


def phase_for(session: Optional[SessionContract], session_id: Optional[str]) -> SessionPhase:
    """Return LoggedIn only for a valid session backed by a live session id."""
    if session is not None and session.is_valid and session_id:
        return SessionPhase.LOGGED_IN
    return SessionPhase.LOGGED_OUT


def reconcile_login_session(
    session: SessionContract,
    session_id: Optional[str],
    username: str,
) -> SessionContract:
    """Return ``session`` with the authoritative session id applied.

    The id held by the client (cookie-derived when a cookie was observed)
    replaces whatever the body reported. A response that omits the user id
    falls back to the name the caller authenticated with.
    """
    user_id = session.user_id or username
    return session.model_copy(
        update={
            "session_id": session_id or session.session_id,
            "user_id": user_id,
            "user_name": session.user_name or user_id,
        }
    )


_LOGIN_ERRORS = {
    ErrorType.AUTH_SESSION: ("INVALID_CREDENTIALS", "Invalid username or password"),
    ErrorType.NETWORK: ("NETWORK_ERROR", "Network error connecting to backend"),
    ErrorType.API_TIMEOUT: ("TIMEOUT", "Connection to backend timed out"),
}


def classify_login_error(error: BaseException) -> tuple[str, str]:
    """Map a login failure to a facade ``(code, message)`` pair."""
    if isinstance(error, AppError):
        code, message = _LOGIN_ERRORS.get(error.error_type, ("LOGIN_ERROR", "Login failed"))
        return code, error.message or message
    return "LOGIN_ERROR", str(error) or "Login failed"
