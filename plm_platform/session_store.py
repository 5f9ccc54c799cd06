"""In-memory holder for the backend session cookie.

The store keeps at most one cookie for the lifetime of the process. Writes of
real cookies are first-writer-wins: once one is held, later writers are
ignored until the store is explicitly cleared. A session id that only a
response reported is held as a fallback, and the first real cookie observed
afterwards replaces it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

JSESSIONID_COOKIE = "JSESSIONID"
ASPNET_SESSIONID_COOKIE = "ASP.NET_SessionId"

ORIGIN_COOKIE = "cookie"
ORIGIN_FALLBACK = "fallback"


@dataclass(frozen=True)
class SessionCookie:
    name: str
    value: str
    origin: str = ORIGIN_COOKIE

    @property
    def is_fallback(self) -> bool:
        return self.origin == ORIGIN_FALLBACK

    def header_value(self) -> str:
        return f"{self.name}={self.value}"


class SessionStore:
    """Thread-safe single-slot cookie store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cookie: Optional[SessionCookie] = None

    def get(self) -> Optional[SessionCookie]:
        with self._lock:
            return self._cookie

    def set(self, name: str, value: str) -> bool:
        """Store a cookie observed on a response. Returns True if stored.

        A held fallback is replaced; a held real cookie is kept.
        """
        if not name or not value:
            return False
        with self._lock:
            held = self._cookie
            if held is not None and not held.is_fallback:
                logger.debug("Keeping existing %s cookie; ignoring %s", held.name, name)
                return False
            self._cookie = SessionCookie(name=name, value=value)
        if held is not None:
            logger.debug("Replaced fallback session id with %s cookie", name)
        else:
            logger.debug("Stored %s session cookie", name)
        return True

    def set_fallback(self, name: str, value: str) -> bool:
        """Store a reported session id, only when nothing is held yet."""
        if not name or not value:
            return False
        with self._lock:
            if self._cookie is not None:
                return False
            self._cookie = SessionCookie(name=name, value=value, origin=ORIGIN_FALLBACK)
        logger.debug("Stored reported session id as %s fallback", name)
        return True

    def clear(self) -> None:
        with self._lock:
            self._cookie = None
        logger.debug("Session cookie cleared")
