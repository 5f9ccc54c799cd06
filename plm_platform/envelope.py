"""Request envelope construction for the backend's SOA-style API.

Every call is wrapped in ``{"header": {...}, "body": {...}}``. The header is
fixed; the body shape depends only on the (service, operation) pair.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .errors import AppError, ErrorType
from .utils import new_request_id, redact_secrets

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ID = "PlmBridgePythonClient"


class ServiceOperation(Enum):
    """Known (service, operation) pairs."""

    LOGIN = ("Core-2011-06-Session", "login")
    LEGACY_LOGIN = ("Core-2006-03-Session", "login")
    LOGOUT = ("Core-2007-06-Session", "logout")
    LOGOUT_2008 = ("Core-2008-06-Session", "logout")
    FINDER_SEARCH = ("Query-2012-10-Finder", "performSearch")
    SAVED_SEARCH = ("Query-2010-04-SavedQuery", "performSavedSearch")
    SESSION_INFO = ("Core-2007-01-Session", "getTCSessionInfo")
    FAVORITES = ("Core-2008-03-Session", "getFavorites")
    GET_PROPERTIES = ("Core-2006-03-DataManagement", "getProperties")
    LOAD_OBJECTS = ("Core-2007-09-DataManagement", "loadObjects")
    CREATE_OBJECTS = ("Core-2010-09-DataManagement", "createRelateAndSubmitObjects")
    SET_PROPERTIES = ("Core-2010-09-DataManagement", "setProperties2")
    TYPE_DESCRIPTIONS = ("Core-2007-01-DataManagement", "getTypeDescriptions")

    @property
    def service(self) -> str:
        return self.value[0]

    @property
    def operation(self) -> str:
        return self.value[1]

    @property
    def is_login(self) -> bool:
        return self in LOGIN_OPERATIONS

    @property
    def is_logout(self) -> bool:
        return self in LOGOUT_OPERATIONS

    @classmethod
    def resolve(cls, service: str, operation: str) -> Optional["ServiceOperation"]:
        return _BY_PAIR.get((service, operation))

    def __str__(self) -> str:
        return f"{self.service}.{self.operation}"


_BY_PAIR = {member.value: member for member in ServiceOperation}

LOGIN_OPERATIONS = frozenset({ServiceOperation.LOGIN, ServiceOperation.LEGACY_LOGIN})
LOGOUT_OPERATIONS = frozenset({ServiceOperation.LOGOUT, ServiceOperation.LOGOUT_2008})


@dataclass(frozen=True)
class Envelope:
    header: dict[str, Any]
    body: Any = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"header": self.header, "body": self.body}

    def redacted(self) -> dict[str, Any]:
        """Envelope as a dict with credentials masked, safe for logging."""
        return redact_secrets(self.to_dict())


def build_header(client_id: str = DEFAULT_CLIENT_ID) -> dict[str, Any]:
    return {
        "state": {
            "stateless": True,
            "unloadObjects": True,
            "enableServerStateHeaders": True,
            "formatProperties": True,
            "clientID": client_id,
        },
        "policy": {},
    }


def new_discriminator(prefix: str = "PlmBridge") -> str:
    """Unique per call so repeated logins are never treated as duplicates."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:10]}"


def _login_body(service: str, operation: str, params: Any) -> dict[str, Any]:
    credentials = params if isinstance(params, dict) else {}
    username = credentials.get("username") or ""
    password = credentials.get("password") or ""
    if not username or not password:
        raise AppError(
            "Missing username or password for login",
            ErrorType.DATA_VALIDATION,
            None,
            {"service": service, "operation": operation},
        )
    return {
        "credentials": {
            "user": username,
            "password": password,
            "group": "",
            "role": "",
            "locale": "en_US",
            "descrimator": new_discriminator(),
        }
    }


def build_envelope(
    service: str,
    operation: str,
    params: Any,
    *,
    client_id: str = DEFAULT_CLIENT_ID,
) -> Envelope:
    """Build the request envelope for ``service.operation``.

    Login pairs validate and reshape the credentials, logout pairs send an
    empty body, everything else (searches included) sends ``params`` verbatim.
    """
    request_id = new_request_id("request")
    op = ServiceOperation.resolve(service, operation)

    if op is not None and op.is_login:
        body: Any = _login_body(service, operation, params)
    elif op is not None and op.is_logout:
        body = {}
    else:
        body = params if params is not None else {}

    envelope = Envelope(header=build_header(client_id), body=body)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("[%s] Request envelope for %s.%s: %s", request_id, service, operation, envelope.redacted())
    return envelope
