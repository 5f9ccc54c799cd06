"""SOA client: routes calls to a transport and keeps the session id in sync."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .config import BridgeConfig
from .envelope import ServiceOperation
from .errors import AppError, ErrorType, handle_api_error
from .mock_backend import MockTransport
from .session_store import ASPNET_SESSIONID_COOKIE, SessionStore
from .transport import HttpTransport, Transport
from .utils import new_request_id

logger = logging.getLogger(__name__)


class SoaClient:
    """Single entry point for backend calls below the facade.

    Session id precedence after a login: the cookie held by the session
    store, then a token reported in response headers, then the id reported
    in the response body. A reported id is written to the store as a
    fallback when no cookie was observed, and a real cookie seen on any
    later response takes over from it.
    """

    def __init__(
        self,
        config: BridgeConfig,
        session_store: SessionStore,
        *,
        transport: Transport | None = None,
    ):
        self.config = config
        self.session_store = session_store
        if transport is None:
            transport = (
                MockTransport(client_id=config.client_id)
                if config.mock_mode
                else HttpTransport(config, session_store)
            )
        self.transport = transport
        self.session_id: Optional[str] = None

        cookie = session_store.get()
        if cookie is not None:
            self.session_id = cookie.value
            logger.debug("Using session id from stored %s cookie", cookie.name)

    def reset(self) -> None:
        """Forget the session id and clear the session store."""
        self.session_id = None
        self.session_store.clear()

    async def call_service(self, service: str, operation: str, params: Any) -> Any:
        """Call ``service.operation`` and return its normalised data.

        Raises:
            AppError: for every failure, with ``context`` naming the call.
        """
        if not service or not operation:
            raise AppError(
                "Invalid service or operation parameters",
                ErrorType.DATA_VALIDATION,
                None,
                {"service": service, "operation": operation},
            )

        client_request_id = new_request_id("client")
        logger.debug("[%s] SOA client call: %s.%s", client_request_id, service, operation)

        op = ServiceOperation.resolve(service, operation)
        is_login = op is not None and op.is_login
        if is_login:
            # A new login replaces whatever session was held before.
            self.reset()

        try:
            result = await self.transport.send(service, operation, params, session_id=self.session_id)
        except AppError as e:
            if not e.context:
                e.context = {"service": service, "operation": operation}
            raise
        except Exception as e:
            logger.error("[%s] SOA client error (%s.%s): %s", client_request_id, service, operation, e)
            raise handle_api_error(e, f"SOA client call to {service}.{operation}") from e

        if is_login:
            self._adopt_login_session(result.data, result.session_id, client_request_id)
        else:
            self._follow_stored_cookie(client_request_id)
            if result.session_id and not self.session_id:
                self.session_id = result.session_id
                logger.debug("[%s] Session id adopted from response", client_request_id)

        logger.debug("[%s] SOA client response received for: %s.%s", client_request_id, service, operation)
        return result.data

    def _adopt_login_session(self, data: Any, header_token: Optional[str], request_id: str) -> None:
        cookie = self.session_store.get()
        if cookie is not None:
            self.session_id = cookie.value
            logger.debug("[%s] Login: using %s cookie as session id", request_id, cookie.name)
            return

        body_id = getattr(data, "session_id", "") or ""
        fallback = header_token or body_id
        if fallback:
            self.session_id = fallback
            self.session_store.set_fallback(ASPNET_SESSIONID_COOKIE, fallback)
            logger.debug("[%s] Login: no cookie observed, using reported session id", request_id)

    def _follow_stored_cookie(self, request_id: str) -> None:
        cookie = self.session_store.get()
        if cookie is None or cookie.is_fallback or cookie.value == self.session_id:
            return
        self.session_id = cookie.value
        logger.debug("[%s] Session id now follows %s cookie", request_id, cookie.name)
