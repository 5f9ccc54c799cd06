"""Service facade: the session-aware public surface of the bridge.

Every public coroutine returns a ``ResultEnvelope``. Failures, including
unexpected exceptions, come back as the envelope's error variant.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from contracts.v1.schemas import (
    CredentialsContract,
    ItemContract,
    LogoutContract,
    ResultEnvelope,
    SearchResultSet,
    SessionContract,
)

from . import payloads
from .config import BridgeConfig, load_config
from .envelope import ServiceOperation
from .errors import AppError, ErrorType, log_error
from .mappers import records_to_items
from .response_parser import to_item_record
from .session_state_machine import (
    SessionPhase,
    classify_login_error,
    phase_for,
    reconcile_login_session,
)
from .session_store import SessionStore
from .soa_client import SoaClient
from .transport import Transport

logger = logging.getLogger(__name__)

MAX_SEARCH_LIMIT = 100


def _no_session() -> ResultEnvelope:
    return ResultEnvelope.failure("NO_SESSION", "No active session. Please login first.")


def _invalid(message: str) -> ResultEnvelope:
    return ResultEnvelope.failure("INVALID_PARAMETER", message)


def _valid_limit(limit: Any) -> bool:
    return isinstance(limit, int) and not isinstance(limit, bool) and 1 <= limit <= MAX_SEARCH_LIMIT


def backend_error_message(error: AppError) -> Optional[str]:
    """Return the backend's own message from a failed call's response body.

    Looks at ``ServiceData.partialErrors[0].errorValues[0].message`` first,
    then at a top-level ``message``.
    """
    raw = (error.context or {}).get("response_text")
    if not raw:
        return None
    try:
        body = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(body, dict):
        return None

    service_data = body.get("ServiceData")
    if isinstance(service_data, dict):
        partial = service_data.get("partialErrors") or []
        if partial and isinstance(partial[0], dict):
            values = partial[0].get("errorValues") or []
            if values and isinstance(values[0], dict) and values[0].get("message"):
                return str(values[0]["message"])
    message = body.get("message")
    return str(message) if message else None


class PlmFacade:
    """Single canonical facade over one backend session.

    Login and logout are serialised; read operations run concurrently against
    whatever session is current.
    """

    def __init__(
        self,
        config: BridgeConfig | None = None,
        *,
        session_store: SessionStore | None = None,
        transport: Transport | None = None,
    ):
        self.config = config if config is not None else load_config()
        self.session_store = session_store if session_store is not None else SessionStore()
        self.client = SoaClient(self.config, self.session_store, transport=transport)
        self._session: Optional[SessionContract] = None
        self._transition_lock = asyncio.Lock()

        if self.session_store.get() is not None:
            # A cookie without the session details that came with it cannot be resumed.
            logger.warning("Session store holds a cookie without session info; clearing it")
            self.client.reset()

    # --- Session state ---

    @property
    def phase(self) -> SessionPhase:
        return phase_for(self._session, self.client.session_id)

    @property
    def current_session(self) -> Optional[SessionContract]:
        if not self.is_logged_in():
            return None
        if self._session.session_id != self.client.session_id:
            # A real cookie observed after login replaced the reported id.
            self._session = self._session.model_copy(update={"session_id": self.client.session_id})
        return self._session

    def is_logged_in(self) -> bool:
        return self.phase is SessionPhase.LOGGED_IN

    def get_session_id(self) -> Optional[str]:
        return self.client.session_id if self.is_logged_in() else None

    def _clear_session(self) -> None:
        self._session = None
        self.client.reset()

    async def _call(self, op: ServiceOperation, params: Any) -> Any:
        return await self.client.call_service(op.service, op.operation, params)

    @staticmethod
    def _failure(code: str, action: str, error: BaseException) -> ResultEnvelope:
        """Typed errors keep the operation's code; anything else is COMMAND_ERROR."""
        if isinstance(error, AppError):
            log_error(error, action)
            return ResultEnvelope.failure(code, error.message)
        logger.exception("Unexpected error during %s", action)
        return ResultEnvelope.failure("COMMAND_ERROR", str(error) or f"{action} failed")

    # --- Login / logout ---

    async def login(self, credentials: CredentialsContract | dict[str, Any]) -> ResultEnvelope[SessionContract]:
        """Authenticate and make the new session current.

        Any session held before the call is dropped, whether or not the new
        login succeeds.
        """
        try:
            if not isinstance(credentials, CredentialsContract):
                credentials = CredentialsContract.model_validate(credentials or {})
        except ValidationError:
            return _invalid("Username and password are required")
        if not credentials.username or not credentials.password:
            return _invalid("Username and password are required")

        async with self._transition_lock:
            self._session = None
            try:
                session = await self._call(
                    ServiceOperation.LOGIN,
                    {"username": credentials.username, "password": credentials.password},
                )
                if not isinstance(session, SessionContract):
                    raise AppError("Unexpected login response", ErrorType.DATA_PARSING)
                session = reconcile_login_session(session, self.client.session_id, credentials.username)
                if not session.session_id:
                    raise AppError("Login response carried no session id", ErrorType.AUTH_SESSION)
            except Exception as e:
                self._clear_session()
                code, message = classify_login_error(e)
                if isinstance(e, AppError):
                    log_error(e, "login")
                else:
                    logger.exception("Unexpected error during login")
                return ResultEnvelope.failure(code, message)

            self._session = session
            logger.info("Logged in as %s", session.user_id)
            return ResultEnvelope.success(session)

    async def logout(self) -> ResultEnvelope[LogoutContract]:
        """End the current session. Local state is cleared even if the backend call fails."""
        async with self._transition_lock:
            if not self.is_logged_in():
                self._clear_session()
                return ResultEnvelope.success(LogoutContract())
            try:
                await self._call(ServiceOperation.LOGOUT, {})
            except Exception as e:
                return self._failure("LOGOUT_ERROR", "logout", e)
            finally:
                self._clear_session()
            logger.info("Logged out")
            return ResultEnvelope.success(LogoutContract())

    # --- Searches ---

    async def _search(self, op: ServiceOperation, params: dict[str, Any], action: str) -> ResultEnvelope[list[ItemContract]]:
        try:
            result = await self._call(op, params)
            if not isinstance(result, SearchResultSet):
                raise AppError("Unexpected search response", ErrorType.DATA_PARSING)
            return ResultEnvelope.success(records_to_items(result.search_results))
        except AppError as e:
            log_error(e, action)
            return ResultEnvelope.failure("SEARCH_ERROR", backend_error_message(e) or e.message)
        except Exception as e:
            return self._failure("SEARCH_ERROR", action, e)

    async def search_items(
        self,
        query: str,
        type: Optional[str] = None,
        limit: int = 10,
    ) -> ResultEnvelope[list[ItemContract]]:
        """Free-text item search, newest first."""
        if not self.is_logged_in():
            return _no_session()
        if not query:
            return _invalid("Search query is required")
        if not _valid_limit(limit):
            return _invalid(f"Limit must be between 1 and {MAX_SEARCH_LIMIT}")
        return await self._search(
            ServiceOperation.FINDER_SEARCH,
            payloads.item_search(query, type, limit),
            "item search",
        )

    async def get_user_owned_items(self) -> ResultEnvelope[list[ItemContract]]:
        """Items owned by the logged-in user (session info, then search)."""
        if not self.is_logged_in():
            return _no_session()
        uid = await self._current_user_uid()
        if isinstance(uid, ResultEnvelope):
            return ResultEnvelope.failure("SEARCH_ERROR", uid.error.message)
        return await self._search(
            ServiceOperation.FINDER_SEARCH,
            payloads.owned_items_search(uid),
            "owned items search",
        )

    async def get_last_created_items(self, limit: int = 10) -> ResultEnvelope[list[ItemContract]]:
        if not self.is_logged_in():
            return _no_session()
        if not _valid_limit(limit):
            return _invalid(f"Limit must be between 1 and {MAX_SEARCH_LIMIT}")
        return await self._search(
            ServiceOperation.FINDER_SEARCH,
            payloads.last_created_search(limit),
            "last created items search",
        )

    # --- Items ---

    async def get_item_by_id(self, item_id: str) -> ResultEnvelope[Any]:
        if not self.is_logged_in():
            return _no_session()
        if not item_id:
            return _invalid("Item ID is required")
        try:
            data = await self._call(ServiceOperation.LOAD_OBJECTS, payloads.load_item(item_id))
        except Exception as e:
            return self._failure("API_ERROR", "get item", e)
        return ResultEnvelope.success(data)

    async def create_item(
        self,
        type: str,
        name: str,
        description: str = "",
        properties: Optional[dict[str, Any]] = None,
    ) -> ResultEnvelope[Any]:
        if not self.is_logged_in():
            return _no_session()
        if not type or not name:
            return _invalid("Item type and name are required")
        params = payloads.create_item(self.config.client_id, type, name, description or "", properties)
        try:
            data = await self._call(ServiceOperation.CREATE_OBJECTS, params)
        except Exception as e:
            return self._failure("CREATE_ERROR", "create item", e)
        return ResultEnvelope.success(data)

    async def update_item(self, item_id: str, properties: dict[str, Any]) -> ResultEnvelope[Any]:
        if not self.is_logged_in():
            return _no_session()
        if not item_id:
            return _invalid("Item ID is required")
        if not properties or not isinstance(properties, dict):
            return _invalid("Properties to update are required")
        try:
            data = await self._call(ServiceOperation.SET_PROPERTIES, payloads.update_item(item_id, properties))
        except Exception as e:
            return self._failure("UPDATE_ERROR", "update item", e)
        return ResultEnvelope.success(data)

    async def get_item_types(self) -> ResultEnvelope[Any]:
        if not self.is_logged_in():
            return _no_session()
        try:
            data = await self._call(ServiceOperation.TYPE_DESCRIPTIONS, payloads.item_types())
        except Exception as e:
            return self._failure("API_ERROR", "get item types", e)
        return ResultEnvelope.success(data)

    # --- Session info / user ---

    async def get_session_info(self) -> ResultEnvelope[Any]:
        if not self.is_logged_in():
            return _no_session()
        try:
            data = await self._call(ServiceOperation.SESSION_INFO, {})
        except Exception as e:
            return self._failure("SESSION_INFO_ERROR", "get session info", e)
        return ResultEnvelope.success(data)

    async def get_favorites(self) -> ResultEnvelope[Any]:
        if not self.is_logged_in():
            return _no_session()
        try:
            data = await self._call(ServiceOperation.FAVORITES, {})
        except Exception as e:
            return self._failure("FAVORITES_ERROR", "get favorites", e)
        return ResultEnvelope.success(data)

    async def get_user_properties(
        self,
        uid: str,
        attributes: Optional[list[str]] = None,
    ) -> ResultEnvelope[Any]:
        if not self.is_logged_in():
            return _no_session()
        if not uid:
            return _invalid("User UID is required")
        try:
            data = await self._call(ServiceOperation.GET_PROPERTIES, payloads.user_properties(uid, attributes))
        except Exception as e:
            return self._failure("USER_PROPERTIES_ERROR", "get user properties", e)
        return ResultEnvelope.success(data)

    async def get_logged_user_properties(self, attributes: Optional[list[str]] = None) -> ResultEnvelope[Any]:
        """Properties of the logged-in user (session info, then properties by uid)."""
        if not self.is_logged_in():
            return _no_session()
        uid = await self._current_user_uid()
        if isinstance(uid, ResultEnvelope):
            return ResultEnvelope.failure("USER_PROPERTIES_ERROR", uid.error.message)
        return await self.get_user_properties(uid, attributes)

    async def _current_user_uid(self) -> str | ResultEnvelope:
        """Return the logged-in user's uid, or the failed session-info envelope."""
        info = await self.get_session_info()
        if not info.ok:
            return info
        user = info.data.get("user") if isinstance(info.data, dict) else None
        uid = to_item_record(user).uid if user else ""
        if not uid:
            return ResultEnvelope.failure("SESSION_INFO_ERROR", "Could not determine current user UID")
        return uid
