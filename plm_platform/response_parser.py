"""Normalise raw backend payloads into contract models.

The backend is not consistent about response shapes across its own service
versions, so each known (service, operation) pair gets its own parser.
Unknown pairs are logged and returned untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import ValidationError

from contracts.v1.schemas import (
    LogoutContract,
    RawItemRecord,
    SearchResultSet,
    ServerInfoContract,
    SessionContract,
)

from .envelope import ServiceOperation
from .errors import handle_data_error
from .utils import new_request_id

logger = logging.getLogger(__name__)


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def normalize_properties(raw: Any) -> dict[str, Any]:
    """Return item properties as a plain ``name -> value`` mapping.

    Accepts a mapping (returned as a copy) or a list of ``{"name", "value"}``
    entries.
    """
    if isinstance(raw, dict):
        return dict(raw)
    if isinstance(raw, list):
        props: dict[str, Any] = {}
        for entry in raw:
            if isinstance(entry, dict) and "name" in entry:
                props[str(entry["name"])] = entry.get("value")
        return props
    return {}


def to_item_record(obj: Any) -> RawItemRecord:
    """Coerce one search hit into a ``RawItemRecord``."""
    if isinstance(obj, RawItemRecord):
        return obj
    if not isinstance(obj, dict):
        return RawItemRecord()
    props = obj.get("props")
    if props is None:
        props = obj.get("properties")
    return RawItemRecord(
        uid=_str(obj.get("uid")),
        type=_str(obj.get("type")),
        properties=normalize_properties(props),
    )


def _parse_legacy_login(response: dict[str, Any]) -> SessionContract:
    return SessionContract(
        user_id=_str(response.get("userId")),
        user_name=_str(response.get("userName")),
        group=_str(response.get("group")),
        role=_str(response.get("role")),
        group_id=_str(response.get("groupId")),
        group_name=_str(response.get("groupName")),
        role_id=_str(response.get("roleId")),
        role_name=_str(response.get("roleName")),
        session_id=_str(response.get("sessionId")),
        locale=_str(response.get("locale")),
        status="OK",
        soa_version="12.0",
    )


def _parse_login(response: dict[str, Any]) -> SessionContract:
    server_info = response.get("serverInfo")
    info = server_info if isinstance(server_info, dict) else {}
    user_id = _str(info.get("UserID"))
    return SessionContract(
        user_id=user_id,
        user_name=user_id,
        session_id=_str(info.get("TcServerID")) or _str(response.get("sessionId")),
        locale=_str(info.get("Locale")),
        status="OK",
        soa_version=_str(info.get("Version")),
        server_info=ServerInfoContract.model_validate(info) if info else None,
    )


def _parse_logout(response: dict[str, Any]) -> LogoutContract:
    return LogoutContract(status="OK")


def _parse_search(response: dict[str, Any]) -> SearchResultSet:
    hits = response.get("searchResults")
    if hits is None:
        hits = response.get("objects")
    records = [to_item_record(obj) for obj in (hits or [])]

    categories = response.get("searchFilterCategories")
    display_count = response.get("defaultFilterFieldDisplayCount")
    return SearchResultSet(
        search_results=records,
        total_found=response.get("totalFound") or len(records),
        total_loaded=response.get("totalLoaded") or len(records),
        search_filter_map=response.get("searchFilterMap"),
        search_filter_categories=categories if isinstance(categories, list) else None,
        default_filter_field_display_count=display_count if isinstance(display_count, int) else None,
        service_data=response.get("serviceData"),
    )


_PARSERS: dict[ServiceOperation, Callable[[dict[str, Any]], Any]] = {
    ServiceOperation.LEGACY_LOGIN: _parse_legacy_login,
    ServiceOperation.LOGIN: _parse_login,
    ServiceOperation.LOGOUT: _parse_logout,
    ServiceOperation.LOGOUT_2008: _parse_logout,
    ServiceOperation.FINDER_SEARCH: _parse_search,
    ServiceOperation.SAVED_SEARCH: _parse_search,
}


def normalize_response(service: str, operation: str, response: Any) -> Any:
    """Map a raw JSON payload for ``service.operation`` to its contract.

    Returns a ``SessionContract`` for logins, a ``LogoutContract`` for logouts,
    a ``SearchResultSet`` for searches, and ``response`` unchanged otherwise.

    Raises:
        AppError: DATA_PARSING when a known payload cannot be mapped.
    """
    parser_id = new_request_id("parser")
    op = ServiceOperation.resolve(service, operation)
    parser = _PARSERS.get(op) if op is not None else None

    if parser is None:
        logger.warning(
            "[%s] Unimplemented JSON response parsing for service: %s.%s",
            parser_id,
            service,
            operation,
        )
        return response

    logger.debug("[%s] Parsing response for %s", parser_id, op)
    payload = response if isinstance(response, dict) else {}
    try:
        return parser(payload)
    except (ValidationError, TypeError, ValueError, AttributeError) as e:
        logger.error("[%s] Error parsing response for %s: %s", parser_id, op, e)
        raise handle_data_error(e, f"parsing response for {service}.{operation}") from e
