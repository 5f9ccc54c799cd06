"""Deterministic in-memory backend with the same ``send`` interface as HTTP.

Used when ``mock_mode`` is on. Requests still go through the envelope builder
and responses through the normaliser, so only the network is replaced.
"""

from __future__ import annotations

import copy
import fnmatch
import itertools
import logging
from typing import Any, Callable, Optional

from .envelope import ServiceOperation, build_envelope
from .errors import AppError, ErrorType
from .response_parser import normalize_response
from .transport import TransportResult
from .utils import as_list, new_request_id, redact_secrets

logger = logging.getLogger(__name__)

MOCK_SESSION_ID = "mock-session-123"
MOCK_USER_UID = "user-uid-001"
OTHER_USER_UID = "user-uid-002"

USER_NAMES = {MOCK_USER_UID: "Administrator", OTHER_USER_UID: "jdoe"}


def _item(
    uid: str,
    name: str,
    desc: str,
    rev: str,
    status: str,
    date: str,
    item_type: str = "Item",
    owner: str = MOCK_USER_UID,
) -> dict:
    return {
        "uid": uid,
        "type": item_type,
        "properties": [
            {"name": "object_name", "value": name},
            {"name": "object_desc", "value": desc},
            {"name": "object_string", "value": f"{uid.upper()}: {name}"},
            {"name": "item_id", "value": uid.upper()},
            {"name": "item_revision_id", "value": rev},
            {"name": "release_status_list", "value": status},
            {"name": "owning_user", "value": USER_NAMES[owner]},
            {"name": "creation_date", "value": date},
            {"name": "last_mod_date", "value": date},
        ],
    }


CATALOGUE: tuple[dict, ...] = (
    _item("item-001", "Part ABC-123", "Mechanical part for assembly", "A", "Released", "2023-08-15"),
    _item("item-002", "Assembly XYZ-789", "Final assembly for product", "B", "In Review", "2023-09-20"),
    _item("item-003", "Bracket DEF-456", "Mounting bracket", "C", "Obsolete", "2023-07-02", owner=OTHER_USER_UID),
    _item("doc-001", "Spec Sheet ABC-123", "Specification document", "A", "", "2023-10-01", "Document"),
)

ITEM_TYPES = ("Item", "Document", "Part", "Design")


def _prop(item: dict, name: str) -> str:
    return next((p["value"] for p in item["properties"] if p["name"] == name), "")


class MockTransport:
    """Answers the known service pairs from a fixed catalogue."""

    def __init__(self, client_id: str = "PlmBridgeMockClient"):
        self.client_id = client_id
        self.calls: list[tuple[str, str]] = []
        self._created = itertools.count(1)
        self._handlers: dict[ServiceOperation, Callable[[Any], Any]] = {
            ServiceOperation.LOGIN: self._login,
            ServiceOperation.LEGACY_LOGIN: self._legacy_login,
            ServiceOperation.LOGOUT: self._logout,
            ServiceOperation.LOGOUT_2008: self._logout,
            ServiceOperation.FINDER_SEARCH: self._search,
            ServiceOperation.SAVED_SEARCH: self._search,
            ServiceOperation.SESSION_INFO: self._session_info,
            ServiceOperation.FAVORITES: self._favorites,
            ServiceOperation.GET_PROPERTIES: self._get_properties,
            ServiceOperation.LOAD_OBJECTS: self._load_objects,
            ServiceOperation.CREATE_OBJECTS: self._create,
            ServiceOperation.SET_PROPERTIES: self._update,
            ServiceOperation.TYPE_DESCRIPTIONS: self._type_descriptions,
        }

    async def send(
        self,
        service: str,
        operation: str,
        params: Any,
        *,
        session_id: Optional[str] = None,
    ) -> TransportResult:
        request_id = new_request_id("mock")
        logger.debug("[%s] SOA call (MOCK MODE): %s.%s %s", request_id, service, operation, redact_secrets(params))
        self.calls.append((service, operation))

        envelope = build_envelope(service, operation, params, client_id=self.client_id)
        op = ServiceOperation.resolve(service, operation)
        handler = self._handlers.get(op) if op is not None else None
        if handler is None:
            raise AppError(
                f"Unimplemented SOA service: {service}.{operation}",
                ErrorType.API_RESPONSE,
                None,
                {"service": service, "operation": operation},
            )

        raw = handler(envelope.body)
        return TransportResult(data=normalize_response(service, operation, raw))

    # --- Session ---

    @staticmethod
    def _check_credentials(user: str, password: str) -> None:
        if (user == "admin" and password == "admin") or (user and user == password):
            return
        raise AppError("Invalid credentials", ErrorType.AUTH_SESSION, None, {"user": user})

    def _login(self, body: dict) -> dict:
        credentials = body.get("credentials", {})
        user = credentials.get("user", "")
        self._check_credentials(user, credentials.get("password", ""))
        return {
            "serverInfo": {
                "UserID": user,
                "TcServerID": MOCK_SESSION_ID,
                "Version": "14.0.0.0",
                "Locale": "en_US",
                "HostName": "localhost",
            },
        }

    def _legacy_login(self, body: dict) -> dict:
        credentials = body.get("credentials", {})
        user = credentials.get("user", "")
        self._check_credentials(user, credentials.get("password", ""))
        return {
            "userId": user,
            "userName": "Administrator" if user == "admin" else user,
            "group": "Engineering",
            "role": "Engineer",
            "groupId": "group-1",
            "groupName": "Engineering",
            "roleId": "role-1",
            "roleName": "Engineer",
            "sessionId": MOCK_SESSION_ID,
            "locale": "en_US",
        }

    @staticmethod
    def _logout(body: dict) -> dict:
        return {"success": True}

    @staticmethod
    def _session_info(body: dict) -> dict:
        return {
            "serverVersion": "14.0.0.0",
            "user": {"uid": MOCK_USER_UID, "type": "User"},
            "group": {"uid": "group-1", "type": "Group"},
            "role": {"uid": "role-1", "type": "Role"},
            "extraInfo": {"TcServerID": MOCK_SESSION_ID},
        }

    @staticmethod
    def _favorites(body: dict) -> dict:
        return {"favorites": {"objects": [copy.deepcopy(CATALOGUE[0])]}}

    @staticmethod
    def _get_properties(body: dict) -> dict:
        objects = body.get("objects") or [{}]
        uid = objects[0].get("uid", "")
        attributes = body.get("attributes") or []
        values = {
            "user_id": "admin",
            "person": "Administrator",
            "os_username": "admin",
            "last_login_time": "2024-01-01T00:00:00Z",
            "volume": "vol-1",
            "home_folder": "Home",
        }
        props = {name: {"uiValues": [values.get(name, "")]} for name in attributes}
        return {"modelObjects": {uid: {"uid": uid, "type": "User", "props": props}}}

    # --- Items ---

    @staticmethod
    def _search(body: dict) -> dict:
        search_input = body.get("searchInput", {})
        criteria = search_input.get("searchCriteria", {})
        pattern = (criteria.get("Name") or criteria.get("searchString") or "*").lower()
        if not any(ch in pattern for ch in "*?["):
            pattern = f"*{pattern}*"

        type_filters: list[str] = []
        for key in ("Item Type", "Type"):
            for entry in (search_input.get("searchFilterMap") or {}).get(key, []):
                type_filters.append(entry.get("stringValue", ""))

        # Owner criteria carry a user uid; catalogue items carry the display name.
        owner = USER_NAMES.get(criteria["owningUser"], "") if "owningUser" in criteria else None

        hits = []
        for item in CATALOGUE:
            if not fnmatch.fnmatch(_prop(item, "object_name").lower(), pattern):
                continue
            if type_filters and item["type"] not in type_filters:
                continue
            if owner is not None and _prop(item, "owning_user") != owner:
                continue
            hits.append(copy.deepcopy(item))

        limit = search_input.get("maxToReturn") or len(hits)
        hits = hits[:limit]
        return {
            "searchResults": hits,
            "totalFound": len(hits),
            "totalLoaded": len(hits),
            "searchFilterMap": {},
            "searchFilterCategories": [],
            "defaultFilterFieldDisplayCount": 5,
            "serviceData": {},
        }

    @staticmethod
    def _load_objects(body: dict) -> dict:
        uids = [obj.get("uid") for obj in body.get("objects", [])]
        found = {item["uid"]: copy.deepcopy(item) for item in CATALOGUE if item["uid"] in uids}
        missing = [uid for uid in uids if uid not in found]
        service_data: dict[str, Any] = {"plain": list(found)}
        if missing:
            service_data["partialErrors"] = [
                {"uid": uid, "errorValues": [{"code": 515024, "level": 3, "message": f"Object {uid} not found"}]}
                for uid in missing
            ]
        return {"modelObjects": found, "ServiceData": service_data}

    def _create(self, body: dict) -> dict:
        created = []
        for entry in body.get("createInput", []):
            uid = f"new-item-{next(self._created):03d}"
            props = {}
            for name, value in entry.get("propertyNameValues", {}).items():
                values = as_list(value)
                props[name] = values[0] if values else ""
            created.append({"uid": uid, "type": entry.get("boName", "Item"), "properties": props})
        return {"output": [{"objects": created}], "ServiceData": {"created": [obj["uid"] for obj in created]}}

    @staticmethod
    def _update(body: dict) -> dict:
        updated = [entry.get("object") for entry in body.get("objects", [])]
        return {"ServiceData": {"updated": updated}}

    @staticmethod
    def _type_descriptions(body: dict) -> dict:
        return {
            "types": [
                {"name": name, "displayName": name, "parentTypeName": "" if name == "Item" else "Item"}
                for name in ITEM_TYPES
            ]
        }
