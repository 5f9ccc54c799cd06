"""Request payload builders for the facade operations."""

from __future__ import annotations

from typing import Any, Optional

from .utils import as_list

INFLATED_ATTRIBUTES = (
    "object_name",
    "object_desc",
    "object_string",
    "item_id",
    "item_revision_id",
    "release_status_list",
    "owning_user",
    "creation_date",
    "last_mod_date",
    "items_tag",
    "revision_list",
    "fnd0_master_form",
)

DEFAULT_USER_ATTRIBUTES = (
    "user_id",
    "person",
    "os_username",
    "last_login_time",
    "volume",
    "home_folder",
)

BASE_PROVIDER = "Fnd0BaseProvider"
FULL_TEXT_PROVIDER = "Awp0FullTextSearchProvider"
OWNED_ITEMS_LIMIT = 50


def string_filter(value: str) -> list[dict[str, Any]]:
    return [
        {
            "searchFilterType": "StringFilter",
            "stringValue": value,
            "startDateValue": "",
            "endDateValue": "",
            "startNumericValue": 0,
            "endNumericValue": 0,
            "count": 1,
            "selected": True,
            "startEndRange": "",
        }
    ]


def _search_input(
    *,
    provider: str,
    criteria: dict[str, Any],
    limit: int,
    filters: dict[str, Any],
    sort_field: str,
) -> dict[str, Any]:
    return {
        "searchInput": {
            "providerName": provider,
            "searchCriteria": criteria,
            "startIndex": 0,
            "maxToReturn": limit,
            "maxToLoad": limit,
            "searchFilterMap": filters,
            "searchSortCriteria": [{"fieldName": sort_field, "sortDirection": "DESC"}],
            "searchFilterFieldSortType": "Alphabetical",
            "attributesToInflate": list(INFLATED_ATTRIBUTES),
        }
    }


def item_search(query: str, item_type: Optional[str], limit: int) -> dict[str, Any]:
    """Free-text name search, newest first, optionally narrowed by type."""
    filters = {"Item Type": string_filter(item_type)} if item_type else {}
    return _search_input(
        provider=BASE_PROVIDER,
        criteria={"Name": query},
        limit=limit,
        filters=filters,
        sort_field="creation_date",
    )


def owned_items_search(user_uid: str) -> dict[str, Any]:
    return _search_input(
        provider=FULL_TEXT_PROVIDER,
        criteria={"owningUser": user_uid, "searchString": "*"},
        limit=OWNED_ITEMS_LIMIT,
        filters={"Type": string_filter("Item")},
        sort_field="last_mod_date",
    )


def last_created_search(limit: int) -> dict[str, Any]:
    return _search_input(
        provider=FULL_TEXT_PROVIDER,
        criteria={"searchString": "*"},
        limit=limit,
        filters={"Type": string_filter("Item")},
        sort_field="creation_date",
    )


def load_item(item_id: str) -> dict[str, Any]:
    return {
        "objects": [{"uid": item_id, "type": "Item"}],
        "attributes": list(INFLATED_ATTRIBUTES),
        "options": {
            "withProperties": True,
            "withRelatedObjects": True,
            "withRevisions": True,
        },
    }


def create_item(
    client_id: str,
    item_type: str,
    name: str,
    description: str = "",
    properties: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    values: dict[str, list] = {
        "object_name": [name],
        "object_desc": [description],
    }
    for key, value in (properties or {}).items():
        values[key] = as_list(value)
    return {
        "clientId": client_id,
        "createInput": [{"boName": item_type, "propertyNameValues": values}],
    }


def update_item(item_id: str, properties: dict[str, Any]) -> dict[str, Any]:
    return {
        "objects": [
            {
                "object": item_id,
                "properties": {key: {"values": as_list(value)} for key, value in properties.items()},
            }
        ]
    }


def item_types(type_name: str = "Item") -> dict[str, Any]:
    return {
        "info": [{"typeName": type_name, "typeNamespace": ""}],
        "pref": {"returnSubtypes": True, "returnTypeHierarchy": True},
    }


def user_properties(uid: str, attributes: Optional[list[str]] = None) -> dict[str, Any]:
    return {
        "objects": [{"uid": uid, "className": "User", "type": "User"}],
        "attributes": list(attributes) if attributes else list(DEFAULT_USER_ATTRIBUTES),
    }
