"""Mapping helpers between raw backend item records and v1 contracts."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from contracts.v1.schemas import ItemContract, ItemStatus, RawItemRecord

from .response_parser import to_item_record

# Precedence when several statuses are present.
STATUS_PRECEDENCE: tuple[ItemStatus, ...] = ("Released", "In Review", "Obsolete")
DEFAULT_STATUS: ItemStatus = "In Work"


def _values(value: Any) -> Any:
    """Unwrap backend property objects (``{"uiValues": [...], ...}``)."""
    if isinstance(value, dict):
        for key in ("uiValues", "dbValues", "values"):
            if key in value:
                return value[key]
        return value.get("value")
    return value


def property_text(props: dict[str, Any], name: str, default: str = "") -> str:
    """Return a property as a string, or ``default`` when absent or empty."""
    value = _values(props.get(name))
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None or value == "":
        return default
    return str(value)


def derive_status(props: dict[str, Any]) -> ItemStatus:
    """Derive the display status from ``release_status_list``."""
    statuses = _values(props.get("release_status_list"))
    if not statuses:
        return DEFAULT_STATUS
    if isinstance(statuses, str):
        statuses = [statuses]
    if isinstance(statuses, list):
        for status in STATUS_PRECEDENCE:
            if status in statuses:
                return status
    return DEFAULT_STATUS


def record_to_item(record: RawItemRecord | dict[str, Any]) -> ItemContract:
    """Convert a raw item record to an ``ItemContract``.

    Never raises on missing optional fields; each one has a default. A record
    without ``last_mod_date`` gets the conversion time, so only dated records
    convert to identical items every time.
    """
    record = to_item_record(record)
    props = record.properties or {}
    return ItemContract(
        id=record.uid or property_text(props, "item_id"),
        name=property_text(props, "object_name"),
        type=record.type or "Unknown",
        revision=property_text(props, "item_revision_id", "A"),
        owner=property_text(props, "owning_user", "Unknown"),
        modified_date=property_text(props, "last_mod_date")
        or datetime.now(timezone.utc).isoformat(),
        status=derive_status(props),
        description=property_text(props, "object_desc"),
        title=property_text(props, "object_string"),
        thumbnail=property_text(props, "thumbnail") or None,
    )


def records_to_items(records: list[Any]) -> list[ItemContract]:
    return [record_to_item(record) for record in records]
