"""Pydantic contracts for the v1 PLM bridge surface."""

from typing import Any, Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")

ItemStatus = Literal["Released", "In Work", "In Review", "Obsolete"]
ErrorLevel = Literal["INFO", "WARNING", "ERROR"]


class _StrictModel(BaseModel):
    """Base model that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class _FrozenModel(_StrictModel):
    """Strict model that cannot be mutated after construction."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class CredentialsContract(_StrictModel):
    username: str = ""
    password: str = Field(default="", repr=False)


class ServerInfoContract(BaseModel):
    """Backend server metadata; vendors add fields freely."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    UserID: str | None = None
    TcServerID: str | None = None
    Version: str | None = None
    Locale: str | None = None


class SessionContract(_FrozenModel):
    """One authenticated backend login."""

    session_id: str = ""
    user_id: str = ""
    user_name: str = ""
    group: str = ""
    role: str = ""
    group_id: str = ""
    group_name: str = ""
    role_id: str = ""
    role_name: str = ""
    locale: str = ""
    status: str = "OK"
    soa_version: str = ""
    server_info: ServerInfoContract | None = None

    @property
    def is_valid(self) -> bool:
        return bool(self.session_id) and bool(self.user_id)


class LogoutContract(_FrozenModel):
    status: str = "OK"


class RawItemRecord(BaseModel):
    """Backend item, revision or dataset as returned by a search."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    uid: str = ""
    type: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)


class SearchResultSet(_StrictModel):
    search_results: list[RawItemRecord] = Field(default_factory=list)
    total_found: int = 0
    total_loaded: int = 0
    search_filter_map: dict[str, Any] | None = None
    search_filter_categories: list[dict[str, Any]] | None = None
    default_filter_field_display_count: int | None = None
    service_data: Any = None


class ItemContract(_FrozenModel):
    """Canonical display object for an item, revision or dataset."""

    id: str
    name: str = ""
    type: str = "Unknown"
    revision: str = "A"
    owner: str = "Unknown"
    modified_date: str
    status: ItemStatus = "In Work"
    description: str = ""
    title: str = ""
    thumbnail: str | None = None


class ErrorContract(_StrictModel):
    code: str
    level: ErrorLevel = "ERROR"
    message: str


class ResultEnvelope(BaseModel, Generic[T]):
    """Uniform result: exactly one of ``data`` or ``error`` is populated."""

    model_config = ConfigDict(extra="forbid")

    data: Optional[T] = None
    error: Optional[ErrorContract] = None

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.data is None) == (self.error is None):
            raise ValueError("exactly one of 'data' or 'error' must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T) -> "ResultEnvelope[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, code: str, message: str, level: ErrorLevel = "ERROR") -> "ResultEnvelope[T]":
        return cls(error=ErrorContract(code=code, level=level, message=message))


# --- Inbound request models (web shell) ---


class SearchRequest(_StrictModel):
    query: str = ""
    type: str | None = None
    limit: int = 10


class CreateItemRequest(_StrictModel):
    type: str = ""
    name: str = ""
    description: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)


class UpdateItemRequest(_StrictModel):
    properties: dict[str, Any] = Field(default_factory=dict)
