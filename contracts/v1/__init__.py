"""v1 contract schemas for the PLM bridge."""

__version__ = "1.0.0"

from .schemas import (
    CreateItemRequest,
    CredentialsContract,
    ErrorContract,
    ItemContract,
    ItemStatus,
    LogoutContract,
    RawItemRecord,
    ResultEnvelope,
    SearchRequest,
    SearchResultSet,
    ServerInfoContract,
    SessionContract,
    UpdateItemRequest,
)

__all__ = [
    "__version__",
    "CreateItemRequest",
    "CredentialsContract",
    "ErrorContract",
    "ItemContract",
    "ItemStatus",
    "LogoutContract",
    "RawItemRecord",
    "ResultEnvelope",
    "SearchRequest",
    "SearchResultSet",
    "ServerInfoContract",
    "SessionContract",
    "UpdateItemRequest",
]
