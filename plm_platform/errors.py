"""Error taxonomy shared by the transport, client and facade layers."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorType(str, Enum):
    DATA_VALIDATION = "DATA_VALIDATION"
    DATA_PARSING = "DATA_PARSING"
    API_RESPONSE = "API_RESPONSE"
    API_TIMEOUT = "API_TIMEOUT"
    AUTH_SESSION = "AUTH_SESSION"
    NETWORK = "NETWORK"
    UNKNOWN = "UNKNOWN"


class AppError(Exception):
    """Typed failure raised anywhere below the facade boundary."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.UNKNOWN,
        original_error: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.original_error = original_error
        self.context = context

    def __str__(self) -> str:
        return self.message


def _wrap(
    error: BaseException,
    context: str,
    label: str,
    error_type: ErrorType,
    details: dict[str, Any] | None = None,
) -> AppError:
    if isinstance(error, AppError):
        return error
    return AppError(
        f"{label} in {context}: {error}",
        error_type,
        error,
        {"context": context, **(details or {})},
    )


def handle_api_error(error: BaseException, context: str) -> AppError:
    """Return ``error`` as an ``AppError``, defaulting to API_RESPONSE."""
    return _wrap(error, context, "API error", ErrorType.API_RESPONSE)


def handle_data_error(error: BaseException, context: str) -> AppError:
    """Return ``error`` as an ``AppError``, defaulting to DATA_PARSING."""
    return _wrap(error, context, "Data error", ErrorType.DATA_PARSING)


def handle_auth_error(error: BaseException, context: str, details: dict[str, Any] | None = None) -> AppError:
    """Return ``error`` as an ``AppError``, defaulting to AUTH_SESSION.

    ``details`` are merged into the new error's context.
    """
    return _wrap(error, context, "Authentication error", ErrorType.AUTH_SESSION, details)


def handle_network_error(error: BaseException, context: str, details: dict[str, Any] | None = None) -> AppError:
    """Return ``error`` as an ``AppError``, defaulting to NETWORK."""
    return _wrap(error, context, "Network error", ErrorType.NETWORK, details)


def log_error(error: BaseException, context: str) -> None:
    """Log ``error`` once, tagged with its taxonomy type."""
    if isinstance(error, AppError):
        logger.error("[%s] %s (context=%s)", error.error_type.value, error.message, context)
    else:
        logger.error("[%s] %s (context=%s)", ErrorType.UNKNOWN.value, error, context)
