"""Small helpers shared across the pipeline."""

from __future__ import annotations

import copy
import secrets
import string
import time
from typing import Any

REDACTED = "***"

_ALPHABET = string.ascii_lowercase + string.digits


def new_request_id(prefix: str = "req") -> str:
    """Return a tracing id like ``req_1717000000000_k3x9a``."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(5))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def redact_secrets(payload: Any) -> Any:
    """Deep-copy ``payload`` with every ``password`` value masked."""
    if isinstance(payload, dict):
        return {
            key: (REDACTED if key == "password" and value else redact_secrets(value))
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [redact_secrets(item) for item in payload]
    return copy.copy(payload)


def as_list(value: Any) -> list:
    """Wrap scalars in a list; lists pass through."""
    return value if isinstance(value, list) else [value]
