"""Session-aware service-call bridge to a PLM backend."""

__version__ = "1.0.0"

from .config import BridgeConfig, load_config
from .envelope import Envelope, ServiceOperation, build_envelope
from .errors import AppError, ErrorType
from .facade import PlmFacade
from .mappers import record_to_item, records_to_items
from .mock_backend import MockTransport
from .response_parser import normalize_response
from .session_state_machine import SessionPhase
from .session_store import SessionCookie, SessionStore
from .soa_client import SoaClient
from .transport import HttpTransport, Transport, TransportResult

__all__ = [
    "__version__",
    "AppError",
    "BridgeConfig",
    "Envelope",
    "ErrorType",
    "HttpTransport",
    "MockTransport",
    "PlmFacade",
    "ServiceOperation",
    "SessionCookie",
    "SessionPhase",
    "SessionStore",
    "SoaClient",
    "Transport",
    "TransportResult",
    "build_envelope",
    "load_config",
    "normalize_response",
    "record_to_item",
    "records_to_items",
]
