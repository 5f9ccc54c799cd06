"""
Shared fixtures for plm-bridge tests.
"""

import httpx
import pytest
import pytest_asyncio

from plm_platform.config import BridgeConfig
from plm_platform.facade import PlmFacade
from plm_platform.mock_backend import MockTransport
from plm_platform.session_store import SessionStore
from plm_platform.transport import HttpTransport, TransportResult

ENDPOINT = "http://plm.local/tc/JsonRestServices"


@pytest.fixture
def mock_config():
    return BridgeConfig(mock_mode=True)


@pytest.fixture
def http_config():
    return BridgeConfig(endpoint=ENDPOINT, timeout_ms=2000)


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def mock_transport():
    """In-memory backend; ``.calls`` records every (service, operation)."""
    return MockTransport()


@pytest.fixture
def mock_facade(mock_config, session_store, mock_transport):
    """Facade over the in-memory backend, logged out."""
    return PlmFacade(mock_config, session_store=session_store, transport=mock_transport)


@pytest_asyncio.fixture
async def logged_in_facade(mock_facade):
    """Facade over the in-memory backend, logged in as admin."""
    result = await mock_facade.login({"username": "admin", "password": "admin"})
    assert result.ok
    return mock_facade


class RecordingTransport:
    """Transport double that counts calls and replays scripted results.

    Each script entry is either a ``TransportResult`` or an exception to raise.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.calls = []

    async def send(self, service, operation, params, *, session_id=None):
        self.calls.append((service, operation, params, session_id))
        outcome = self.script.pop(0) if self.script else TransportResult(data={})
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def recording_transport():
    """Factory: ``recording_transport(result_or_error, ...)``."""
    return RecordingTransport


@pytest.fixture
def make_http_transport(http_config, session_store):
    """Build an ``HttpTransport`` whose HTTP traffic goes to ``handler``.

    Usage:
        transport, requests = make_http_transport(lambda request: httpx.Response(200, json={}))
    """

    def _make(handler, config=None):
        requests = []

        def _record(request):
            requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(_record))
        transport = HttpTransport(config or http_config, session_store, http_client=client)
        return transport, requests

    return _make

