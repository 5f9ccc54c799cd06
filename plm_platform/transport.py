"""HTTP transport for backend service calls with timeout and error mapping."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from .config import BridgeConfig
from .envelope import build_envelope
from .errors import (
    AppError,
    ErrorType,
    handle_api_error,
    handle_auth_error,
    handle_network_error,
    log_error,
)
from .response_parser import normalize_response
from .session_store import SessionStore
from .utils import new_request_id, redact_secrets

logger = logging.getLogger(__name__)

BASE_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
    "X-Requested-With": "XMLHttpRequest",
}


@dataclass
class TransportResult:
    """Normalised payload plus any session token the response reported."""

    data: Any
    session_id: Optional[str] = None


class Transport(Protocol):
    """Anything that can carry one backend call."""

    async def send(
        self,
        service: str,
        operation: str,
        params: Any,
        *,
        session_id: Optional[str] = None,
    ) -> TransportResult:
        ...


def _log_request(request_id: str, service: str, operation: str, params: Any) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "[%s] REQUEST %s.%s params=%s",
            request_id,
            service,
            operation,
            redact_secrets(params),
        )


class HttpTransport:
    """Sends envelopes to ``<endpoint>/<service>/<operation>`` over HTTP."""

    def __init__(
        self,
        config: BridgeConfig,
        session_store: SessionStore,
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self.session_store = session_store
        self._http_client = http_client

    async def send(
        self,
        service: str,
        operation: str,
        params: Any,
        *,
        session_id: Optional[str] = None,
    ) -> TransportResult:
        """POST one call and return its normalised result.

        Raises:
            AppError: API_TIMEOUT, NETWORK, AUTH_SESSION, API_RESPONSE or
                DATA_PARSING depending on where the call failed.
        """
        endpoint = self.config.url_for(service, operation)
        request_id = new_request_id("req")
        _log_request(request_id, service, operation, params)

        try:
            envelope = build_envelope(service, operation, params, client_id=self.config.client_id)
            headers = self._request_headers(session_id)
            logger.info("[%s] Calling %s", request_id, endpoint)

            response = await self._post(endpoint, envelope.to_dict(), headers, service, operation)
            self._raise_for_status(response, service, operation)

            token = self._session_token(response)
            if token:
                logger.debug("[%s] Session token found in headers (fallback only)", request_id)
            self._store_session_cookie(response)

            payload = self._parse_json(response, service, operation)
            data = normalize_response(service, operation, payload)
            logger.debug("[%s] RESPONSE %s.%s received", request_id, service, operation)
            return TransportResult(data=data, session_id=token)
        except AppError as e:
            logger.error("[%s] %s error in %s.%s: %s", request_id, e.error_type.value, service, operation, e.message)
            raise
        except Exception as e:
            api_error = handle_api_error(e, f"{service}.{operation}")
            log_error(api_error, f"API call to {service}.{operation}")
            raise api_error from e

    def _request_headers(self, session_id: Optional[str]) -> dict[str, str]:
        headers = {**BASE_HEADERS, **dict(self.config.extra_headers)}
        if session_id:
            headers["Authorization"] = f"Session {session_id}"
        cookie = self.session_store.get()
        if cookie is not None:
            headers["Cookie"] = cookie.header_value()
        return headers

    async def _post(
        self,
        endpoint: str,
        body: dict[str, Any],
        headers: dict[str, str],
        service: str,
        operation: str,
    ) -> httpx.Response:
        timeout = self.config.timeout_seconds
        try:
            if self._http_client is not None:
                return await asyncio.wait_for(
                    self._http_client.post(endpoint, json=body, headers=headers),
                    timeout=timeout,
                )
            async with httpx.AsyncClient(timeout=timeout) as client:
                return await asyncio.wait_for(
                    client.post(endpoint, json=body, headers=headers),
                    timeout=timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise AppError(
                f"Request timeout after {self.config.timeout_ms}ms",
                ErrorType.API_TIMEOUT,
                e,
                {"service": service, "operation": operation},
            ) from e
        except httpx.TransportError as e:
            raise handle_network_error(
                e,
                f"{service}.{operation}",
                {"service": service, "operation": operation, "endpoint": endpoint},
            ) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, service: str, operation: str) -> None:
        if response.is_success:
            return

        status = response.status_code
        detail = response.text
        reason = response.reason_phrase
        context = {"status": status, "response_text": detail}
        logger.error("API error: %s %s", status, reason)

        if status in (401, 403):
            cause = httpx.HTTPStatusError(f"{status} {reason}", request=response.request, response=response)
            raise handle_auth_error(cause, f"{service}.{operation}", context) from cause
        if status == 404:
            raise AppError(f"Service not found: {service}.{operation}", ErrorType.API_RESPONSE, None, context)
        if status >= 500:
            raise AppError(f"Server error: {reason}", ErrorType.API_RESPONSE, None, context)
        raise AppError(f"Backend API error: {status} {reason}", ErrorType.API_RESPONSE, None, context)

    def _session_token(self, response: httpx.Response) -> Optional[str]:
        for name in self.config.session_header_names:
            value = response.headers.get(name)
            if value:
                return value
        return None

    def _store_session_cookie(self, response: httpx.Response) -> None:
        for header in response.headers.get_list("set-cookie"):
            for cookie in header.split(","):
                name, _, value = cookie.split(";", 1)[0].partition("=")
                name = name.strip()
                if name in self.config.session_cookie_names and value.strip():
                    logger.debug("Found %s cookie in response", name)
                    self.session_store.set(name, value.strip())

    @staticmethod
    def _parse_json(response: httpx.Response, service: str, operation: str) -> Any:
        raw = response.text
        if not raw.strip():
            return {}
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise AppError(
                "Failed to parse response as JSON",
                ErrorType.DATA_PARSING,
                e,
                {"service": service, "operation": operation, "response_text": raw},
            ) from e
        return {} if payload is None else payload
