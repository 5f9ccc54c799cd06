"""Tests for the error taxonomy and shared helpers."""

import logging
import re

from plm_platform.errors import (
    AppError,
    ErrorType,
    handle_api_error,
    handle_auth_error,
    handle_data_error,
    handle_network_error,
    log_error,
)
from plm_platform.utils import as_list, new_request_id, redact_secrets


def test_app_error_str_is_message():
    error = AppError("boom", ErrorType.NETWORK)
    assert str(error) == "boom"
    assert error.context is None


def test_handlers_wrap_with_matching_type():
    cause = ValueError("bad")
    assert handle_api_error(cause, "x").error_type is ErrorType.API_RESPONSE
    assert handle_data_error(cause, "x").error_type is ErrorType.DATA_PARSING
    assert handle_auth_error(cause, "x").error_type is ErrorType.AUTH_SESSION
    wrapped = handle_network_error(cause, "calling backend")
    assert wrapped.error_type is ErrorType.NETWORK
    assert wrapped.original_error is cause
    assert "calling backend" in wrapped.message


def test_handlers_keep_existing_app_errors():
    original = AppError("timeout", ErrorType.API_TIMEOUT)
    assert handle_api_error(original, "x") is original
    assert handle_data_error(original, "x") is original


def test_handler_details_extend_context():
    wrapped = handle_auth_error(ValueError("401"), "search", {"status": 401})
    assert wrapped.context == {"context": "search", "status": 401}


def test_log_error_tags_type(caplog):
    with caplog.at_level(logging.ERROR, logger="plm_platform.errors"):
        log_error(AppError("denied", ErrorType.AUTH_SESSION), "login")
        log_error(RuntimeError("odd"), "search")
    assert "[AUTH_SESSION] denied" in caplog.text
    assert "[UNKNOWN] odd" in caplog.text


def test_request_id_format():
    request_id = new_request_id("client")
    assert re.fullmatch(r"client_\d+_[a-z0-9]{5}", request_id)
    assert new_request_id() != new_request_id()


def test_redact_secrets_is_deep_and_non_mutating():
    payload = {"credentials": {"user": "a", "password": "pw"}, "list": [{"password": "x"}], "password": ""}
    redacted = redact_secrets(payload)
    assert redacted["credentials"]["password"] == "***"
    assert redacted["list"][0]["password"] == "***"
    assert redacted["password"] == ""
    assert payload["credentials"]["password"] == "pw"


def test_as_list():
    assert as_list("a") == ["a"]
    assert as_list(["a"]) == ["a"]
