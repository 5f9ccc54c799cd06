"""Tests for request envelope construction."""

import logging

import pytest

from plm_platform.envelope import (
    DEFAULT_CLIENT_ID,
    ServiceOperation,
    build_envelope,
    build_header,
)
from plm_platform.errors import AppError, ErrorType


def test_login_envelope_carries_credentials():
    env = build_envelope("Core-2011-06-Session", "login", {"username": "a", "password": "b"})
    creds = env.body["credentials"]
    assert creds["user"] == "a"
    assert creds["password"] == "b"
    assert creds["locale"] == "en_US"
    assert creds["descrimator"]


def test_discriminator_differs_between_identical_logins():
    params = {"username": "a", "password": "b"}
    first = build_envelope("Core-2011-06-Session", "login", params)
    second = build_envelope("Core-2011-06-Session", "login", params)
    assert first.body["credentials"]["descrimator"] != second.body["credentials"]["descrimator"]


def test_legacy_login_uses_same_body():
    env = build_envelope("Core-2006-03-Session", "login", {"username": "a", "password": "b"})
    assert env.body["credentials"]["user"] == "a"


@pytest.mark.parametrize(
    "params",
    [
        {"username": "a"},
        {"password": "b"},
        {"username": "", "password": "b"},
        None,
    ],
)
def test_login_without_credentials_is_validation_error(params):
    with pytest.raises(AppError) as exc_info:
        build_envelope("Core-2011-06-Session", "login", params)
    assert exc_info.value.error_type is ErrorType.DATA_VALIDATION
    assert "password" not in (exc_info.value.context or {})


def test_logout_body_is_empty():
    env = build_envelope("Core-2007-06-Session", "logout", {"anything": 1})
    assert env.body == {}


def test_search_params_pass_through():
    params = {"searchInput": {"providerName": "Fnd0BaseProvider"}}
    env = build_envelope("Query-2012-10-Finder", "performSearch", params)
    assert env.body == params


def test_unknown_pair_passes_params_through():
    env = build_envelope("Custom-2020-01-Thing", "doIt", {"x": 1})
    assert env.body == {"x": 1}


def test_header_state_flags():
    header = build_header()
    assert header["state"]["stateless"] is True
    assert header["state"]["formatProperties"] is True
    assert header["state"]["clientID"] == DEFAULT_CLIENT_ID
    assert header["policy"] == {}


def test_to_dict_shape():
    env = build_envelope("Core-2007-01-Session", "getTCSessionInfo", {}, client_id="tests")
    payload = env.to_dict()
    assert set(payload) == {"header", "body"}
    assert payload["header"]["state"]["clientID"] == "tests"


def test_redacted_masks_password_only():
    env = build_envelope("Core-2011-06-Session", "login", {"username": "a", "password": "hunter2"})
    redacted = env.redacted()
    assert redacted["body"]["credentials"]["password"] == "***"
    assert redacted["body"]["credentials"]["user"] == "a"
    assert env.body["credentials"]["password"] == "hunter2"


def test_debug_log_never_contains_password(caplog):
    with caplog.at_level(logging.DEBUG, logger="plm_platform.envelope"):
        build_envelope("Core-2011-06-Session", "login", {"username": "a", "password": "hunter2"})
    assert caplog.records
    assert "hunter2" not in caplog.text


def test_service_operation_resolve():
    assert ServiceOperation.resolve("Core-2011-06-Session", "login") is ServiceOperation.LOGIN
    assert ServiceOperation.resolve("Core-2011-06-Session", "nope") is None
    assert ServiceOperation.LOGOUT_2008.is_logout
    assert not ServiceOperation.FINDER_SEARCH.is_login
    assert str(ServiceOperation.FINDER_SEARCH) == "Query-2012-10-Finder.performSearch"
