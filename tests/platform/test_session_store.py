"""Tests for the session cookie store."""

import threading

from plm_platform.session_store import (
    ASPNET_SESSIONID_COOKIE,
    JSESSIONID_COOKIE,
    SessionCookie,
    SessionStore,
)


def test_empty_store_returns_none():
    assert SessionStore().get() is None


def test_first_writer_wins():
    store = SessionStore()
    assert store.set(JSESSIONID_COOKIE, "cookie-1") is True
    assert store.set(ASPNET_SESSIONID_COOKIE, "body-id") is False
    assert store.get() == SessionCookie(JSESSIONID_COOKIE, "cookie-1")


def test_clear_allows_a_new_writer():
    store = SessionStore()
    store.set(JSESSIONID_COOKIE, "old")
    store.clear()
    assert store.get() is None
    assert store.set(JSESSIONID_COOKIE, "new")
    assert store.get().value == "new"


def test_empty_values_are_ignored():
    store = SessionStore()
    assert store.set(JSESSIONID_COOKIE, "") is False
    assert store.set("", "value") is False
    assert store.get() is None


def test_header_value():
    assert SessionCookie(JSESSIONID_COOKIE, "abc").header_value() == "JSESSIONID=abc"


def test_concurrent_writers_leave_exactly_one_cookie():
    store = SessionStore()
    stored = []

    def _write(i):
        if store.set(JSESSIONID_COOKIE, f"cookie-{i}"):
            stored.append(i)

    threads = [threading.Thread(target=_write, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(stored) == 1
    assert store.get().value == f"cookie-{stored[0]}"


def test_real_cookie_replaces_fallback():
    store = SessionStore()
    assert store.set_fallback(ASPNET_SESSIONID_COOKIE, "body-id") is True
    assert store.get().is_fallback

    assert store.set(JSESSIONID_COOKIE, "real-cookie") is True
    assert store.get() == SessionCookie(JSESSIONID_COOKIE, "real-cookie")
    assert not store.get().is_fallback


def test_fallback_never_replaces_a_held_value():
    store = SessionStore()
    store.set(JSESSIONID_COOKIE, "real-cookie")
    assert store.set_fallback(ASPNET_SESSIONID_COOKIE, "body-id") is False
    assert store.get().value == "real-cookie"

    store.clear()
    store.set_fallback(ASPNET_SESSIONID_COOKIE, "first")
    assert store.set_fallback(ASPNET_SESSIONID_COOKIE, "second") is False
    assert store.get().value == "first"


def test_real_cookie_is_not_replaced_after_fallback_upgrade():
    store = SessionStore()
    store.set_fallback(ASPNET_SESSIONID_COOKIE, "body-id")
    store.set(JSESSIONID_COOKIE, "real-1")
    assert store.set(JSESSIONID_COOKIE, "real-2") is False
    assert store.get().value == "real-1"
