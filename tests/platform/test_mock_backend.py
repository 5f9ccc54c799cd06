"""Tests for the in-memory backend."""

import pytest

from contracts.v1.schemas import SearchResultSet, SessionContract
from plm_platform import payloads
from plm_platform.errors import AppError, ErrorType
from plm_platform.mock_backend import MOCK_SESSION_ID, MOCK_USER_UID, OTHER_USER_UID, MockTransport


@pytest.fixture
def backend():
    return MockTransport()


@pytest.mark.asyncio
@pytest.mark.parametrize("user,password", [("admin", "admin"), ("jdoe", "jdoe")])
async def test_login_accepts_known_credentials(backend, user, password):
    result = await backend.send("Core-2011-06-Session", "login", {"username": user, "password": password})
    assert isinstance(result.data, SessionContract)
    assert result.data.user_id == user
    assert result.data.session_id == MOCK_SESSION_ID


@pytest.mark.asyncio
async def test_login_rejects_bad_credentials(backend):
    with pytest.raises(AppError) as exc_info:
        await backend.send("Core-2011-06-Session", "login", {"username": "admin", "password": "wrong"})
    assert exc_info.value.error_type is ErrorType.AUTH_SESSION
    assert "wrong" not in str(exc_info.value.context)


@pytest.mark.asyncio
async def test_legacy_login(backend):
    result = await backend.send("Core-2006-03-Session", "login", {"username": "admin", "password": "admin"})
    assert result.data.user_name == "Administrator"
    assert result.data.soa_version == "12.0"
    assert (result.data.group_id, result.data.role_name) == ("group-1", "Engineer")


@pytest.mark.asyncio
async def test_login_still_validates_envelope(backend):
    with pytest.raises(AppError) as exc_info:
        await backend.send("Core-2011-06-Session", "login", {"username": "admin"})
    assert exc_info.value.error_type is ErrorType.DATA_VALIDATION


@pytest.mark.asyncio
async def test_search_by_name(backend):
    result = await backend.send("Query-2012-10-Finder", "performSearch", payloads.item_search("abc", None, 10))
    assert isinstance(result.data, SearchResultSet)
    assert {r.uid for r in result.data.search_results} == {"item-001", "doc-001"}


@pytest.mark.asyncio
async def test_search_with_type_filter(backend):
    result = await backend.send(
        "Query-2012-10-Finder", "performSearch", payloads.item_search("abc", "Document", 10)
    )
    assert [r.uid for r in result.data.search_results] == ["doc-001"]


@pytest.mark.asyncio
async def test_search_honours_limit(backend):
    result = await backend.send("Query-2012-10-Finder", "performSearch", payloads.item_search("*", None, 2))
    assert len(result.data.search_results) == 2


@pytest.mark.asyncio
async def test_saved_search_shares_the_catalogue(backend):
    result = await backend.send(
        "Query-2010-04-SavedQuery", "performSavedSearch", payloads.last_created_search(10)
    )
    assert all(r.type == "Item" for r in result.data.search_results)
    assert len(result.data.search_results) == 3


@pytest.mark.asyncio
async def test_session_info_reports_user_uid(backend):
    result = await backend.send("Core-2007-01-Session", "getTCSessionInfo", {})
    assert result.data["user"]["uid"] == MOCK_USER_UID


@pytest.mark.asyncio
async def test_load_objects_reports_missing(backend):
    result = await backend.send("Core-2007-09-DataManagement", "loadObjects", payloads.load_item("nope"))
    assert result.data["modelObjects"] == {}
    assert result.data["ServiceData"]["partialErrors"][0]["uid"] == "nope"


@pytest.mark.asyncio
async def test_create_assigns_sequential_uids(backend):
    params = payloads.create_item("tests", "Item", "Widget", "A widget", {"object_type": "Item"})
    first = await backend.send("Core-2010-09-DataManagement", "createRelateAndSubmitObjects", params)
    second = await backend.send("Core-2010-09-DataManagement", "createRelateAndSubmitObjects", params)
    created = first.data["output"][0]["objects"][0]
    assert created["uid"] == "new-item-001"
    assert created["properties"]["object_name"] == "Widget"
    assert second.data["output"][0]["objects"][0]["uid"] == "new-item-002"


@pytest.mark.asyncio
async def test_unknown_pair_is_api_response(backend):
    with pytest.raises(AppError) as exc_info:
        await backend.send("Custom-2020-01-Thing", "doIt", {})
    assert exc_info.value.error_type is ErrorType.API_RESPONSE


@pytest.mark.asyncio
async def test_calls_are_recorded(backend):
    await backend.send("Core-2008-03-Session", "getFavorites", {})
    await backend.send("Core-2007-06-Session", "logout", {})
    assert backend.calls == [
        ("Core-2008-03-Session", "getFavorites"),
        ("Core-2007-06-Session", "logout"),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "owner,expected",
    [
        (MOCK_USER_UID, ["item-001", "item-002"]),
        (OTHER_USER_UID, ["item-003"]),
        ("nobody", []),
    ],
)
async def test_owned_items_search_filters_by_owner(backend, owner, expected):
    result = await backend.send("Query-2012-10-Finder", "performSearch", payloads.owned_items_search(owner))
    assert [r.uid for r in result.data.search_results] == expected
