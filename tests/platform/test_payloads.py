"""Tests for request payload builders."""

from plm_platform import payloads


def test_item_search_shape():
    search = payloads.item_search("bolt*", "Part", 25)["searchInput"]
    assert search["providerName"] == "Fnd0BaseProvider"
    assert search["searchCriteria"] == {"Name": "bolt*"}
    assert search["maxToReturn"] == 25
    assert search["maxToLoad"] == 25
    assert search["searchFilterMap"]["Item Type"][0]["stringValue"] == "Part"
    assert search["searchSortCriteria"] == [{"fieldName": "creation_date", "sortDirection": "DESC"}]
    assert "release_status_list" in search["attributesToInflate"]


def test_item_search_without_type_has_no_filter():
    assert payloads.item_search("bolt", None, 10)["searchInput"]["searchFilterMap"] == {}


def test_owned_items_search():
    search = payloads.owned_items_search("user-uid-9")["searchInput"]
    assert search["providerName"] == "Awp0FullTextSearchProvider"
    assert search["searchCriteria"]["owningUser"] == "user-uid-9"
    assert search["maxToReturn"] == payloads.OWNED_ITEMS_LIMIT
    assert search["searchFilterMap"]["Type"][0]["stringValue"] == "Item"
    assert search["searchSortCriteria"][0]["fieldName"] == "last_mod_date"


def test_last_created_search():
    search = payloads.last_created_search(5)["searchInput"]
    assert search["maxToReturn"] == 5
    assert search["searchSortCriteria"][0] == {"fieldName": "creation_date", "sortDirection": "DESC"}


def test_create_item_wraps_scalars():
    body = payloads.create_item("client", "Part", "Widget", properties={"weight": 3, "tags": ["a", "b"]})
    values = body["createInput"][0]["propertyNameValues"]
    assert body["clientId"] == "client"
    assert body["createInput"][0]["boName"] == "Part"
    assert values["object_name"] == ["Widget"]
    assert values["object_desc"] == [""]
    assert values["weight"] == [3]
    assert values["tags"] == ["a", "b"]


def test_update_item_shape():
    body = payloads.update_item("u1", {"object_desc": "new"})
    assert body == {"objects": [{"object": "u1", "properties": {"object_desc": {"values": ["new"]}}}]}


def test_user_properties_defaults():
    body = payloads.user_properties("u1")
    assert body["objects"][0]["uid"] == "u1"
    assert body["attributes"] == list(payloads.DEFAULT_USER_ATTRIBUTES)
    assert payloads.user_properties("u1", ["person"])["attributes"] == ["person"]


def test_item_types_requests_hierarchy():
    body = payloads.item_types()
    assert body["info"][0]["typeName"] == "Item"
    assert body["pref"]["returnSubtypes"] is True
