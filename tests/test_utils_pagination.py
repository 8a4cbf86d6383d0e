import pytest

from utils.errors import PayloadError
from utils.pagination import get_int, get_items, iter_pages, next_link
from tests.conftest import api_url


def test_iter_pages_follows_next_links(requests_mock, api):
    requests_mock.get(api_url("sections/1/documents"), [
        {"json": {"document": [{"id": 1}], "links": {"next": api_url("sections/1/documents?start=1&limit=1")}}},
        {"json": {"document": [{"id": 2}], "links": {}}},
    ])

    pages = list(iter_pages(api, "sections/1/documents", {"start": 0, "limit": 1}))

    assert [get_items(p, "document")[0]["id"] for p in pages] == [1, 2]
    first, second = requests_mock.request_history
    assert first.qs == {"start": ["0"], "limit": ["1"]}
    assert second.qs == {"start": ["1"], "limit": ["1"]}


def test_iter_pages_rejects_a_next_link_loop(requests_mock, api):
    requests_mock.get(api_url("recent"), json={"update": [], "links": {"next": api_url("recent")}})
    with pytest.raises(PayloadError, match="terminate"):
        list(iter_pages(api, api_url("recent")))


def test_iter_pages_rejects_non_object(requests_mock, api):
    requests_mock.get(api_url("recent"), json=[1, 2])
    with pytest.raises(PayloadError):
        list(iter_pages(api, "recent"))


def test_next_link_absent():
    assert next_link({"links": {"self": "x"}}) is None
    assert next_link({}) is None
    assert next_link({"links": {"next": ""}}) is None


def test_get_items_missing_field_is_empty():
    assert get_items({}, "section") == []
    with pytest.raises(PayloadError):
        get_items({"section": "nope"}, "section")


def test_get_int_accepts_numeric_strings():
    assert get_int({"id": "42"}, "id", "course id") == 42
    assert get_int({"id": 42}, "id", "course id") == 42
    with pytest.raises(PayloadError, match="course id"):
        get_int({"id": "4x"}, "id", "course id")
    with pytest.raises(PayloadError):
        get_int({"id": True}, "id", "course id")
