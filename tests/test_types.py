"""Tests for type definitions."""

import pytest

from fivetran_automation.errors import ResponseDecodeError
from fivetran_automation.types import DoneReason, Page, QueryResult


def test_page_from_listing():
    page = Page.from_payload({
        "code": "Success",
        "data": {"items": [{"id": "g1"}, {"id": "g2"}], "next_cursor": "eyJza2lwIjoxfQ"},
    })

    assert [item["id"] for item in page.items] == ["g1", "g2"]
    assert page.next_cursor == "eyJza2lwIjoxfQ"
    assert page.has_next


def test_page_items_are_not_validated():
    page = Page.from_payload({"data": {"items": [{"id": 1, "nested": {"a": [1, 2]}}, "odd"]}})

    assert page.items == [{"id": 1, "nested": {"a": [1, 2]}}, "odd"]
    assert page.next_cursor is None
    assert not page.has_next


def test_page_from_items_object_keeps_document_order():
    page = Page.from_payload({"data": {"items": {"b": {"id": "b"}, "a": {"id": "a"}}, "next_cursor": None}})

    assert page.items == [{"id": "b"}, {"id": "a"}]


@pytest.mark.parametrize("payload", [None, [], {"items": []}, {"data": {}}, {"data": {"items": None}}, {"data": "x"}])
def test_page_rejects_bad_envelopes(payload):
    with pytest.raises(ResponseDecodeError):
        Page.from_payload(payload)


@pytest.mark.parametrize(
    "reason,complete",
    [
        (DoneReason.EXHAUSTED, True),
        (DoneReason.MATCH_FOUND, True),
        (DoneReason.FETCH_FAILED, False),
        (DoneReason.CURSOR_REPEATED, False),
    ],
)
def test_query_result_completeness(reason, complete):
    assert QueryResult(reason=reason).complete is complete
