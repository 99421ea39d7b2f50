"""Tests for response flattening into dotted keys."""

from __future__ import annotations

import pytest

from webhook_sender.templating.flatten import flatten


def test_nested_object_kept_and_flattened() -> None:
    body = {"user": {"id": 7, "tags": [1, 2]}}
    flat = flatten(body)
    assert flat["user"] == {"id": 7, "tags": [1, 2]}
    assert flat["user.id"] == 7
    assert flat["user.tags"] == [1, 2]
    assert "user.tags.0" not in flat


def test_deep_nesting() -> None:
    flat = flatten({"a": {"b": {"c": "x"}}, "top": 1})
    assert flat == {
        "a": {"b": {"c": "x"}},
        "a.b": {"c": "x"},
        "a.b.c": "x",
        "top": 1,
    }


def test_list_of_objects_not_recursed() -> None:
    flat = flatten({"items": [{"id": 1}]})
    assert flat == {"items": [{"id": 1}]}


@pytest.mark.parametrize("root", [None, "text", 3, [1, {"a": 1}]])
def test_non_mapping_root_is_empty(root: object) -> None:
    assert flatten(root) == {}


def test_empty_nested_object() -> None:
    assert flatten({"meta": {}}) == {"meta": {}}
