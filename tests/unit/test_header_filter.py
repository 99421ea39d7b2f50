"""Tests for header rendering and omission of unsatisfied headers."""

from __future__ import annotations

from webhook_sender.templating.headers import filter_and_render


def test_resolved_headers_rendered() -> None:
    headers = filter_and_render(
        {"X-User": "{QQ}", "Content-Type": "application/json"},
        {"QQ": "42"},
    )
    assert headers == {"X-User": "42", "Content-Type": "application/json"}


def test_header_with_missing_placeholder_dropped() -> None:
    headers = filter_and_render(
        {"Authorization": "Bearer {token}", "X-User": "{QQ}"},
        {"QQ": "42"},
    )
    assert headers == {"X-User": "42"}


def test_partially_resolved_header_dropped() -> None:
    headers = filter_and_render({"X-Pair": "{QQ}:{secret}"}, {"QQ": "42"})
    assert headers == {}


def test_optional_header_sent_when_value_present() -> None:
    headers = filter_and_render({"Authorization": "Bearer {token}"}, {"token": "abc"})
    assert headers == {"Authorization": "Bearer abc"}


def test_non_string_values_coerced_and_kept() -> None:
    headers = filter_and_render({"X-Retry": 3, "X-Debug": True}, {})
    assert headers == {"X-Retry": "3", "X-Debug": "true"}


def test_header_names_rendered() -> None:
    headers = filter_and_render({"X-{kind}-Id": "{QQ}"}, {"kind": "Chat", "QQ": "1"})
    assert headers == {"X-Chat-Id": "1"}


def test_empty_or_missing_templates() -> None:
    assert filter_and_render(None, {"QQ": "1"}) == {}
    assert filter_and_render({}, {"QQ": "1"}) == {}


def test_json_literal_header_kept() -> None:
    headers = filter_and_render(
        {"X-Meta": '{"a":1}', "X-Trace": '{"user":"{QQ}"}'},
        {"QQ": "42"},
    )
    assert headers == {"X-Meta": '{"a":1}', "X-Trace": '{"user":"42"}'}
