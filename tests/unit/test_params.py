"""Tests for positional/named parameter resolution."""

from __future__ import annotations

import pytest

from tests.conftest import make_definition
from webhook_sender.commands.params import (
    MissingRequiredParameterError,
    build_invocation_mapping,
    resolve_named,
    resolve_positional,
)
from webhook_sender.models import OptionSpec, ParameterSpec


def _positional() -> list[ParameterSpec]:
    return [
        ParameterSpec(name="a", required=True),
        ParameterSpec(name="b", default="x"),
    ]


class TestResolvePositional:
    def test_default_fills_missing_argument(self) -> None:
        assert resolve_positional(_positional(), ["v1"]) == {"a": "v1", "b": "x"}

    def test_argument_beats_default(self) -> None:
        assert resolve_positional(_positional(), ["v1", "v2"]) == {"a": "v1", "b": "v2"}

    def test_missing_required_reports_position(self) -> None:
        with pytest.raises(MissingRequiredParameterError) as exc_info:
            resolve_positional(_positional(), [])
        assert exc_info.value.name == "a"
        assert exc_info.value.position == 1
        assert "position 1" in str(exc_info.value)

    def test_optional_without_default_omitted(self) -> None:
        specs = [ParameterSpec(name="a"), ParameterSpec(name="b")]
        assert resolve_positional(specs, ["1"]) == {"a": "1"}

    def test_none_token_treated_as_absent(self) -> None:
        assert resolve_positional(_positional(), ["v1", None]) == {"a": "v1", "b": "x"}

    def test_extra_arguments_ignored(self) -> None:
        assert resolve_positional([ParameterSpec(name="a")], ["1", "2"]) == {"a": "1"}

    def test_numeric_default_kept(self) -> None:
        assert resolve_positional([ParameterSpec(name="n", default=3)], []) == {"n": 3}


class TestResolveNamed:
    def test_provided_option_used(self) -> None:
        specs = [OptionSpec(name="token", option="t")]
        assert resolve_named(specs, {"t": "abc"}) == {"token": "abc"}

    def test_default_used_when_absent(self) -> None:
        specs = [OptionSpec(name="lang", option="lang", default="en")]
        assert resolve_named(specs, {}) == {"lang": "en"}

    def test_missing_required_reports_flag(self) -> None:
        specs = [OptionSpec(name="token", option="token", required=True)]
        with pytest.raises(MissingRequiredParameterError) as exc_info:
            resolve_named(specs, {"token": None})
        assert exc_info.value.position == "token"
        assert "--token" in str(exc_info.value)

    def test_undeclared_options_ignored(self) -> None:
        specs = [OptionSpec(name="token", option="token")]
        assert resolve_named(specs, {"other": "x"}) == {}


class TestBuildInvocationMapping:
    def test_identity_always_present(self) -> None:
        mapping = build_invocation_mapping(make_definition(), "QQ", "42")
        assert mapping == {"QQ": "42"}

    def test_named_overrides_positional(self) -> None:
        definition = make_definition(
            parameters=[{"name": "city"}],
            options=[{"name": "city", "option": "city"}],
        )
        mapping = build_invocation_mapping(
            definition, "QQ", "42", ["Paris"], {"city": "Oslo"},
        )
        assert mapping == {"QQ": "42", "city": "Oslo"}

    def test_identity_not_overridden(self) -> None:
        definition = make_definition(
            parameters=[{"name": "uid"}],
            options=[{"name": "QQ", "option": "as"}],
        )
        mapping = build_invocation_mapping(
            definition, "QQ", "42", ["u"], {"as": "spoofed"},
        )
        assert mapping["QQ"] == "42"
        assert mapping["uid"] == "u"

    def test_missing_required_propagates(self) -> None:
        definition = make_definition(parameters=[{"name": "city", "required": True}])
        with pytest.raises(MissingRequiredParameterError):
            build_invocation_mapping(definition, "QQ", "42")
