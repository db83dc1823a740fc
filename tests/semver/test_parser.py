"""Tests for valuespine.semver.parser.

Covers:
- Plain, tag and either-form entry points
- Form gating errors
- Grammar and field range errors
- Input length ceiling
- Byte-like input
"""

import pytest

from tests._support import assert_parse_fails
from valuespine import semver
from valuespine.core.errors import (
    ExpectedTagFormError,
    InputTooLongError,
    InvalidMajorError,
    InvalidMinorError,
    InvalidPatchError,
    ParseError,
    TagFormNotAllowedError,
    has_cause,
)
from valuespine.semver import Form, Rule, Ver, VersionStrategy, default_parser

VALID_VERSIONS = {
    "0.0.0": Ver(0, 0, 0),
    "0.0.1-alpha": Ver(0, 0, 1, "alpha"),
    "0.0.0+abcd": Ver(0, 0, 0, "", "abcd"),
    "1.0.0": Ver(1, 0, 0),
    "1.2.3-x+y": Ver(1, 2, 3, "x", "y"),
    "1.0.0-alpha.1.x-y": Ver(1, 0, 0, "alpha.1.x-y"),
    "1.0.0+001.exp-sha.5114f85": Ver(1, 0, 0, "", "001.exp-sha.5114f85"),
    "18446744073709551615.0.0": Ver(2**64 - 1, 0, 0),
}

INVALID_VERSIONS = [
    "0",
    "1",
    "1.0",
    "1.0.0.0",
    "01.0.0",
    "1.00.0",
    "1.0.0-",
    "1.0.0+",
    "1.0.0-01",
    "1.0.0-a..b",
    "1.0.0-*",
    "1.0.0\n",
    " 1.0.0",
    "x",
]


class TestParseVersion:
    """Plain form only."""

    @pytest.mark.parametrize("text,expected", VALID_VERSIONS.items())
    def test_valid(self, text, expected):
        assert semver.parse_version(text) == expected

    @pytest.mark.parametrize("text", INVALID_VERSIONS)
    def test_invalid(self, text):
        error = assert_parse_fails(semver.parse_version, text)
        assert error.func == "parse_version"

    def test_tag_form_not_allowed(self):
        assert_parse_fails(
            semver.parse_version,
            "v1.2.3",
            'sem.parse_version: "v1.2.3": tag form not allowed',
            TagFormNotAllowedError,
        )

    def test_empty_input(self):
        assert_parse_fails(semver.parse_version, "", "sem.parse_version: invalid version")

    def test_grammar_mismatch_is_generic(self):
        error = assert_parse_fails(semver.parse_version, "1.0", 'sem.parse_version: "1.0": invalid version')
        assert error.cause is None


class TestParseTag:
    """Tag form only."""

    @pytest.mark.parametrize("text,expected", VALID_VERSIONS.items())
    def test_valid(self, text, expected):
        assert semver.parse_tag("v" + text) == expected

    def test_expected_tag_form(self):
        assert_parse_fails(
            semver.parse_tag,
            "1.2.3",
            'sem.parse_tag: "1.2.3": expected tag form',
            ExpectedTagFormError,
        )

    def test_bare_tag_marker(self):
        assert_parse_fails(semver.parse_tag, "v", 'sem.parse_tag: "v": invalid version')

    def test_upper_case_marker_is_not_a_tag(self):
        assert_parse_fails(semver.parse_tag, "V1.2.3", cause=ExpectedTagFormError)


class TestParse:
    """Either form."""

    @pytest.mark.parametrize("text,expected", VALID_VERSIONS.items())
    def test_accepts_both_forms(self, text, expected):
        assert semver.parse(text) == expected
        assert semver.parse("v" + text) == expected

    @pytest.mark.parametrize("text", INVALID_VERSIONS)
    def test_invalid(self, text):
        assert_parse_fails(semver.parse, text)

    def test_tag_zero(self):
        v = semver.parse("v0.0.0")
        assert v == Ver()
        assert v.string_tag() == "v0.0.0"


class TestFieldRange:
    """Fields beyond 64 bits name the offending field."""

    def test_invalid_major(self):
        assert_parse_fails(
            semver.parse_version,
            "1000000000000000000000000000000.2.3",
            'sem.parse_version: "1000000000000000000000000000000.2.3": invalid major',
            InvalidMajorError,
        )

    def test_invalid_minor(self):
        assert_parse_fails(
            semver.parse_version,
            "1.2000000000000000000000000000000.3",
            'sem.parse_version: "1.2000000000000000000000000000000.3": invalid minor',
            InvalidMinorError,
        )

    def test_invalid_patch(self):
        assert_parse_fails(
            semver.parse_version,
            "1.2.3000000000000000000000000000000",
            'sem.parse_version: "1.2.3000000000000000000000000000000": invalid patch',
            InvalidPatchError,
        )

    def test_one_past_uint64(self):
        assert_parse_fails(semver.parse, "18446744073709551616.0.0", cause=InvalidMajorError)

    @pytest.mark.parametrize(
        "text,cause",
        [
            ("1" * 5000 + ".0.0", InvalidMajorError),
            ("0." + "1" * 5000 + ".0", InvalidMinorError),
            ("0.0." + "1" * 5000, InvalidPatchError),
        ],
    )
    def test_huge_field_without_ceiling(self, text, cause):
        s = VersionStrategy(max_input_length=0)
        assert_parse_fails(lambda data: semver.parse(data, strategy=s), text, cause=cause)


class TestInputLength:
    """Length ceiling."""

    def test_too_long_omits_input(self):
        s = VersionStrategy(max_input_length=4)
        error = assert_parse_fails(
            lambda data: semver.parse(data, strategy=s),
            "xxxxx",
            "sem.parse: input too long (5 > 4)",
            InputTooLongError,
        )
        assert "xxxxx" not in str(error)
        assert error.input == ""

    def test_exactly_at_ceiling(self):
        s = VersionStrategy(max_input_length=len("1.2.3-a"))
        assert semver.parse("1.2.3-a", strategy=s) == Ver(1, 2, 3, "a")

    def test_one_past_ceiling(self):
        s = VersionStrategy(max_input_length=len("1.2.3-a") - 1)
        assert_parse_fails(lambda data: semver.parse(data, strategy=s), "1.2.3-a", cause=InputTooLongError)

    def test_zero_disables_check(self):
        s = VersionStrategy(max_input_length=0)
        text = "1.0.0-" + "a" * 5000
        assert semver.parse(text, strategy=s).pre_release == "a" * 5000

    def test_default_ceiling(self):
        assert_parse_fails(semver.parse, "1.0.0-" + "a" * 1019, cause=InputTooLongError)
        assert semver.parse("1.0.0-" + "a" * 1018).major == 1

    def test_ceiling_from_environment(self, monkeypatch):
        monkeypatch.setenv("VALUESPINE_SEMVER_MAX_INPUT_LENGTH", "4")
        assert_parse_fails(semver.parse, "1.2.3", "sem.parse: input too long (5 > 4)")

    def test_length_is_checked_before_emptiness(self):
        s = VersionStrategy(max_input_length=1)
        assert_parse_fails(lambda data: semver.parse(data, strategy=s), "vv", cause=InputTooLongError)


class TestByteInput:
    """Byte-like input goes through the same pipeline."""

    @pytest.mark.parametrize("data", [b"1.2.3", bytearray(b"1.2.3"), memoryview(b"1.2.3")])
    def test_bytes_like(self, data):
        assert semver.parse(data) == Ver(1, 2, 3)

    def test_invalid_utf8_is_a_grammar_error(self):
        assert_parse_fails(semver.parse, b"1.2.3-\xff")

    def test_length_counts_bytes(self):
        s = VersionStrategy(max_input_length=8)
        assert_parse_fails(
            lambda data: semver.parse(data, strategy=s),
            "1.0.0-é".encode() + b"xx",
            cause=InputTooLongError,
        )

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            semver.parse(123)


class TestParseText:
    """Rule-driven entry point."""

    def test_accepts_both_by_default(self):
        assert semver.parse_text("1.2.3") == semver.parse_text("v1.2.3") == Ver(1, 2, 3)

    def test_disable_tag(self):
        assert semver.parse_text("1.2.3", Rule.DISABLE_TAG) == Ver(1, 2, 3)
        assert_parse_fails(
            lambda data: semver.parse_text(data, Rule.DISABLE_TAG),
            "v1.2.3",
            'sem.parse_text: "v1.2.3": tag form not allowed',
        )

    def test_rule_from_strategy(self):
        s = VersionStrategy(rule=Rule.DISABLE_TAG)
        with pytest.raises(ParseError):
            semver.parse_text("v1.2.3", strategy=s)

    def test_invalid(self):
        assert_parse_fails(semver.parse_text, "x", 'sem.parse_text: "x": invalid version')


class TestDefaultParser:
    """The raw parser attributes errors to the caller's function name."""

    def test_func_name_in_error(self):
        with pytest.raises(ParseError) as exc_info:
            default_parser("x", "", Form(0))
        assert str(exc_info.value) == "sem.x: invalid version"

    def test_forms(self):
        assert default_parser("x", "1.2.3-x+y", Form.VERSION) == Ver(1, 2, 3, "x", "y")
        assert default_parser("x", "v1.2.3-x+y", Form.TAG) == Ver(1, 2, 3, "x", "y")

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            default_parser("x", "1.2", Form.ANY)

    def test_error_carries_context(self):
        with pytest.raises(ParseError) as exc_info:
            default_parser("parse_tag", "1.2.3", Form.TAG)
        error = exc_info.value
        assert error.namespace == "sem"
        assert error.func == "parse_tag"
        assert error.input == "1.2.3"
        assert has_cause(error, ExpectedTagFormError)
        assert error.to_dict()["context"] == {"namespace": "sem", "func": "parse_tag", "input": "1.2.3"}
