"""Tests for core.text module."""

import pytest
from structlog.testing import capture_logs

from valuespine.core.errors import InputTooLongError, ParseError
from valuespine.core.text import as_text, check_length, reject


class TestAsText:
    def test_str(self):
        assert as_text("1.2.3") == ("1.2.3", 5)

    @pytest.mark.parametrize("data", [b"abc", bytearray(b"abc"), memoryview(b"abc")])
    def test_bytes_like(self, data):
        assert as_text(data) == ("abc", 3)

    def test_length_is_byte_count(self):
        text, length = as_text("é".encode())
        assert text == "é"
        assert length == 2

    def test_str_length_is_character_count(self):
        assert as_text("é") == ("é", 1)

    def test_invalid_utf8_survives_as_surrogate(self):
        text, length = as_text(b"a\xffb")
        assert text == "a\udcffb"
        assert length == 3

    @pytest.mark.parametrize("data", [None, 12, 1.5, ["1.2.3"]])
    def test_unsupported(self, data):
        with pytest.raises(TypeError, match="expected str or bytes-like input"):
            as_text(data)


class TestCheckLength:
    def test_within_limit(self):
        check_length("sem", "parse", 4, 4)

    def test_zero_disables(self):
        check_length("sem", "parse", 10**6, 0)

    def test_too_long(self):
        with pytest.raises(ParseError) as exc_info:
            check_length("sem", "parse", 5, 4)
        assert str(exc_info.value) == "sem.parse: input too long (5 > 4)"
        assert isinstance(exc_info.value.cause, InputTooLongError)
        assert exc_info.value.input == ""


class TestReject:
    def test_returns_error(self):
        error = reject("uu", "parse", "x")
        assert isinstance(error, ParseError)
        assert str(error) == 'uu.parse: "x": invalid format'

    def test_logs_at_debug(self):
        with capture_logs() as logs:
            reject("roman", "parse", "MMMMM")
        assert logs == [
            {
                "event": "parse_rejected",
                "namespace": "roman",
                "func": "parse",
                "reason": "invalid roman number",
                "log_level": "debug",
            }
        ]

    def test_log_never_contains_input(self):
        with capture_logs() as logs:
            reject("sem", "parse", "secret-input", InputTooLongError(12, 4))
        assert "secret-input" not in repr(logs)
        assert logs[0]["reason"] == "input too long (12 > 4)"
