"""Tests for valuespine.date.

Covers:
- Construction, normalization and range
- Arithmetic
- Extended/basic text forms and their parser
- Binary form
- Range filters
"""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from tests._support import assert_parse_fails, assert_text_round_trip
from valuespine import date as vdate
from valuespine.core.errors import (
    BasicFormatDisabledError,
    DateRangeError,
    InputTooLongError,
    InvalidLengthError,
    InvalidRangeError,
    MarshalError,
    ParseError,
    UnsupportedVersionError,
    has_cause,
    quote,
)
from valuespine.core.protocols import BinaryMarshaler, TextMarshaler
from valuespine.date import Date, DateStrategy, Format, Month, Rule


class TestConstruction:
    def test_zero(self):
        assert Date() == vdate.ZERO == Date(1, 1, 1)
        assert vdate.ZERO.is_zero()
        assert not Date(2020, 1, 1).is_zero()

    def test_invalid_day_rejected(self):
        with pytest.raises(DateRangeError):
            Date(2021, 2, 29)

    def test_year_out_of_range(self):
        with pytest.raises(DateRangeError):
            Date(0, 1, 1)
        with pytest.raises(DateRangeError):
            Date(10000, 1, 1)

    def test_ymd(self):
        assert Date(2002, 8, 7).ymd() == (2002, Month.AUGUST, 7)

    @pytest.mark.parametrize(
        "args,expected",
        [
            ((2002, Month.AUGUST, 7), Date(2002, 8, 7)),
            ((2020, 2, 30), Date(2020, 3, 1)),
            ((2020, 13, 1), Date(2021, 1, 1)),
            ((2020, 0, 1), Date(2019, 12, 1)),
            ((2020, 1, 0), Date(2019, 12, 31)),
            ((2020, 1, 32), Date(2020, 2, 1)),
            ((2020, -11, 1), Date(2019, 1, 1)),
        ],
    )
    def test_new_normalizes(self, args, expected):
        assert vdate.new(*args) == expected

    def test_new_out_of_range(self):
        with pytest.raises(DateRangeError):
            vdate.new(9999, 12, 32)

    def test_ordering(self):
        assert Date(2020, 1, 31) < Date(2020, 2, 1) < Date(2021, 1, 1)
        assert sorted([Date(2021, 1, 1), Date(2020, 2, 1)]) == [Date(2020, 2, 1), Date(2021, 1, 1)]


class TestConversions:
    def test_from_date(self):
        assert vdate.from_date(date(2002, 8, 7)) == Date(2002, 8, 7)
        assert Date(2002, 8, 7).to_date() == date(2002, 8, 7)

    def test_to_datetime_is_utc_midnight(self):
        assert Date(2002, 8, 7).to_datetime() == datetime(2002, 8, 7, tzinfo=UTC)

    def test_from_datetime_keeps_local_date(self):
        dt = datetime(2002, 8, 7, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert vdate.from_datetime(dt) == Date(2002, 8, 7)

    def test_today(self):
        assert vdate.today() == vdate.from_date(date.today())


class TestArithmetic:
    def test_add(self):
        assert Date(2002, 8, 7).add(2, 2, 1) == Date(2004, 10, 8)
        assert Date(2020, 1, 31).add(months=1) == Date(2020, 3, 2)
        assert Date(2020, 3, 1).add(days=-1) == Date(2020, 2, 29)

    def test_add_duration(self):
        assert Date(2020, 12, 31).add_duration(timedelta(days=1)) == Date(2021, 1, 1)
        assert Date(2020, 1, 1).add_duration(timedelta(hours=23)) == Date(2020, 1, 1)
        assert Date(2020, 1, 1).add_duration(timedelta(hours=-1)) == Date(2019, 12, 31)

    def test_add_duration_overflow(self):
        with pytest.raises(DateRangeError):
            Date(9999, 12, 31).add_duration(timedelta(days=1))

    def test_sub(self):
        assert Date(2020, 3, 1).sub(Date(2020, 2, 1)) == timedelta(days=29)
        assert Date(2020, 3, 1).days_between(Date(2020, 2, 1)) == 29
        assert Date(2020, 2, 1).days_between(Date(2020, 3, 1)) == -29


class TestText:
    def test_str(self):
        assert str(Date(2002, 8, 7)) == "2002-08-07"
        assert str(vdate.ZERO) == "0001-01-01"

    def test_format(self):
        d = Date(2002, 8, 7)
        assert f"{d}" == f"{d:s}" == "2002-08-07"
        assert f"{d:b}" == "20020807"
        assert d.to_string(Format.BASIC) == "20020807"
        with pytest.raises(ValueError):
            format(d, "x")

    def test_default_formatter_appends(self):
        buf = bytearray(b"date=")
        vdate.default_formatter(buf, Date(2002, 8, 7), Format.BASIC)
        assert buf == b"date=20020807"

    @pytest.mark.parametrize("d", [Date(), Date(2002, 8, 7), Date(9999, 12, 31)])
    def test_round_trip(self, d):
        assert assert_text_round_trip(d, vdate.parse) == str(d).encode()

    def test_protocols(self):
        assert isinstance(vdate.ZERO, TextMarshaler)
        assert isinstance(vdate.ZERO, BinaryMarshaler)


class TestParse:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2002-08-07", Date(2002, 8, 7)),
            ("20020807", Date(2002, 8, 7)),
            ("2020-02-30", Date(2020, 3, 1)),
            ("2020-01-00", Date(2019, 12, 31)),
            (b"2002-08-07", Date(2002, 8, 7)),
        ],
    )
    def test_valid(self, text, expected):
        assert vdate.parse(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["2020-0807", "202008-07", "2020-13-01", "2020-08-32", "20-08-07", "2020/08/07", "2020-8-07", "x"],
    )
    def test_invalid(self, text):
        error = assert_parse_fails(vdate.parse, text, f"date.parse: {quote(text)}: invalid date")
        assert error.cause is None

    def test_empty(self):
        assert_parse_fails(vdate.parse, "", "date.parse: invalid date")

    def test_too_long(self):
        assert_parse_fails(
            vdate.parse, "2020-08-070", "date.parse: input too long (11 > 10)", InputTooLongError
        )

    def test_year_zero(self):
        assert_parse_fails(
            vdate.parse, "0000-01-01", 'date.parse: "0000-01-01": date out of range', DateRangeError
        )

    def test_disable_basic(self):
        assert vdate.parse("2002-08-07", Rule.DISABLE_BASIC) == Date(2002, 8, 7)
        assert_parse_fails(
            lambda data: vdate.parse(data, Rule.DISABLE_BASIC),
            "20020807",
            'date.parse: "20020807": basic format disabled',
            BasicFormatDisabledError,
        )

    def test_rule_from_strategy(self):
        with vdate.override_strategy(DateStrategy(rule=Rule.DISABLE_BASIC)):
            with pytest.raises(ParseError):
                vdate.parse("20020807")
            with pytest.raises(ParseError) as exc_info:
                Date.unmarshal_text(b"20020807")
        assert exc_info.value.func == "Date.unmarshal_text"

    def test_longer_year_with_raised_limit(self):
        s = DateStrategy(max_input_length=0)
        assert_parse_fails(lambda data: vdate.parse(data, strategy=s), "10000-01-01", cause=DateRangeError)

    def test_limit_from_environment(self, monkeypatch):
        monkeypatch.setenv("VALUESPINE_DATE_MAX_INPUT_LENGTH", "8")
        assert vdate.parse("20020807") == Date(2002, 8, 7)
        assert_parse_fails(vdate.parse, "2002-08-07", cause=InputTooLongError)


class TestBinary:
    def test_layout(self):
        assert Date(2002, 8, 7).marshal_binary() == b"\x01\x00\x00\x07\xd2\x08\x07"

    @pytest.mark.parametrize("d", [Date(), Date(2002, 8, 7), Date(9999, 12, 31)])
    def test_round_trip(self, d):
        data = d.marshal_binary()
        assert len(data) == 7
        assert Date.unmarshal_binary(data) == d

    def test_empty(self):
        with pytest.raises(MarshalError) as exc_info:
            Date.unmarshal_binary(b"")
        assert str(exc_info.value) == "date.Date.unmarshal_binary: invalid length: empty data"
        assert has_cause(exc_info.value, InvalidLengthError)

    def test_unsupported_version_checked_first(self):
        with pytest.raises(MarshalError) as exc_info:
            Date.unmarshal_binary(b"\x02")
        assert str(exc_info.value) == "date.Date.unmarshal_binary: unsupported version: expected 1 instead of 2"
        assert has_cause(exc_info.value, UnsupportedVersionError)

    def test_wrong_length(self):
        with pytest.raises(MarshalError) as exc_info:
            Date.unmarshal_binary(b"\x01\x00\x00\x07\xd2\x08")
        assert str(exc_info.value) == "date.Date.unmarshal_binary: invalid length: expected 7 instead of 6"

    def test_out_of_range_fields(self):
        with pytest.raises(MarshalError) as exc_info:
            Date.unmarshal_binary(b"\x01\x00\x00\x07\xd2\x0d\x07")
        assert has_cause(exc_info.value, DateRangeError)


class TestFilters:
    FROM = Date(2020, 8, 5)
    TO = Date(2020, 8, 7)

    def test_no_filter(self):
        f = vdate.filter_from_to(None, None)
        assert isinstance(f, vdate.NoFilter)
        assert f.contains(vdate.ZERO)

    def test_single_date(self):
        f = vdate.filter_from_to(self.FROM, self.FROM)
        assert isinstance(f, vdate.DateFilter)
        assert f.contains(self.FROM)
        assert not f.contains(self.TO)

    def test_from_only(self):
        f = vdate.filter_from_to(self.FROM, None)
        assert f.contains(self.FROM)
        assert f.contains(Date(9999, 1, 1))
        assert not f.contains(Date(2020, 8, 4))

    def test_to_only(self):
        f = vdate.filter_from_to(None, self.TO)
        assert f.contains(vdate.ZERO)
        assert f.contains(self.TO)
        assert not f.contains(Date(2020, 8, 8))

    def test_inclusive_range(self):
        f = vdate.filter_from_to(self.FROM, self.TO)
        assert isinstance(f, vdate.FromToFilter)
        assert [f.contains(Date(2020, 8, day)) for day in range(4, 9)] == [False, True, True, True, False]

    def test_inverted_range(self):
        with pytest.raises(InvalidRangeError) as exc_info:
            vdate.filter_from_to(self.TO, self.FROM)
        assert str(exc_info.value) == "date.filter_from_to: invalid from or to: 2020-08-07 > 2020-08-05"
