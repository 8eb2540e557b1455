"""Tests for request/diagram value coercion."""

import pytest

from voicepath.utils.value_parsing import as_bool, clamped_int, finite_float, safe_int


class TestSafeInt:
    @pytest.mark.parametrize("value, expected", [("42", 42), (" 7 ", 7), (3.9, 3), (True, 1)])
    def test_converts(self, value, expected):
        assert safe_int(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "1.5", [], float("nan"), float("inf")])
    def test_falls_back(self, value):
        assert safe_int(value, default=-1) == -1


class TestClampedInt:
    def test_clamps_and_defaults(self):
        assert clamped_int("500", default=1, minimum=1, maximum=120) == 120
        assert clamped_int(-3, default=1, minimum=1, maximum=120) == 1
        assert clamped_int(None, default=5, minimum=1, maximum=120) == 5
        assert clamped_int("15", default=1, minimum=1, maximum=120) == 15


class TestFiniteFloat:
    @pytest.mark.parametrize("value, expected", [(10, 10.0), ("20", 20.0), (" -2.5 ", -2.5)])
    def test_converts(self, value, expected):
        assert finite_float(value) == expected

    @pytest.mark.parametrize("value", [None, "", "x", "nan", "inf", "-Infinity", float("nan"), {}])
    def test_non_finite_or_invalid_gives_default(self, value):
        assert finite_float(value) == 0.0
        assert finite_float(value, default=3.0) == 3.0


class TestAsBool:
    def test_flags(self):
        assert as_bool("yes") is True
        assert as_bool("0") is False
        assert as_bool(None, default=True) is True
        assert as_bool("maybe") is False
