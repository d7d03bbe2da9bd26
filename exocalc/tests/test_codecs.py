"""Tests for text <-> Measurement codecs and value formatting."""

import math

import pytest

from exocalc.model.codecs import (
    CODECS,
    LinearCodec,
    Log10Codec,
    _parse_float,
    format_value,
)
from exocalc.model.measurement import Measurement


# ---------------------------------------------------------------------------
# format_value
# ---------------------------------------------------------------------------

class TestFormatValue:

    def test_rounds_to_uncertainty_precision(self):
        assert format_value(1.21288287, 1.7e-7) == "1.21288287 ± 0.00000017"
        assert format_value(0.11616, 0.00081) == "0.11616 ± 0.00081"

    def test_integer_precision(self):
        assert format_value(5885.0, 72.0) == "5885 ± 72"

    def test_rounds_above_units(self):
        assert format_value(12346.0, 678.0) == "12350 ± 680"

    def test_exact_value(self):
        assert format_value(2.0, 0.0) == "2 ± 0"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestParseFloat:

    def test_plain_and_exponent(self):
        assert _parse_float("1.5") == 1.5
        assert _parse_float("1.5e-3") == 0.0015

    def test_fortran_d_notation(self):
        assert _parse_float("1.5D-3") == pytest.approx(0.0015)
        assert _parse_float("2d2") == pytest.approx(200.0)

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            _parse_float("abc")


# ---------------------------------------------------------------------------
# Codecs
# ---------------------------------------------------------------------------

class TestLinearCodec:

    def test_decode_with_unit(self):
        m = LinearCodec().decode("1.089", "0.028", "Rsun")
        value, sigma = m.to("Rsun")
        assert value == pytest.approx(1.089)
        assert sigma == pytest.approx(0.028)

    def test_decode_without_uncertainty_is_exact(self):
        m = LinearCodec().decode("2.0", None, "u")
        assert m.uncertainty == 0.0
        assert m.to_value("u") == pytest.approx(2.0)

    def test_decode_dimensionless(self):
        assert LinearCodec().decode("0.11616", "0.00081").is_dimensionless

    def test_encode(self):
        assert LinearCodec().encode(Measurement(5885.0, 72.0, "K"), "K") == "5885 ± 72"

    def test_label_is_unit(self):
        assert LinearCodec().label("Rsun") == "Rsun"


class TestLog10Codec:

    def test_decode_propagates_into_linear_space(self):
        m = Log10Codec().decode("2", "0.08", "cm / s2")
        value, sigma = m.to("cm / s2")
        assert value == pytest.approx(100.0)
        assert sigma == pytest.approx(100.0 * math.log(10.0) * 0.08)

    def test_encode_returns_log(self):
        m = Log10Codec().decode("2", "0.08", "cm / s2")
        assert Log10Codec().encode(m, "cm / s2") == "2.000 ± 0.080"

    def test_label(self):
        assert Log10Codec().label("cm / s2") == "log10(cm / s2)"

    def test_registry(self):
        assert isinstance(CODECS['linear'], LinearCodec)
        assert isinstance(CODECS['log10'], Log10Codec)
