"""
Study Tests
===========

Tests for the immutable literature-input record.

Run with:
    pytest exocalc/tests/test_study.py -v
"""

import dataclasses
import math

import pytest

from exocalc.errors import DimensionMismatch
from exocalc.model.measurement import Measurement
from exocalc.model.study import DEFAULT_SCALE_HEIGHTS, INPUT_FIELDS, Study


class TestStudyConstruction:

    def test_defaults(self):
        study = Study()
        assert study.name == "Custom"
        assert study.scale_height_count == DEFAULT_SCALE_HEIGHTS == 5.0
        assert study.given() == ()

    def test_input_fields_in_declaration_order(self):
        assert INPUT_FIELDS == (
            'Ts', 'rho_s', 'Ms', 'Rs', 'gs', 'Ls',
            'RpRs', 'aRs', 'a', 'b', 'P', 'K', 'i',
            'mu', 'alpha', 'Tp', 'rho_p', 'Mp', 'Rp', 'gp',
        )

    def test_given_follows_declaration_order(self, ciceri):
        assert ciceri.given() == (
            'Ts', 'Rs', 'RpRs', 'aRs', 'P', 'K', 'i', 'mu', 'alpha',
        )

    def test_unset_is_unknown(self, ciceri):
        assert ciceri.Mp is None
        assert not ciceri.is_given('Mp')
        assert ciceri.is_given('Rs')

    def test_frozen(self, ciceri):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ciceri.Rs = Measurement(1.0, 0.0, "Rsun")

    def test_replace_builds_new_study(self, ciceri):
        changed = dataclasses.replace(ciceri, i=None)
        assert changed.i is None
        assert ciceri.i is not None


class TestStudyValidation:

    def test_wrong_dimension_rejected(self):
        with pytest.raises(DimensionMismatch, match="Rs"):
            Study(Rs=Measurement(1.0, 0.1, "kg"))

    def test_dimensionless_field_rejects_units(self):
        with pytest.raises(DimensionMismatch):
            Study(aRs=Measurement(4.5, 0.1, "m"))

    def test_inclination_accepts_degrees_and_radians(self):
        Study(i=Measurement(85.0, 1.0, "deg"))
        Study(i=Measurement(1.4, 0.1, "rad"))

    def test_plain_number_rejected(self):
        with pytest.raises(TypeError):
            Study(Rs=1.0)

    @pytest.mark.parametrize("count", [0, -1.0, math.nan, math.inf])
    def test_scale_height_count_must_be_positive(self, count):
        with pytest.raises(ValueError):
            Study(scale_height_count=count)

    def test_scale_height_count_rejects_bool(self):
        with pytest.raises(ValueError):
            Study(scale_height_count=True)

    def test_integer_scale_height_count(self):
        assert Study(scale_height_count=3).scale_height_count == 3


class TestStudyFromMapping:

    def test_aliases_and_symbols(self):
        study = Study.from_mapping(
            "mapped",
            {"RSTAR": Measurement(1.0, 0.1, "Rsun"), "Tₛ": Measurement(5800.0, 50.0, "K")},
        )
        assert study.name == "mapped"
        assert study.given() == ('Ts', 'Rs')

    def test_scale_height_count_passed_through(self):
        study = Study.from_mapping("mapped", {}, scale_height_count=2.5)
        assert study.scale_height_count == 2.5

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            Study.from_mapping("bad", {"FOO": Measurement(1.0)})

    def test_derived_only_key_rejected(self):
        with pytest.raises(KeyError):
            Study.from_mapping("bad", {"H": Measurement(1.0, 0.0, "km")})

    def test_duplicate_key(self):
        with pytest.raises(KeyError):
            Study.from_mapping(
                "bad",
                {"Rs": Measurement(1.0, 0.0, "Rsun"), "RSTAR": Measurement(1.1, 0.0, "Rsun")},
            )

    def test_get_by_alias(self, ciceri):
        assert ciceri.get("RSTAR") is ciceri.Rs
        assert ciceri.get("Mp") is None
        with pytest.raises(KeyError):
            ciceri.get("FOO")
