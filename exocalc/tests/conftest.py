"""Shared fixtures for the exocalc test suite.

Provides the six literature studies shipped under data/studies/, built
directly in Python so the engine tests do not depend on the reader.
"""

import os
from pathlib import Path

import pytest

# Force CPU before any JAX imports
os.environ.setdefault("EXOCALC_DEVICE", "cpu")

from exocalc.model.measurement import Measurement
from exocalc.model.study import Study

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------
EXOCALC_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_STUDIES = EXOCALC_ROOT / "data" / "studies"


def _m(value, uncertainty=0.0, unit=None):
    return Measurement(value, uncertainty, unit)


# Common to every HAT-P-23 b study: H2 atmosphere, zero albedo
_ATMOSPHERE = dict(mu=_m(2.0, 0.0, "u"), alpha=_m(0.0, 0.0))


def wasp43_weaver():
    return Study(
        name="WASP-43/b: Weaver et al. (2020)",
        mu=_m(2.0, 0.0, "u"),
        alpha=_m(0.0, 0.0),
        i=_m(1.433, 0.1, "rad"),
        P=_m(0.813473978, 3.5e-8, "d"),
        Ts=_m(4520, 120, "K"),
        Rs=_m(0.667, 0.010, "Rsun"),
        aRs=_m(4.872, 0.14),
        Ms=_m(0.717, 0.025, "Msun"),
        Tp=_m(1440.0, 40.0, "K"),
        Mp=_m(2.052, 0.053, "Mjup"),
        K=_m(551.7, 4.7, "m / s"),
        Rp=_m(1.036, 0.012, "Rjup"),
    )


def hatp23_ciceri():
    return Study(
        name="HAT-P-23/b: Ciceri et al. (2015)",
        K=_m(368.5, 17.6, "m / s"),
        i=_m(85.74, 0.95, "deg"),
        P=_m(1.21288287, 0.00000017, "d"),
        RpRs=_m(0.11616, 0.00081),
        Ts=_m(5885.0, 72.0, "K"),
        Rs=_m(1.089, 0.028, "Rsun"),
        aRs=_m(4.5459, 0.0919),
        **_ATMOSPHERE,
    )


def hatp23_sada():
    return Study(
        name="HAT-P-23/b: Sada & Ramón-Fox (2016)",
        K=_m(346.0, 21.0, "m / s"),
        i=_m(85.1, 1.5, "deg"),
        P=_m(1.212880, 0.000002, "d"),
        RpRs=_m(0.1113, 0.0010),
        Ts=_m(5905.0, 80.0, "K"),
        Rs=_m(0.960, 0.200, "Rsun"),
        aRs=_m(4.26, 0.14),
        **_ATMOSPHERE,
    )


def hatp23_stassun():
    return Study(
        name="HAT-P-23/b: Stassun et al. (2017, GAIA DR1)",
        K=_m(368.5, 17.6, "m / s"),
        i=_m(85.1, 1.5, "deg"),
        P=_m(1.212880, 0.000002, "d"),
        RpRs=_m(0.1113, 0.0010),
        Ts=_m(5905.0, 80.0, "K"),
        rho_s=_m(0.92, 0.18, "g / cm3"),
        Rs=_m(0.960, 0.200, "Rsun"),
        **_ATMOSPHERE,
    )


def hatp23_gaia_dr2():
    return Study(
        name="HAT-P-23/b: GAIA DR2",
        K=_m(346.0, 21.0, "m / s"),
        i=_m(85.1, 1.5, "deg"),
        P=_m(1.2128867, 0.0000002, "d"),
        RpRs=_m(0.1113, 0.0010),
        Ts=_m(5734.0, 100.0, "K"),
        Rs=_m(1.1858169, 0.0424133, "Rsun"),
        Ls=(10.0 ** _m(0.13656067, 0.00864667)) * _m(1.0, 0.0, "Lsun"),
        aRs=_m(4.26, 0.14),
        **_ATMOSPHERE,
    )


def hatp23_tic():
    return Study(
        name="HAT-P-23/b: TICv8",
        K=_m(346.0, 21.0, "m / s"),
        i=_m(85.1, 1.5, "deg"),
        P=_m(1.2128867, 0.0000002, "d"),
        RpRs=_m(0.1113, 0.0010),
        Ts=_m(5918.230, 136.811, "K"),
        Rs=_m(1.1517600, 0.0596583, "Rsun"),
        rho_s=_m(0.99471000, 0.23240140, "g / cm3"),
        Ms=_m(1.078000, 0.136618, "Msun"),
        Ls=(10.0 ** _m(0.1661873, 0.0191600)) * _m(1.0, 0.0, "Lsun"),
        gs=(10.0 ** _m(4.3479600, 0.0819789)) * _m(1.0, 0.0, "cm / s2"),
        **_ATMOSPHERE,
    )


ALL_STUDIES = (
    wasp43_weaver,
    hatp23_ciceri,
    hatp23_sada,
    hatp23_stassun,
    hatp23_gaia_dr2,
    hatp23_tic,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def ciceri():
    """HAT-P-23 b from Ciceri et al. (2015): transit-only stellar density."""
    return hatp23_ciceri()


@pytest.fixture
def weaver():
    """WASP-43 b from Weaver et al. (2020): Rp, Mp, Ms and Tp given."""
    return wasp43_weaver()


@pytest.fixture
def literature_studies():
    """All six shipped studies, in file order (WASP-43 first)."""
    return [make() for make in ALL_STUDIES]


@pytest.fixture(params=ALL_STUDIES, ids=lambda f: f.__name__)
def literature_study(request):
    return request.param()


@pytest.fixture
def data_dir():
    if not DATA_STUDIES.exists():
        pytest.skip("data/studies not found")
    return DATA_STUDIES
