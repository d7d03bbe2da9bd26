"""Formulas relating the parameters of a star-planet system.

Each physical relation is a plain function of keyword-only Measurement
arguments. Every way of computing a parameter is also declared as a
``Formula``: the output name, the ordered names of the inputs it consumes
and the function. The resolution stages pick a Formula and evaluate it;
the Formula's ``inputs`` is what ends up in the provenance record.

Relations
---------
L = 4 pi R^2 sigma T^4                      (Stefan-Boltzmann)
rho_s = 3 pi aRs^3 / (G P^2)                (Kepler III, Mp << Ms)
K = (2 pi G / P)^(1/3) Mp sin(i) / Ms^(2/3) (circular orbit, Mp << Ms)
Tp = Ts (1 - alpha)^(1/4) (0.5 / aRs)^(1/2) (full redistribution)
H = k Tp / (mu gp)                          (isothermal scale height)
delta_D = 2 H RpRs / Rs                     (annulus of one scale height)
"""

import logging
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable, Dict, Mapping, NamedTuple, Tuple

import numpy as np

from exocalc.model.measurement import Measurement, cos, sin
from exocalc.utils.constants import G, K_B, SIGMA_SB

logger = logging.getLogger(__name__)

PI = np.pi


class Resolved(NamedTuple):
    """A resolved parameter and the names of the inputs that determined it."""
    value: Measurement
    inputs: Tuple[str, ...]

    @classmethod
    def direct(cls, name: str, value: Measurement) -> "Resolved":
        """A directly given value; its provenance is its own name."""
        return cls(value, (name,))


# ---------------------------------------------------------------------------
# Star
# ---------------------------------------------------------------------------

def stellar_radius(*, Ls, Ts):
    return (Ls / (4.0 * PI * SIGMA_SB * Ts ** 4)) ** Fraction(1, 2)


def stellar_luminosity(*, Ts, Rs):
    return 4.0 * PI * Rs ** 2 * SIGMA_SB * Ts ** 4


def stellar_temperature(*, Ls, Rs):
    return (Ls / (4.0 * PI * Rs ** 2 * SIGMA_SB)) ** Fraction(1, 4)


def stellar_density_from_orbit(*, P, aRs):
    return (3.0 * PI / (G * P ** 2)) * aRs ** 3


def stellar_mass(*, rho_s, Rs):
    return rho_s * (4.0 / 3.0) * PI * Rs ** 3


def stellar_gravity(*, Ms, Rs):
    return G * Ms / Rs ** 2


# ---------------------------------------------------------------------------
# Orbit
# ---------------------------------------------------------------------------

def radius_ratio(*, Rp, Rs):
    return Rp / Rs


def scaled_sma_from_density(*, rho_s, P):
    return ((G * P ** 2 * rho_s) / (3.0 * PI)) ** Fraction(1, 3)


def scaled_sma_from_sma(*, a, Rs):
    return a / Rs


def semi_major_axis(*, aRs, Rs):
    return aRs * Rs


def impact_parameter(*, aRs, i):
    return aRs * cos(i)


# ---------------------------------------------------------------------------
# Planet
# ---------------------------------------------------------------------------

def planet_radius(*, RpRs, Rs):
    return RpRs * Rs


def planet_mass(*, K, i, P, Ms):
    return (K / sin(i)) * (P / (2.0 * PI * G)) ** Fraction(1, 3) * Ms ** Fraction(2, 3)


def planet_density(*, Mp, Rp):
    return Mp / ((4.0 / 3.0) * PI * Rp ** 3)


def planet_gravity(*, Mp, RpRs, Rs):
    return G * Mp / (RpRs ** 2 * Rs ** 2)


def equilibrium_temperature(*, Ts, aRs, alpha):
    return Ts * (1.0 - alpha) ** Fraction(1, 4) * (0.5 / aRs) ** Fraction(1, 2)


# ---------------------------------------------------------------------------
# Atmospheric signal
# ---------------------------------------------------------------------------

def scale_height(*, mu, Tp, gp):
    return K_B * Tp / (mu * gp)


def transmission_signal(*, H, RpRs, Rs):
    return 2.0 * H * RpRs / Rs


# ---------------------------------------------------------------------------
# Declared formula variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Formula:
    """
    One way of computing ``output`` from a fixed, ordered set of inputs.

    Attributes
    ----------
    output : str
        Canonical name of the computed parameter
    inputs : tuple of str
        Canonical names of the consumed parameters, in argument order
    func : callable
        Keyword-only function of the inputs returning a Measurement
    """
    output: str
    inputs: Tuple[str, ...]
    func: Callable[..., Measurement]

    def evaluate(self, values: Mapping[str, Measurement]) -> Resolved:
        """Evaluate using ``values`` (must hold every input)."""
        missing = [name for name in self.inputs if name not in values]
        if missing:
            raise KeyError(
                f"Formula for {self.output} needs {', '.join(missing)}"
            )
        value = self.func(**{name: values[name] for name in self.inputs})
        logger.debug(f"{self.output} <- {self.func.__name__}({', '.join(self.inputs)}) = {value}")
        return Resolved(value, self.inputs)

    def __str__(self) -> str:
        return f"{self.output}({', '.join(self.inputs)})"


RS_FROM_LUMINOSITY = Formula("Rs", ("Ls", "Ts"), stellar_radius)
LS_FROM_RADIUS = Formula("Ls", ("Ts", "Rs"), stellar_luminosity)
TS_FROM_RADIUS = Formula("Ts", ("Ls", "Rs"), stellar_temperature)

RPRS_FROM_RADII = Formula("RpRs", ("Rp", "Rs"), radius_ratio)
RP_FROM_RATIO = Formula("Rp", ("RpRs", "Rs"), planet_radius)

ARS_FROM_DENSITY = Formula("aRs", ("rho_s", "P"), scaled_sma_from_density)
ARS_FROM_SMA = Formula("aRs", ("a", "Rs"), scaled_sma_from_sma)
A_FROM_SCALED = Formula("a", ("aRs", "Rs"), semi_major_axis)
RHOS_FROM_ORBIT = Formula("rho_s", ("P", "aRs"), stellar_density_from_orbit)

MS_FROM_DENSITY = Formula("Ms", ("rho_s", "Rs"), stellar_mass)
B_FROM_INCLINATION = Formula("b", ("aRs", "i"), impact_parameter)
MP_FROM_RV = Formula("Mp", ("K", "i", "P", "Ms"), planet_mass)
TP_FROM_IRRADIATION = Formula("Tp", ("Ts", "aRs", "alpha"), equilibrium_temperature)
GS_FROM_MASS = Formula("gs", ("Ms", "Rs"), stellar_gravity)
GP_FROM_MASS = Formula("gp", ("Mp", "RpRs", "Rs"), planet_gravity)
RHOP_FROM_MASS = Formula("rho_p", ("Mp", "Rp"), planet_density)

H_FROM_ATMOSPHERE = Formula("H", ("mu", "Tp", "gp"), scale_height)
DELTA_D_FROM_SCALE_HEIGHT = Formula("delta_D", ("H", "RpRs", "Rs"), transmission_signal)


_ALL_FORMULAS = [
    RS_FROM_LUMINOSITY, LS_FROM_RADIUS, TS_FROM_RADIUS,
    RPRS_FROM_RADII, RP_FROM_RATIO,
    ARS_FROM_DENSITY, ARS_FROM_SMA, A_FROM_SCALED, RHOS_FROM_ORBIT,
    MS_FROM_DENSITY, B_FROM_INCLINATION, MP_FROM_RV, TP_FROM_IRRADIATION,
    GS_FROM_MASS, GP_FROM_MASS, RHOP_FROM_MASS,
    H_FROM_ATMOSPHERE, DELTA_D_FROM_SCALE_HEIGHT,
]

# Build the registry
FORMULAS: Dict[str, Tuple[Formula, ...]] = {}
for formula in _ALL_FORMULAS:
    FORMULAS[formula.output] = FORMULAS.get(formula.output, ()) + (formula,)
