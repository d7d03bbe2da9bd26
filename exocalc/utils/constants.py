"""Physical constants used by the derivation formulas.

Constants are taken from ``astropy.constants`` (CODATA) and wrapped as
``Measurement`` objects carrying their published uncertainty, so the
constant's own uncertainty (notably G's) flows into derived values.
"""

from astropy import constants as const

from exocalc.model.measurement import Measurement

# === Physical Constants ===

G = Measurement.from_quantity(const.G)
"""Newtonian constant of gravitation (m^3 kg^-1 s^-2)"""

K_B = Measurement.from_quantity(const.k_B)
"""Boltzmann constant (J/K)"""

SIGMA_SB = Measurement.from_quantity(const.sigma_sb)
"""Stefan-Boltzmann constant (W m^-2 K^-4)"""

PPM = 1e6
"""Parts per million"""
