"""
Measurements: values with uncertainties and physical units
==========================================================

A ``Measurement`` is an immutable (value, standard uncertainty, unit)
triple. Units come from ``astropy.units`` and every measurement is stored
in SI base units, so quantities quoted in solar radii, days or degrees
combine without any bookkeeping by the caller.

Arithmetic propagates uncertainties to first order assuming independent
inputs::

    sigma_f**2 = sum_i (df/dx_i * sigma_i)**2

The partial derivatives df/dx_i come from ``jax.grad`` of the scalar
value function, evaluated in float64. Sums therefore combine absolute
uncertainties in quadrature and products, ratios and powers combine
relative uncertainties in quadrature.

Usage:
    from exocalc.model.measurement import Measurement, sqrt

    r_star = Measurement(1.089, 0.028, "Rsun")
    period = Measurement(1.21288287, 1.7e-7, "d")
    ratio = Measurement(0.11616, 0.00081)

    r_planet = ratio * r_star
    r_planet.to("Rjup")   # -> (value, uncertainty) in Jupiter radii

Adding, subtracting or comparing measurements with incompatible
dimensions raises ``DimensionMismatch``; a result outside the finite real
numbers (division by zero, root of a negative value) raises
``NonPhysicalValue``.
"""

from __future__ import annotations

import math
from fractions import Fraction
from numbers import Real
from typing import Callable, Optional, Tuple, Union

import jax
import jax.numpy as jnp
from astropy import units as u

from exocalc.errors import DimensionMismatch, NonPhysicalValue
from exocalc.utils.jax_setup import ensure_jax_x64

ensure_jax_x64()

UnitLike = Union[str, u.UnitBase, None]
Exponent = Union[int, float, Fraction]


def _as_unit(unit: UnitLike) -> u.UnitBase:
    if unit is None:
        return u.dimensionless_unscaled
    try:
        return u.Unit(unit)
    except ValueError as e:
        raise ValueError(f"Unrecognised unit {unit!r}: {e}") from e


def _as_fraction(exponent: Exponent) -> Fraction:
    if isinstance(exponent, Fraction):
        return exponent
    # limit_denominator turns 1/3 style floats back into exact fractions
    return Fraction(exponent).limit_denominator(1000)


def _propagate(func: Callable, *args: "Measurement") -> Tuple[float, float]:
    """Evaluate ``func`` on the values of ``args`` and propagate uncertainty.

    Inputs with zero uncertainty are skipped, so a singular derivative at
    an exactly known point never turns into ``0 * inf = nan``.

    Raises ``NonPhysicalValue`` when the value or its uncertainty leaves
    the finite real numbers.
    """
    values = tuple(a.value for a in args)
    try:
        value = func(*values)
    except (ZeroDivisionError, OverflowError) as e:
        raise NonPhysicalValue(f"Cannot evaluate with values {values}: {e}") from e
    if isinstance(value, complex):
        raise NonPhysicalValue(
            f"Complex result {value} from values {values} "
            f"(fractional power of a negative value)"
        )
    value = float(value)
    if not math.isfinite(value):
        raise NonPhysicalValue(f"Non-finite result {value} from values {values}")

    uncertain = [k for k, a in enumerate(args) if a.uncertainty > 0.0]
    if not uncertain:
        return value, 0.0

    grads = jax.grad(func, argnums=tuple(uncertain))(*values)
    variance = 0.0
    for k, g in zip(uncertain, grads):
        variance += (float(g) * args[k].uncertainty) ** 2
    sigma = math.sqrt(variance)
    if not math.isfinite(sigma):
        raise NonPhysicalValue(
            f"Uncertainty diverges at values {values} (singular derivative)"
        )
    return value, sigma


class Measurement:
    """An immutable value with standard uncertainty and physical unit.

    Parameters
    ----------
    value : float
        Best estimate, expressed in ``unit``.
    uncertainty : float, default 0.0
        One-sigma standard uncertainty, expressed in ``unit``. Must be >= 0.
    unit : str or astropy unit, optional
        Unit of ``value`` and ``uncertainty``; dimensionless if omitted.

    Notes
    -----
    The stored ``value``/``uncertainty`` are in SI base units (astropy's
    ``decompose()``); use ``to()`` to read them back in any compatible unit.
    """

    __slots__ = ('_value', '_uncertainty', '_unit')

    def __init__(self, value: float, uncertainty: float = 0.0, unit: UnitLike = None):
        uncertainty = float(uncertainty)
        if not uncertainty >= 0.0:
            raise ValueError(f"Uncertainty must be non-negative, got {uncertainty}")

        si = (1.0 * _as_unit(unit)).decompose()
        scale = float(si.value)
        self._value = float(value) * scale
        self._uncertainty = uncertainty * abs(scale)
        self._unit = si.unit

    @classmethod
    def from_quantity(cls, quantity: u.Quantity, uncertainty=None) -> "Measurement":
        """Build a measurement from an astropy ``Quantity`` or ``Constant``.

        If ``uncertainty`` is omitted the quantity's own ``uncertainty``
        attribute is used (astropy constants carry their CODATA
        uncertainty), else zero. A Quantity uncertainty is converted to
        the quantity's unit.
        """
        if uncertainty is None:
            uncertainty = getattr(quantity, 'uncertainty', 0.0) or 0.0
        if isinstance(uncertainty, u.Quantity):
            try:
                uncertainty = uncertainty.to_value(quantity.unit)
            except u.UnitConversionError as e:
                raise DimensionMismatch(str(e)) from e
        return cls(float(quantity.value), float(uncertainty), quantity.unit)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def value(self) -> float:
        """Best estimate in SI base units."""
        return self._value

    @property
    def uncertainty(self) -> float:
        """Standard uncertainty in SI base units."""
        return self._uncertainty

    @property
    def unit(self) -> u.UnitBase:
        """SI base unit of the stored value."""
        return self._unit

    @property
    def physical_type(self):
        return self._unit.physical_type

    @property
    def is_dimensionless(self) -> bool:
        return self._unit.is_equivalent(u.dimensionless_unscaled)

    @property
    def relative_uncertainty(self) -> float:
        if self._value == 0.0:
            return float('inf')
        return self._uncertainty / abs(self._value)

    def is_equivalent(self, unit: UnitLike) -> bool:
        """True if this measurement can be expressed in ``unit``."""
        return self._unit.is_equivalent(_as_unit(unit))

    def to(self, unit: UnitLike) -> Tuple[float, float]:
        """Return ``(value, uncertainty)`` expressed in ``unit``."""
        target = _as_unit(unit)
        try:
            factor = self._unit.to(target)
        except u.UnitConversionError as e:
            raise DimensionMismatch(
                f"Cannot convert {self._unit.physical_type} to {target}"
            ) from e
        return self._value * factor, self._uncertainty * abs(factor)

    def to_value(self, unit: UnitLike) -> float:
        """Return the best estimate expressed in ``unit``."""
        return self.to(unit)[0]

    def to_quantity(self) -> u.Quantity:
        """Best estimate as an astropy ``Quantity`` (uncertainty dropped)."""
        return self._value * self._unit

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _require_equivalent(self, other: "Measurement", op: str) -> None:
        if not self._unit.is_equivalent(other._unit):
            raise DimensionMismatch(
                f"Cannot {op} {self._unit.physical_type} ({self._unit}) and "
                f"{other._unit.physical_type} ({other._unit})"
            )

    def __add__(self, other) -> "Measurement":
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        self._require_equivalent(other, "add")
        value, sigma = _propagate(lambda x, y: x + y, self, other)
        return Measurement(value, sigma, self._unit)

    def __radd__(self, other) -> "Measurement":
        return self.__add__(other)

    def __sub__(self, other) -> "Measurement":
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        self._require_equivalent(other, "subtract")
        value, sigma = _propagate(lambda x, y: x - y, self, other)
        return Measurement(value, sigma, self._unit)

    def __rsub__(self, other) -> "Measurement":
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other.__sub__(self)

    def __mul__(self, other) -> "Measurement":
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        value, sigma = _propagate(lambda x, y: x * y, self, other)
        return Measurement(value, sigma, self._unit * other._unit)

    def __rmul__(self, other) -> "Measurement":
        return self.__mul__(other)

    def __truediv__(self, other) -> "Measurement":
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        value, sigma = _propagate(lambda x, y: x / y, self, other)
        return Measurement(value, sigma, self._unit / other._unit)

    def __rtruediv__(self, other) -> "Measurement":
        other = _coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other.__truediv__(self)

    def __pow__(self, exponent: Exponent) -> "Measurement":
        if isinstance(exponent, Measurement):
            return NotImplemented
        power = _as_fraction(exponent)
        p = float(power)
        value, sigma = _propagate(lambda x: x ** p, self)
        return Measurement(value, sigma, self._unit ** power)

    def __rpow__(self, base) -> "Measurement":
        # base ** self, e.g. 10 ** log_luminosity
        if not isinstance(base, Real):
            return NotImplemented
        if not self.is_dimensionless:
            raise DimensionMismatch(
                f"Exponent must be dimensionless, got {self._unit.physical_type}"
            )
        b = float(base)
        value, sigma = _propagate(lambda x: b ** x, self)
        return Measurement(value, sigma)

    def __neg__(self) -> "Measurement":
        return Measurement(-self._value, self._uncertainty, self._unit)

    def __pos__(self) -> "Measurement":
        return self

    def __abs__(self) -> "Measurement":
        return Measurement(abs(self._value), self._uncertainty, self._unit)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, Measurement):
            return NotImplemented
        return (
            self._value == other._value
            and self._uncertainty == other._uncertainty
            and self._unit == other._unit
        )

    def __hash__(self) -> int:
        return hash((self._value, self._uncertainty, self._unit))

    def _compare_values(self, other, op: str) -> Tuple[float, float]:
        other = _coerce(other)
        if other is NotImplemented:
            raise TypeError(f"Cannot compare Measurement with {type(other).__name__}")
        self._require_equivalent(other, op)
        return self._value, other._value

    def __lt__(self, other) -> bool:
        a, b = self._compare_values(other, "compare")
        return a < b

    def __le__(self, other) -> bool:
        a, b = self._compare_values(other, "compare")
        return a <= b

    def __gt__(self, other) -> bool:
        a, b = self._compare_values(other, "compare")
        return a > b

    def __ge__(self, other) -> bool:
        a, b = self._compare_values(other, "compare")
        return a >= b

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        unit = self._unit.to_string()
        return f"Measurement({self._value!r}, {self._uncertainty!r}, {unit!r})"

    def __str__(self) -> str:
        unit = self._unit.to_string()
        text = f"{self._value:.6g} ± {self._uncertainty:.2g}"
        return f"{text} {unit}" if unit else text


def _coerce(other):
    """Treat plain real numbers as exact dimensionless measurements."""
    if isinstance(other, Measurement):
        return other
    if isinstance(other, Real):
        return Measurement(float(other))
    return NotImplemented


# ---------------------------------------------------------------------------
# Elementwise functions
# ---------------------------------------------------------------------------

def sqrt(m: Measurement) -> Measurement:
    return m ** Fraction(1, 2)


def cbrt(m: Measurement) -> Measurement:
    return m ** Fraction(1, 3)


def _require_angle(m: Measurement, name: str) -> None:
    if not (m.is_equivalent(u.rad) or m.is_dimensionless):
        raise DimensionMismatch(
            f"{name}() needs an angle, got {m.physical_type} ({m.unit})"
        )


def sin(m: Measurement) -> Measurement:
    """Sine of an angle (radians after normalisation)."""
    _require_angle(m, "sin")
    value, sigma = _propagate(jnp.sin, m)
    return Measurement(value, sigma)


def cos(m: Measurement) -> Measurement:
    """Cosine of an angle (radians after normalisation)."""
    _require_angle(m, "cos")
    value, sigma = _propagate(jnp.cos, m)
    return Measurement(value, sigma)


def log10(m: Measurement) -> Measurement:
    """Base-10 logarithm of a dimensionless measurement."""
    if not m.is_dimensionless:
        raise DimensionMismatch(
            f"log10() needs a dimensionless argument, got {m.physical_type} ({m.unit})"
        )
    value, sigma = _propagate(jnp.log10, m)
    return Measurement(value, sigma)


def ensure_measurement(value, *, name: Optional[str] = None) -> Measurement:
    """Return ``value`` as a Measurement, raising ``TypeError`` otherwise."""
    if isinstance(value, Measurement):
        return value
    label = f" for {name}" if name else ""
    raise TypeError(
        f"Expected a Measurement{label}, got {type(value).__name__}"
    )
