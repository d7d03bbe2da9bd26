"""
Text Codecs for Measurements
============================

Codecs convert between the textual notation used in literature tables
(and .study files) and internal ``Measurement`` objects.

Key principle: ALL measurements are stored internally in SI base units.
Codecs operate ONLY at the I/O boundary (reading .study files, reports).

Usage:
    from exocalc.model.codecs import CODECS

    # Decode "1.089 0.028 Rsun"
    r_star = CODECS['linear'].decode("1.089", "0.028", "Rsun")

    # Gaia luminosities are quoted as log10(L / Lsun)
    l_star = CODECS['log10'].decode("0.13656", "0.00865", "Lsun")

    # Encode for display
    CODECS['log10'].encode(g_star, "cm / s2")   # "4.35 ± 0.08"

Codec types:
- LinearCodec: value and uncertainty quoted directly in a unit
- Log10Codec: value and uncertainty quoted as log10(x / unit)
"""

from abc import ABC, abstractmethod
import math
from typing import Optional

from exocalc.model.measurement import Measurement, log10


def _parse_float(value_str: str) -> float:
    """Parse a float string, handling Fortran-style D exponent notation."""
    try:
        return float(value_str)
    except ValueError:
        converted = value_str.replace('D', 'E').replace('d', 'e')
        return float(converted)


def format_value(value: float, uncertainty: float, sig_figs: int = 2) -> str:
    """
    Format ``value ± uncertainty`` rounded to the uncertainty's precision.

    The uncertainty is shown with ``sig_figs`` significant figures and the
    value is rounded to the same decimal place.

    Examples
    --------
    >>> format_value(1.21288287, 1.7e-7)
    '1.21288287 ± 0.00000017'
    >>> format_value(5885.0, 72.0)
    '5885 ± 72'
    """
    if not (uncertainty > 0 and math.isfinite(uncertainty)):
        return f"{value:.6g} ± 0"
    decimals = sig_figs - 1 - int(math.floor(math.log10(uncertainty)))
    if decimals > 0:
        return f"{value:.{decimals}f} ± {uncertainty:.{decimals}f}"
    return f"{round(value, decimals):.0f} ± {round(uncertainty, decimals):.0f}"


class Codec(ABC):
    """
    Abstract base class for measurement codecs.

    A codec converts between text (value, uncertainty, unit tokens) and
    the internal ``Measurement`` representation.
    """

    @abstractmethod
    def decode(self, value: str, uncertainty: Optional[str] = None,
               unit: str = "") -> Measurement:
        """
        Decode text tokens to a Measurement.

        Parameters
        ----------
        value : str
            Best estimate as written
        uncertainty : str, optional
            One-sigma uncertainty as written; exact if omitted
        unit : str
            Astropy unit string ("" for dimensionless)
        """

    @abstractmethod
    def encode(self, measurement: Measurement, unit: str = "") -> str:
        """Encode a Measurement as ``"value ± uncertainty"`` text in ``unit``."""

    def label(self, unit: str) -> str:
        """Unit label shown next to encoded values."""
        return unit


class LinearCodec(Codec):
    """Value and uncertainty quoted directly in a unit."""

    def decode(self, value: str, uncertainty: Optional[str] = None,
               unit: str = "") -> Measurement:
        sigma = _parse_float(uncertainty) if uncertainty is not None else 0.0
        return Measurement(_parse_float(value), sigma, unit or None)

    def encode(self, measurement: Measurement, unit: str = "") -> str:
        value, sigma = measurement.to(unit or None)
        return format_value(value, sigma)


class Log10Codec(Codec):
    """
    Value and uncertainty quoted as log10(x / unit).

    Surface gravities (log g, cgs) and catalogue luminosities
    (log L / Lsun) are conventionally given this way. Decoding
    propagates the log-space uncertainty into linear space.
    """

    def decode(self, value: str, uncertainty: Optional[str] = None,
               unit: str = "") -> Measurement:
        sigma = _parse_float(uncertainty) if uncertainty is not None else 0.0
        exponent = Measurement(_parse_float(value), sigma)
        return (10.0 ** exponent) * Measurement(1.0, 0.0, unit or None)

    def encode(self, measurement: Measurement, unit: str = "") -> str:
        ratio = measurement / Measurement(1.0, 0.0, unit or None)
        logged = log10(ratio)
        return format_value(logged.value, logged.uncertainty)

    def label(self, unit: str) -> str:
        return f"log10({unit})" if unit else "log10"


# Registry of codecs by name
CODECS = {
    'linear': LinearCodec(),
    'log10': Log10Codec(),
}
