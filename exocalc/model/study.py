"""
Study: the literature inputs for one star-planet system
=======================================================

A ``Study`` is a named, sparse, immutable record of measured quantities
taken from one or more literature sources. Fields left unset are
*unknown*, not zero; the resolution engine decides how to fill them.

Usage:
    from exocalc.model.measurement import Measurement
    from exocalc.model.study import Study

    study = Study(
        name="HAT-P-23/b: Ciceri et al. (2015)",
        Rs=Measurement(1.089, 0.028, "Rsun"),
        Ts=Measurement(5885.0, 72.0, "K"),
        ...
    )
    study.given()   # ('Ts', 'Rs', ...)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Mapping, Optional, Tuple

from exocalc.errors import DimensionMismatch
from exocalc.model.measurement import Measurement, ensure_measurement
from exocalc.model.parameter_spec import (
    PARAMETER_REGISTRY,
    canonicalize_param_name,
)

DEFAULT_SCALE_HEIGHTS = 5.0
"""Number of atmospheric scale heights used for the transmission signal"""


@dataclass(frozen=True)
class Study:
    """
    Literature inputs for one star-planet system.

    Attributes
    ----------
    name : str
        Reference label, e.g. "HAT-P-23/b: Ciceri et al. (2015)"
    Ts, rho_s, Ms, Rs, gs, Ls : Measurement, optional
        Stellar temperature, density, mass, radius, surface gravity, luminosity
    RpRs, aRs, a, b, P, K, i : Measurement, optional
        Radius ratio, scaled semi-major axis, semi-major axis, impact
        parameter, period, RV semi-amplitude, inclination
    mu, alpha, Tp, rho_p, Mp, Rp, gp : Measurement, optional
        Mean molecular weight, albedo, equilibrium temperature, density,
        mass, radius, surface gravity of the planet
    scale_height_count : float, default 5.0
        Number of scale heights used for the transmission signal

    Raises
    ------
    TypeError
        If a field is set to something other than a Measurement.
    DimensionMismatch
        If a field's unit does not match the parameter's dimension.
    ValueError
        If ``scale_height_count`` is not a positive finite number.
    """
    name: str = "Custom"

    # Star params
    Ts: Optional[Measurement] = None
    rho_s: Optional[Measurement] = None
    Ms: Optional[Measurement] = None
    Rs: Optional[Measurement] = None
    gs: Optional[Measurement] = None
    Ls: Optional[Measurement] = None

    # Orbital params
    RpRs: Optional[Measurement] = None
    aRs: Optional[Measurement] = None
    a: Optional[Measurement] = None
    b: Optional[Measurement] = None
    P: Optional[Measurement] = None
    K: Optional[Measurement] = None
    i: Optional[Measurement] = None

    # Planet params
    mu: Optional[Measurement] = None
    alpha: Optional[Measurement] = None
    Tp: Optional[Measurement] = None
    rho_p: Optional[Measurement] = None
    Mp: Optional[Measurement] = None
    Rp: Optional[Measurement] = None
    gp: Optional[Measurement] = None

    scale_height_count: float = DEFAULT_SCALE_HEIGHTS

    def __post_init__(self):
        for name in INPUT_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            ensure_measurement(value, name=name)
            spec = PARAMETER_REGISTRY[name]
            if not value.is_equivalent(spec.internal_unit or None):
                raise DimensionMismatch(
                    f"{name} must be a {spec.description.lower()} "
                    f"(convertible to {spec.internal_unit or 'dimensionless'}), "
                    f"got {value.physical_type} ({value.unit})"
                )

        count = self.scale_height_count
        if isinstance(count, bool) or not isinstance(count, (int, float)):
            raise ValueError(f"scale_height_count must be a number, got {count!r}")
        if not (math.isfinite(count) and count > 0):
            raise ValueError(f"scale_height_count must be positive, got {count}")

    @classmethod
    def from_mapping(
        cls,
        name: str,
        values: Mapping[str, Measurement],
        scale_height_count: float = DEFAULT_SCALE_HEIGHTS,
    ) -> "Study":
        """
        Build a study from a mapping keyed by parameter names or aliases.

        Raises
        ------
        KeyError
            If a key is not a known input parameter or two keys resolve to
            the same parameter.
        """
        kwargs = {}
        for key, value in values.items():
            canonical = canonicalize_param_name(key)
            if canonical not in INPUT_FIELDS:
                raise KeyError(f"Unknown input parameter: {key!r}")
            if canonical in kwargs:
                raise KeyError(f"Parameter {canonical} given more than once")
            kwargs[canonical] = value
        return cls(name=name, scale_height_count=scale_height_count, **kwargs)

    def given(self) -> Tuple[str, ...]:
        """Names of the fields that were supplied, in declaration order."""
        return tuple(n for n in INPUT_FIELDS if getattr(self, n) is not None)

    def is_given(self, name: str) -> bool:
        return getattr(self, name) is not None

    def get(self, name: str) -> Optional[Measurement]:
        """Value of an input field (aliases accepted); None if unknown."""
        canonical = canonicalize_param_name(name)
        if canonical not in INPUT_FIELDS:
            raise KeyError(f"Unknown input parameter: {name!r}")
        return getattr(self, canonical)


INPUT_FIELDS: Tuple[str, ...] = tuple(
    f.name for f in fields(Study) if f.name not in ("name", "scale_height_count")
)
