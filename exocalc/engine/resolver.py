"""
Resolve a study into a complete, self-consistent parameter set.

Usage:
    from exocalc.engine.resolver import resolve

    result, provenance = resolve(study)
    result.aRs            # Measurement
    provenance["rho_s"]   # ('P', 'aRs')

``resolve`` either returns a complete ``(DerivedResult, Provenance)`` pair
or raises; nothing partially resolved ever escapes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Dict, Iterator, Tuple

from exocalc.engine.formulas import Resolved
from exocalc.engine.stages import STAGES, Stage
from exocalc.errors import DimensionMismatch
from exocalc.model.measurement import Measurement, ensure_measurement
from exocalc.model.parameter_spec import PARAMETER_REGISTRY, list_derived_params
from exocalc.model.study import DEFAULT_SCALE_HEIGHTS, Study

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedResult:
    """
    Every parameter of a star-planet system, fully resolved.

    Field names match ``Study`` plus the two signal quantities ``H``
    (atmospheric scale height) and ``delta_D`` (transit depth change per
    scale height). All values are Measurements in SI base units.
    """
    name: str

    Ts: Measurement
    rho_s: Measurement
    Ms: Measurement
    Rs: Measurement
    gs: Measurement
    Ls: Measurement

    RpRs: Measurement
    aRs: Measurement
    a: Measurement
    b: Measurement
    P: Measurement
    K: Measurement
    i: Measurement

    mu: Measurement
    alpha: Measurement
    Tp: Measurement
    rho_p: Measurement
    Mp: Measurement
    Rp: Measurement
    gp: Measurement

    H: Measurement
    delta_D: Measurement

    scale_height_count: float = DEFAULT_SCALE_HEIGHTS

    def __post_init__(self):
        for name in RESULT_FIELDS:
            value = ensure_measurement(getattr(self, name), name=name)
            unit = PARAMETER_REGISTRY[name].internal_unit or None
            if not value.is_equivalent(unit):
                raise DimensionMismatch(
                    f"Resolved {name} has unit {value.unit}, "
                    f"expected {unit or 'dimensionless'}"
                )

    @property
    def signal_depth(self) -> Measurement:
        """Transit depth change across ``scale_height_count`` scale heights."""
        return self.scale_height_count * self.delta_D

    def as_dict(self) -> Dict[str, Measurement]:
        """Physical fields keyed by name, in report order."""
        return {name: getattr(self, name) for name in RESULT_FIELDS}


RESULT_FIELDS: Tuple[str, ...] = tuple(
    f.name for f in fields(DerivedResult) if f.name not in ("name", "scale_height_count")
)


class Provenance(Mapping):
    """
    Read-only record of which inputs determined each resolved field.

    Maps a field name to the tuple of field names the chosen formula
    consumed; a directly given value maps to its own name only.
    Iteration follows the parameter registry order.
    """

    __slots__ = ('_name', '_inputs')

    def __init__(self, name: str, inputs: Mapping[str, Tuple[str, ...]]):
        self._name = name
        ordered = {k: tuple(inputs[k]) for k in list_derived_params() if k in inputs}
        extra = set(inputs) - set(ordered)
        if extra:
            raise KeyError(f"Unknown fields in provenance: {sorted(extra)}")
        self._inputs = MappingProxyType(ordered)

    @property
    def name(self) -> str:
        return self._name

    def __getitem__(self, field: str) -> Tuple[str, ...]:
        return self._inputs[field]

    def __iter__(self) -> Iterator[str]:
        return iter(self._inputs)

    def __len__(self) -> int:
        return len(self._inputs)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Provenance):
            return NotImplemented
        return self._name == other._name and dict(self._inputs) == dict(other._inputs)

    def __hash__(self) -> int:
        return hash((self._name, tuple(self._inputs.items())))

    def is_direct(self, field: str) -> bool:
        """True if ``field`` was taken verbatim from the study."""
        return self._inputs[field] == (field,)

    def __repr__(self) -> str:
        return f"Provenance({self._name!r}, {dict(self._inputs)!r})"


def _merge(stage: Stage, update: Mapping[str, Resolved],
           accumulated: Dict[str, Resolved]) -> None:
    undeclared = set(update) - set(stage.resolves)
    if undeclared:
        raise RuntimeError(
            f"Stage {stage.name} returned undeclared fields {sorted(undeclared)}"
        )
    rewritten = set(update) & set(accumulated)
    if rewritten:
        raise RuntimeError(
            f"Stage {stage.name} tried to overwrite {sorted(rewritten)}"
        )
    accumulated.update(update)


def resolve(study: Study) -> Tuple[DerivedResult, Provenance]:
    """
    Run the resolution pipeline on ``study``.

    Parameters
    ----------
    study : Study
        Literature inputs; never modified

    Returns
    -------
    result : DerivedResult
        Every parameter, resolved
    provenance : Provenance
        Inputs consumed for each parameter

    Raises
    ------
    MissingInput
        A stage found none of its qualifying input combinations.
    ConflictingInputs
        Mutually exclusive inputs were given.
    DimensionMismatch
        A formula combined incompatible dimensions.
    """
    if not isinstance(study, Study):
        raise TypeError(f"Expected a Study, got {type(study).__name__}")

    logger.debug(f"Resolving {study.name!r} from {', '.join(study.given())}")
    accumulated: Dict[str, Resolved] = {}
    for stage in STAGES:
        update = stage.run(study, MappingProxyType(accumulated))
        _merge(stage, update, accumulated)

    result = DerivedResult(
        name=study.name,
        scale_height_count=study.scale_height_count,
        **{name: accumulated[name].value for name in RESULT_FIELDS},
    )
    provenance = Provenance(
        study.name, {name: r.inputs for name, r in accumulated.items()}
    )
    logger.debug(f"Resolved {study.name!r}")
    return result, provenance
