"""Resolution stages.

The engine resolves a study through a fixed, ordered table of stages.
Each stage owns one or a few related parameters, looks at which inputs
the study supplies and picks exactly one way of obtaining each of them:
the given value, or one declared ``Formula``. If no variant applies the
stage raises ``MissingInput``; if mutually exclusive inputs are present
it raises ``ConflictingInputs``.

Stage functions are pure: they take the study and a read-only mapping of
what earlier stages resolved, and return a new ``{field: Resolved}``
dict. They never consult a value a later stage produces.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Tuple

from exocalc.engine.formulas import (
    A_FROM_SCALED,
    ARS_FROM_DENSITY,
    ARS_FROM_SMA,
    B_FROM_INCLINATION,
    DELTA_D_FROM_SCALE_HEIGHT,
    GP_FROM_MASS,
    GS_FROM_MASS,
    H_FROM_ATMOSPHERE,
    LS_FROM_RADIUS,
    MP_FROM_RV,
    MS_FROM_DENSITY,
    RHOP_FROM_MASS,
    RHOS_FROM_ORBIT,
    RP_FROM_RATIO,
    RPRS_FROM_RADII,
    RS_FROM_LUMINOSITY,
    TP_FROM_IRRADIATION,
    TS_FROM_RADIUS,
    Formula,
    Resolved,
)
from exocalc.errors import ConflictingInputs, MissingInput
from exocalc.model.measurement import Measurement
from exocalc.model.study import Study

logger = logging.getLogger(__name__)

StageFunc = Callable[[Study, Mapping[str, Resolved]], Dict[str, Resolved]]


@dataclass(frozen=True)
class Stage:
    """
    One step of the resolution pipeline.

    Attributes
    ----------
    name : str
        Short label used in log messages
    resolves : tuple of str
        Fields this stage is responsible for, in the order it resolves them
    func : callable
        ``func(study, resolved) -> {field: Resolved}``
    """
    name: str
    resolves: Tuple[str, ...]
    func: StageFunc

    def run(self, study: Study, resolved: Mapping[str, Resolved]) -> Dict[str, Resolved]:
        logger.debug(f"[{study.name}] stage {self.name}")
        return self.func(study, resolved)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _values(resolved: Mapping[str, Resolved]) -> Dict[str, Measurement]:
    return {name: r.value for name, r in resolved.items()}


def _direct(study: Study, name: str) -> Resolved:
    return Resolved.direct(name, getattr(study, name))


def _require(study: Study, name: str) -> Resolved:
    """A parameter with no derivation path: it must be given."""
    if not study.is_given(name):
        raise MissingInput(name, [(name,)], study=study.name)
    return _direct(study, name)


def _given_or_derived(study: Study, values: Dict[str, Measurement],
                      formula: Formula) -> Resolved:
    """Use the given value if there is one, else evaluate ``formula``.

    The result is added to ``values`` so later formulas in the same stage
    can use it.
    """
    name = formula.output
    if study.is_given(name):
        result = _direct(study, name)
    else:
        result = formula.evaluate(values)
    values[name] = result.value
    return result


# ---------------------------------------------------------------------------
# S1-S13
# ---------------------------------------------------------------------------

def resolve_stellar_radiation(study, resolved):
    """Rs, Ts, Ls related through L = 4 pi R^2 sigma T^4."""
    has_ts, has_ls = study.is_given("Ts"), study.is_given("Ls")

    if study.is_given("Rs"):
        if not (has_ts or has_ls):
            raise MissingInput("Ts", [("Rs", "Ts"), ("Rs", "Ls")], study=study.name)
        out = {"Rs": _direct(study, "Rs")}
        values = {"Rs": study.Rs}
        if has_ts:
            out["Ts"] = _direct(study, "Ts")
            values["Ts"] = study.Ts
        if has_ls:
            out["Ls"] = _direct(study, "Ls")
            values["Ls"] = study.Ls
        if not has_ls:
            out["Ls"] = LS_FROM_RADIUS.evaluate(values)
        if not has_ts:
            out["Ts"] = TS_FROM_RADIUS.evaluate(values)
        return out

    if not (has_ts and has_ls):
        raise MissingInput(
            "Rs", [("Rs", "Ts"), ("Rs", "Ls"), ("Ts", "Ls")], study=study.name
        )
    return {
        "Rs": RS_FROM_LUMINOSITY.evaluate({"Ls": study.Ls, "Ts": study.Ts}),
        "Ts": _direct(study, "Ts"),
        "Ls": _direct(study, "Ls"),
    }


def resolve_planet_radius(study, resolved):
    """Rp and RpRs; a given Rp wins over a given ratio."""
    values = _values(resolved)
    if study.is_given("Rp"):
        if study.is_given("RpRs"):
            logger.debug(
                f"[{study.name}] both Rp and RpRs given; recomputing RpRs from Rp"
            )
        values["Rp"] = study.Rp
        return {
            "RpRs": RPRS_FROM_RADII.evaluate(values),
            "Rp": _direct(study, "Rp"),
        }
    if study.is_given("RpRs"):
        values["RpRs"] = study.RpRs
        return {
            "RpRs": _direct(study, "RpRs"),
            "Rp": RP_FROM_RATIO.evaluate(values),
        }
    raise MissingInput("Rp", [("Rp",), ("RpRs",)], study=study.name)


def resolve_period(study, resolved):
    return {"P": _require(study, "P")}


def resolve_orbital_scale(study, resolved):
    """The rho_s / aRs / a triangle: exactly one of them may be given."""
    given = [name for name in ("rho_s", "aRs", "a") if study.is_given(name)]
    if len(given) > 1:
        raise ConflictingInputs("aRs", given, study=study.name)
    if study.is_given("aRs") and study.is_given("b"):
        raise ConflictingInputs("aRs", ("aRs", "b"), study=study.name)
    if not given:
        raise MissingInput("aRs", [("rho_s",), ("aRs",), ("a",)], study=study.name)

    values = _values(resolved)
    source = given[0]
    values[source] = getattr(study, source)
    out = {source: _direct(study, source)}

    if source == "rho_s":
        out["aRs"] = ARS_FROM_DENSITY.evaluate(values)
        values["aRs"] = out["aRs"].value
        out["a"] = A_FROM_SCALED.evaluate(values)
    elif source == "aRs":
        out["a"] = A_FROM_SCALED.evaluate(values)
        out["rho_s"] = RHOS_FROM_ORBIT.evaluate(values)
    else:
        out["aRs"] = ARS_FROM_SMA.evaluate(values)
        values["aRs"] = out["aRs"].value
        out["rho_s"] = RHOS_FROM_ORBIT.evaluate(values)
    return out


def resolve_stellar_mass(study, resolved):
    return {"Ms": _given_or_derived(study, _values(resolved), MS_FROM_DENSITY)}


def resolve_direct_inputs(study, resolved):
    """Inclination, RV semi-amplitude and albedo must be given."""
    return {name: _require(study, name) for name in ("i", "K", "alpha")}


def resolve_impact_parameter(study, resolved):
    return {"b": _given_or_derived(study, _values(resolved), B_FROM_INCLINATION)}


def resolve_planet_mass(study, resolved):
    return {"Mp": _given_or_derived(study, _values(resolved), MP_FROM_RV)}


def resolve_equilibrium_temperature(study, resolved):
    return {"Tp": _given_or_derived(study, _values(resolved), TP_FROM_IRRADIATION)}


def resolve_surface_gravities(study, resolved):
    values = _values(resolved)
    return {
        "gs": _given_or_derived(study, values, GS_FROM_MASS),
        "gp": _given_or_derived(study, values, GP_FROM_MASS),
    }


def resolve_planet_density(study, resolved):
    return {"rho_p": _given_or_derived(study, _values(resolved), RHOP_FROM_MASS)}


def resolve_molecular_weight(study, resolved):
    return {"mu": _require(study, "mu")}


def resolve_atmospheric_signal(study, resolved):
    """Scale height and transmission signal; never given directly."""
    values = _values(resolved)
    scale_height = H_FROM_ATMOSPHERE.evaluate(values)
    values["H"] = scale_height.value
    return {
        "H": scale_height,
        "delta_D": DELTA_D_FROM_SCALE_HEIGHT.evaluate(values),
    }


STAGES: Tuple[Stage, ...] = (
    Stage("stellar_radiation", ("Rs", "Ts", "Ls"), resolve_stellar_radiation),
    Stage("planet_radius", ("RpRs", "Rp"), resolve_planet_radius),
    Stage("period", ("P",), resolve_period),
    Stage("orbital_scale", ("rho_s", "aRs", "a"), resolve_orbital_scale),
    Stage("stellar_mass", ("Ms",), resolve_stellar_mass),
    Stage("direct_inputs", ("i", "K", "alpha"), resolve_direct_inputs),
    Stage("impact_parameter", ("b",), resolve_impact_parameter),
    Stage("planet_mass", ("Mp",), resolve_planet_mass),
    Stage("equilibrium_temperature", ("Tp",), resolve_equilibrium_temperature),
    Stage("surface_gravities", ("gs", "gp"), resolve_surface_gravities),
    Stage("planet_density", ("rho_p",), resolve_planet_density),
    Stage("molecular_weight", ("mu",), resolve_molecular_weight),
    Stage("atmospheric_signal", ("H", "delta_D"), resolve_atmospheric_signal),
)
"""The resolution pipeline, in execution order"""
