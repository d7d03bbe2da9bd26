"""Plain-text summaries of resolved studies.

Units follow the usual exoplanet conventions (solar units for the star,
Jovian units for the planet, log10 cgs for stellar surface gravity) and
can be overridden per field. The transmission signal is reported in ppm
over ``scale_height_count`` scale heights.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional

from exocalc.engine.batch import StudyOutcome
from exocalc.engine.resolver import DerivedResult, Provenance
from exocalc.model.codecs import CODECS, format_value
from exocalc.model.parameter_spec import (
    ParameterGroup,
    get_spec,
    list_params_by_group,
)
from exocalc.utils.constants import PPM

logger = logging.getLogger(__name__)

_SECTION_TITLES = {
    ParameterGroup.STAR: "Star",
    ParameterGroup.ORBIT: "Orbit",
    ParameterGroup.PLANET: "Planet",
}


def _inputs_label(provenance: Provenance, name: str) -> str:
    symbols = [get_spec(n).symbol for n in provenance[name]]
    return "(" + ", ".join(symbols) + ")"


def _format_line(result: DerivedResult, provenance: Provenance, name: str,
                 display_units: Mapping[str, str]) -> str:
    spec = get_spec(name)
    unit = display_units.get(name, spec.display_unit)
    codec = CODECS[spec.display_codec]
    text = codec.encode(getattr(result, name), unit)
    label = codec.label(unit)
    suffix = f" {label}" if label else ""
    return f"  {spec.symbol} {_inputs_label(provenance, name)} = {text}{suffix}"


def format_summary(result: DerivedResult, provenance: Provenance,
                   display_units: Optional[Mapping[str, str]] = None) -> str:
    """
    Render one resolved study as text.

    Parameters
    ----------
    result : DerivedResult
    provenance : Provenance
    display_units : mapping, optional
        Field name -> astropy unit string, overriding the default
        display unit of that field
    """
    display_units = dict(display_units or {})
    lines = [f"{result.name}:"]
    for group, title in _SECTION_TITLES.items():
        lines.append(f" {title}")
        for name in list_params_by_group(group):
            lines.append(_format_line(result, provenance, name, display_units))

    lines.append(f" Signal at {result.scale_height_count:g} scale heights")
    lines.append(_format_line(result, provenance, "H", display_units))
    depth = result.signal_depth * PPM
    lines.append(
        f"  {get_spec('delta_D').symbol} {_inputs_label(provenance, 'delta_D')} = "
        f"{format_value(depth.value, depth.uncertainty)} ppm"
    )
    return "\n".join(lines)


def format_failure(outcome: StudyOutcome) -> str:
    """Render a failed study as a one-line message."""
    error = outcome.error
    kind = type(error).__name__
    if getattr(error, "study", None):
        # resolution errors already carry the study name
        return f"FAILED {kind}: {error}"
    return f"FAILED {kind}: [{outcome.study.name}] {error}"


def format_batch(outcomes: Iterable[StudyOutcome],
                 display_units: Optional[Mapping[str, str]] = None) -> str:
    """Summaries of every outcome, failures included, separated by blank lines."""
    blocks: List[str] = []
    for outcome in outcomes:
        if outcome.ok:
            blocks.append(format_summary(outcome.result, outcome.provenance, display_units))
        else:
            blocks.append(format_failure(outcome))
    return "\n\n".join(blocks)
