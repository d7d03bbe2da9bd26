"""Reader for literature .study files.

A .study file lists one or more studies in a format modelled on pulsar
timing .par files::

    # comments start with '#'
    NAME      HAT-P-23/b: Ciceri et al. (2015)
    N_SCALES  5
    RS        1.089       0.028     Rsun
    P         1.21288287  1.7e-7    d
    RPRS      0.11616     0.00081
    LOGLS     0.13656     0.00865   Lsun
    MU        2.0                   u

``NAME`` starts a new study; its label is the rest of the line, so ``#``
does not start a comment there. Every other line is ``KEY VALUE
[UNCERTAINTY] [UNIT]``; the unit may contain spaces (``g / cm3``). Keys are
case-insensitive and may be any alias or Unicode symbol of a parameter
(``RSTAR``, ``Rₛ``). A ``LOG`` prefix means the value and uncertainty are
quoted as log10 of the quantity in the given unit.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from exocalc.errors import StudyFormatError
from exocalc.model.codecs import CODECS, _parse_float
from exocalc.model.measurement import Measurement
from exocalc.model.parameter_spec import PARAMETER_REGISTRY, canonicalize_param_name
from exocalc.model.study import DEFAULT_SCALE_HEIGHTS, INPUT_FIELDS, Study

logger = logging.getLogger(__name__)

_LOG_PREFIX = "LOG"


def _is_number(token: str) -> bool:
    try:
        _parse_float(token)
    except ValueError:
        return False
    return True


def _split_key(key: str) -> Tuple[str, str]:
    """Return ``(canonical_name, codec_name)`` for a line key.

    Unknown keys come back unchanged so the caller can report them.
    """
    canonical = canonicalize_param_name(key)
    if canonical in INPUT_FIELDS:
        return canonical, "linear"
    if key.upper().startswith(_LOG_PREFIX):
        logged = canonicalize_param_name(key[len(_LOG_PREFIX):])
        if logged in INPUT_FIELDS:
            return logged, "log10"
    return key, "linear"


def parse_measurement_line(tokens: List[str], codec_name: str = "linear") -> Measurement:
    """
    Decode the ``VALUE [UNCERTAINTY] [UNIT]`` tokens of a line.

    Raises
    ------
    ValueError
        If the value is not a number, the uncertainty is negative or the
        unit is not recognised.
    """
    if not tokens:
        raise ValueError("missing value")
    value, rest = tokens[0], tokens[1:]
    uncertainty: Optional[str] = None
    if rest and _is_number(rest[0]):
        uncertainty, rest = rest[0], rest[1:]
    unit = " ".join(rest)
    return CODECS[codec_name].decode(value, uncertainty, unit)


class _StudyBuilder:
    """Accumulates the lines of one study."""

    def __init__(self, name: str, line_no: int, scale_height_count: float):
        self.name = name
        self.line_no = line_no
        self.scale_height_count = scale_height_count
        self.scale_line_no = line_no
        self.values: Dict[str, Measurement] = {}

    def build(self, path) -> Study:
        try:
            return Study(
                name=self.name,
                scale_height_count=self.scale_height_count,
                **self.values,
            )
        except ValueError as e:
            # dimensions were checked per line, so this is N_SCALES
            raise StudyFormatError(path, self.scale_line_no, str(e)) from e


def load_studies(path: Path | str,
                 scale_height_count: Optional[float] = None) -> List[Study]:
    """
    Read every study in a .study file.

    Parameters
    ----------
    path : Path or str
        File to read
    scale_height_count : float, optional
        Used for studies without an ``N_SCALES`` line (default 5.0)

    Returns
    -------
    list of Study
        In file order

    Raises
    ------
    StudyFormatError
        On a malformed line, an unknown or repeated key, a value before the
        first NAME, an unparsable unit or a unit of the wrong dimension.
    OSError
        If the file cannot be read.
    """
    path = Path(path)
    default_scales = DEFAULT_SCALE_HEIGHTS if scale_height_count is None else scale_height_count
    studies: List[Study] = []
    current: Optional[_StudyBuilder] = None

    with open(path, encoding="utf-8") as f:
        for line_no, raw in enumerate(f, start=1):
            head = raw.split(None, 1)
            if head and head[0].upper() == "NAME":
                # the label runs to the end of the line, '#' included
                label = head[1].strip() if len(head) > 1 else ""
                if not label:
                    raise StudyFormatError(path, line_no, "NAME needs a label")
                if current is not None:
                    studies.append(current.build(path))
                current = _StudyBuilder(label, line_no, default_scales)
                continue

            line = raw.split("#", 1)[0].strip()
            if not line:
                continue

            parts = line.split()
            key = parts[0]
            upper = key.upper()

            if current is None:
                raise StudyFormatError(path, line_no, f"{key} appears before the first NAME")

            if upper == "N_SCALES":
                if len(parts) != 2 or not _is_number(parts[1]):
                    raise StudyFormatError(path, line_no, "N_SCALES needs one number")
                current.scale_height_count = _parse_float(parts[1])
                current.scale_line_no = line_no
                continue

            name, codec_name = _split_key(key)
            if name not in INPUT_FIELDS:
                raise StudyFormatError(path, line_no, f"Unknown parameter {key!r}")
            if name in current.values:
                raise StudyFormatError(path, line_no, f"{name} given more than once")

            try:
                measurement = parse_measurement_line(parts[1:], codec_name)
            except ValueError as e:
                raise StudyFormatError(path, line_no, f"Bad {name} entry: {e}") from e

            spec = PARAMETER_REGISTRY[name]
            if not measurement.is_equivalent(spec.internal_unit or None):
                raise StudyFormatError(
                    path, line_no,
                    f"{name} needs units of {spec.internal_unit or 'dimensionless'}, "
                    f"got {measurement.physical_type}",
                )
            current.values[name] = measurement

    if current is not None:
        studies.append(current.build(path))

    logger.debug(f"Read {len(studies)} studies from {path}")
    return studies
