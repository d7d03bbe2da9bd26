"""Exception hierarchy for exocalc.

Every error raised deliberately by the package derives from
``ExocalcError`` so that batch processing can capture failures per study
without hiding genuine programming errors.
"""

from typing import Optional, Sequence, Tuple


class ExocalcError(Exception):
    """Base class for all exocalc errors."""


class DimensionMismatch(ExocalcError, ValueError):
    """Two measurements with incompatible physical dimensions were combined.

    Inside the resolution engine this indicates a badly dimensioned
    formula or input and is never recoverable.
    """


class NonPhysicalValue(ExocalcError, ValueError):
    """An operation left the real, finite numbers.

    Raised for a division by zero, a fractional power of a negative value
    or a non-finite result, so out-of-range inputs fail like any other
    study-level error.
    """


class StudyFormatError(ExocalcError, ValueError):
    """A literature (.study) file could not be parsed."""

    def __init__(self, path, line_no: int, message: str):
        self.path = path
        self.line_no = line_no
        super().__init__(f"{path}:{line_no}: {message}")


class ResolutionError(ExocalcError):
    """A study cannot be resolved into a complete parameter set."""

    def __init__(self, field: str, message: str, study: Optional[str] = None):
        self.field = field
        self.study = study
        prefix = f"[{study}] " if study else ""
        super().__init__(prefix + message)


class MissingInput(ResolutionError):
    """No formula variant for ``field`` has all of its inputs available.

    Attributes
    ----------
    field : str
        Canonical name of the quantity that could not be resolved.
    alternatives : tuple of tuple of str
        Input combinations, any one of which would have sufficed.
    study : str or None
        Name of the study being resolved.
    """

    def __init__(
        self,
        field: str,
        alternatives: Sequence[Sequence[str]],
        study: Optional[str] = None,
    ):
        self.alternatives: Tuple[Tuple[str, ...], ...] = tuple(
            tuple(combo) for combo in alternatives
        )
        options = " or ".join(
            "(" + ", ".join(combo) + ")" for combo in self.alternatives
        )
        super().__init__(
            field,
            f"Cannot determine {field}: provide {options}",
            study=study,
        )


class ConflictingInputs(ResolutionError):
    """Mutually exclusive inputs were given for the same quantity.

    The engine never picks one of them silently.
    """

    def __init__(
        self,
        field: str,
        inputs: Sequence[str],
        study: Optional[str] = None,
    ):
        self.inputs: Tuple[str, ...] = tuple(inputs)
        super().__init__(
            field,
            f"Conflicting inputs for {field}: only one of "
            f"{', '.join(self.inputs)} can be given",
            study=study,
        )
