"""
exocalc Engine
==============

Turns a ``Study`` into a complete parameter set:
- formulas: the physical relations, each declared as a ``Formula``
- stages: the ordered resolution pipeline (which formula, when)
- resolver: ``resolve(study) -> (DerivedResult, Provenance)``
- batch: ``resolve_all(studies)`` with per-study outcomes
- report: plain-text summaries

Usage Example:
--------------
from exocalc.engine import resolve, format_summary

result, provenance = resolve(study)
print(format_summary(result, provenance))
"""

from exocalc.engine.formulas import Formula, Resolved, FORMULAS
from exocalc.engine.stages import Stage, STAGES
from exocalc.engine.resolver import (
    DerivedResult,
    Provenance,
    RESULT_FIELDS,
    resolve,
)
from exocalc.engine.batch import StudyOutcome, resolve_all
from exocalc.engine.report import format_summary, format_failure, format_batch

__all__ = [
    'Formula',
    'Resolved',
    'FORMULAS',
    'Stage',
    'STAGES',
    'DerivedResult',
    'Provenance',
    'RESULT_FIELDS',
    'resolve',
    'StudyOutcome',
    'resolve_all',
    'format_summary',
    'format_failure',
    'format_batch',
]
