"""Resolve many studies, keeping each study's outcome separate.

Studies are independent, so a failure in one never stops the others.
Every ``ExocalcError`` is captured on the study's ``StudyOutcome``; any
other exception is a bug and propagates.

The default parallelism comes from the ``EXOCALC_WORKERS`` environment
variable (1, i.e. sequential, if unset).
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from exocalc.engine.resolver import DerivedResult, Provenance, resolve
from exocalc.errors import ExocalcError
from exocalc.model.study import Study

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudyOutcome:
    """Result of resolving one study: either a result pair or an error."""
    study: Study
    result: Optional[DerivedResult] = None
    provenance: Optional[Provenance] = None
    error: Optional[ExocalcError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Tuple[DerivedResult, Provenance]:
        """Return ``(result, provenance)`` or re-raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.result, self.provenance


def get_default_workers() -> int:
    """Worker count from ``EXOCALC_WORKERS``, at least 1."""
    raw = os.environ.get("EXOCALC_WORKERS", "1").strip()
    try:
        workers = int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid EXOCALC_WORKERS={raw!r}")
        return 1
    return max(workers, 1)


def resolve_one(study: Study) -> StudyOutcome:
    """Resolve a single study, capturing any ExocalcError."""
    try:
        result, provenance = resolve(study)
    except ExocalcError as e:
        logger.debug(f"{study.name!r} failed: {e}")
        return StudyOutcome(study, error=e)
    return StudyOutcome(study, result, provenance)


def resolve_all(studies: Sequence[Study],
                max_workers: Optional[int] = None) -> List[StudyOutcome]:
    """
    Resolve every study; outcomes are returned in input order.

    Parameters
    ----------
    studies : sequence of Study
    max_workers : int, optional
        Number of threads; defaults to ``EXOCALC_WORKERS``. 1 runs
        sequentially in the calling thread.
    """
    studies = list(studies)
    workers = get_default_workers() if max_workers is None else max_workers
    if workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {workers}")

    if workers == 1 or len(studies) <= 1:
        outcomes = [resolve_one(s) for s in studies]
    else:
        with ThreadPoolExecutor(max_workers=min(workers, len(studies))) as executor:
            outcomes = list(executor.map(resolve_one, studies))

    failed = sum(1 for o in outcomes if not o.ok)
    logger.info(f"Resolved {len(outcomes) - failed}/{len(outcomes)} studies")
    return outcomes
