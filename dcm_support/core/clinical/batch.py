"""
Batch Aggregator

Folds a collection of patients into recommendation and preferred-approach
counts.  Each record is evaluated independently, so the fold can run over
partitions in parallel and the partial summaries merged by per-field sum.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import reduce
from operator import add
from typing import Dict, Iterable, List, Optional, Sequence

from dcm_support.config import EngineConfig
from dcm_support.utils import get_logger
from .base import BatchSummary, FieldFallback, ParsedRow, PatientRecord
from .rules_approach import estimate_approach
from .rules_risk_group import classify_risk_group
from .severity import classify_severity

logger = get_logger(__name__)


@dataclass
class BatchResult:
    """Summary counts plus the field fallbacks applied per data row."""
    summary: BatchSummary
    fallbacks: Dict[int, List[FieldFallback]] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "summary": self.summary.to_dict(),
            "fallbacks": {
                str(row): [f.to_dict() for f in flags]
                for row, flags in sorted(self.fallbacks.items())
            },
        }


class BatchAggregator:
    """Applies the per-patient classifiers to many records and counts outcomes."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def fold(self, records: Iterable[PatientRecord]) -> BatchSummary:
        """Sequential fold over records."""
        summary = BatchSummary()
        for record in records:
            severity = classify_severity(record.mjoa, self.config)
            group = classify_risk_group(record, severity, self.config)
            approach = estimate_approach(record, severity, self.config)
            summary.record(group.label, approach.best)
        return summary

    def aggregate(
        self,
        records: Sequence[PatientRecord],
        max_workers: Optional[int] = None,
    ) -> BatchSummary:
        """
        Aggregate records into a BatchSummary.

        Args:
            records: Patients to evaluate
            max_workers: If > 1, split records into that many partitions and
                         fold them on a thread pool before merging

        Returns:
            BatchSummary whose label and approach counts each sum to total
        """
        records = list(records)
        if not max_workers or max_workers <= 1 or len(records) < 2:
            summary = self.fold(records)
        else:
            partitions = _partition(records, max_workers)
            with ThreadPoolExecutor(max_workers=len(partitions)) as executor:
                partials = list(executor.map(self.fold, partitions))
            summary = reduce(add, partials, BatchSummary())

        logger.info(
            f"BatchAggregator: {summary.total} patient(s) — "
            f"surgery={summary.surgery_recommended}, consider={summary.consider_surgery}, "
            f"non-op={summary.non_operative}",
            extra={"workers": max_workers},
        )
        return summary

    def aggregate_rows(
        self,
        rows: Sequence[ParsedRow],
        max_workers: Optional[int] = None,
    ) -> BatchResult:
        """Aggregate parsed batch rows, carrying their fallback flags along."""
        summary = self.aggregate([row.record for row in rows], max_workers=max_workers)
        fallbacks = {row.row_number: list(row.fallbacks) for row in rows if row.fallbacks}
        return BatchResult(summary=summary, fallbacks=fallbacks)


def _partition(records: List[PatientRecord], parts: int) -> List[List[PatientRecord]]:
    size = -(-len(records) // parts)    # ceiling division
    return [records[i:i + size] for i in range(0, len(records), size)]
