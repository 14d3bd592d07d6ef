"""
Unit Tests for Batch Aggregation

Tests for BatchAggregator, BatchSummary merging and partitioned folds.
"""
import itertools

import pytest

from dcm_support.core.clinical import (
    Approach,
    BatchAggregator,
    BatchSummary,
    CanalRatio,
    PatientRecord,
    RecommendationLabel,
    T2Signal,
)
from dcm_support.core.clinical.base import FieldFallback, ParsedRow


@pytest.fixture
def cohort():
    """A mixed cohort covering every label."""
    return [
        PatientRecord(mjoa=mjoa, duration_months=duration, t2_signal=t2, levels=levels,
                      canal_ratio=canal, opll=opll)
        for mjoa, duration, t2, levels, canal, opll in itertools.product(
            [8, 13, 16],
            [2, 12],
            [T2Signal.NONE, T2Signal.MULTILEVEL],
            [1, 3],
            [CanalRatio.LOW, CanalRatio.HIGH],
            [False, True],
        )
    ]


class TestBatchSummary:
    """Tests for the BatchSummary counters."""

    def test_record_counts(self):
        summary = BatchSummary()
        summary.record(RecommendationLabel.SURGERY_RECOMMENDED, Approach.POSTERIOR)
        summary.record(RecommendationLabel.NON_OPERATIVE_TRIAL, Approach.ANTERIOR)

        assert summary.total == 2
        assert summary.surgery_recommended == 1
        assert summary.non_operative == 1
        assert summary.posterior == 1
        assert summary.anterior == 1
        assert summary.is_consistent()

    def test_merge_sums_fields(self):
        a = BatchSummary(total=2, surgery_recommended=2, posterior=2)
        b = BatchSummary(total=1, consider_surgery=1, circumferential=1)
        merged = a + b

        assert merged.to_dict() == {
            "total": 3,
            "surgery_recommended": 2,
            "consider_surgery": 1,
            "non_operative": 0,
            "anterior": 0,
            "posterior": 2,
            "circumferential": 1,
        }
        # operands untouched
        assert a.total == 2 and b.total == 1

    def test_empty_summary_is_consistent(self):
        assert BatchSummary().is_consistent()


class TestBatchAggregator:
    """Tests for BatchAggregator."""

    def test_two_row_batch(self, moderate_multilevel_patient, mild_cord_signal_patient):
        summary = BatchAggregator().aggregate([moderate_multilevel_patient, mild_cord_signal_patient])

        assert summary.total == 2
        assert summary.surgery_recommended == 1
        assert summary.consider_surgery == 1
        assert summary.non_operative == 0
        assert summary.posterior == 1
        assert summary.anterior == 1

    def test_conservation(self, cohort):
        summary = BatchAggregator().aggregate(cohort)
        assert summary.total == len(cohort)
        assert summary.is_consistent()
        assert summary.surgery_recommended > 0
        assert summary.consider_surgery > 0
        assert summary.non_operative > 0

    def test_order_independent(self, cohort):
        aggregator = BatchAggregator()
        assert aggregator.aggregate(cohort) == aggregator.aggregate(list(reversed(cohort)))

    @pytest.mark.parametrize("workers", [2, 3, 8])
    def test_parallel_matches_sequential(self, cohort, workers):
        aggregator = BatchAggregator()
        assert aggregator.aggregate(cohort, max_workers=workers) == aggregator.aggregate(cohort)

    def test_partitions_merge(self, cohort):
        aggregator = BatchAggregator()
        half = len(cohort) // 2
        merged = aggregator.fold(cohort[:half]) + aggregator.fold(cohort[half:])
        assert merged == aggregator.fold(cohort)

    def test_empty_input(self):
        assert BatchAggregator().aggregate([]) == BatchSummary()

    def test_aggregate_rows_keeps_fallbacks(self, moderate_multilevel_patient):
        flag = FieldFallback(field="mjoa", raw_value="abc", default=18, reason="not a number")
        rows = [
            ParsedRow(row_number=1, record=moderate_multilevel_patient),
            ParsedRow(row_number=2, record=PatientRecord(), fallbacks=[flag]),
        ]
        result = BatchAggregator().aggregate_rows(rows)

        assert result.summary.total == 2
        assert list(result.fallbacks) == [2]
        assert result.to_dict()["fallbacks"]["2"][0]["field"] == "mjoa"
