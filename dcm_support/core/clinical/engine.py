"""
Clinical Decision Engine

Central dispatcher.  Takes one PatientRecord and runs every evaluator:

    severity  →  risk group  ┐
                 risk/benefit├─ independent, pure
                 approach    ┘
                     └→ uncertainty

Usage:
    from dcm_support.core.clinical import DecisionEngine, PatientRecord

    engine = DecisionEngine()
    result = engine.evaluate(PatientRecord(mjoa=13, duration_months=12, levels=3))
    print(result.headline, result.best_approach, result.uncertainty_tier)
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional

from dcm_support.config import EngineConfig
from dcm_support.utils import get_logger
from .base import (
    APPROACH_ORDER,
    PatientRecord,
    RecommendationLabel,
    RecommendationResult,
    UncertaintyTier,
)
from .rules_approach import estimate_approach
from .rules_risk_benefit import estimate_risk_benefit
from .rules_risk_group import classify_risk_group
from .severity import classify_severity
from .uncertainty import estimate_uncertainty

logger = get_logger(__name__)


def case_summary(record: PatientRecord, severity_name: str) -> str:
    """One-line description of the case as entered."""
    return (
        f"Age {record.age}, {record.sex.value}, mJOA {record.mjoa} ({severity_name}), "
        f"symptom duration ≈ {record.duration_months} months, "
        f"planned levels {record.levels}."
    )


class DecisionEngine:
    """
    Transforms a PatientRecord into a RecommendationResult.

    Stateless apart from its immutable EngineConfig — safe to call from
    multiple threads.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def evaluate(self, record: PatientRecord) -> RecommendationResult:
        severity = classify_severity(record.mjoa, self.config)
        group = classify_risk_group(record, severity, self.config)
        scores = estimate_risk_benefit(record, severity, self.config)
        approach = estimate_approach(record, severity, self.config)
        tier = estimate_uncertainty(approach.probabilities, self.config)

        logger.debug(
            f"DecisionEngine: mJOA={record.mjoa} ({severity.value}) → "
            f"{group.label.value} via {group.rule}, best={approach.best.value}, "
            f"uncertainty={tier.value}",
            extra={"rule": group.rule},
        )

        return RecommendationResult(
            severity=severity,
            label=group.label,
            risk_text=group.risk_text,
            benefit_text=group.benefit_text,
            risk_score=scores.risk_score,
            benefit_score=scores.benefit_score,
            approach_probabilities=approach.probabilities,
            best_approach=approach.best,
            uncertainty_tier=tier,
            summary=case_summary(record, severity.value),
            rule=group.rule,
            approach_drivers=approach.drivers,
        )

    def evaluate_many(self, records: Iterable[PatientRecord]) -> List[RecommendationResult]:
        return [self.evaluate(r) for r in records]

    @staticmethod
    def summarise(results: List[RecommendationResult]) -> Dict:
        """
        Build a compact summary dict suitable for JSON output.

        Example output:
        {
            "total": 2,
            "by_label": {"surgery_recommended": 1, "consider_surgery": 1, ...},
            "by_best_approach": {"anterior": 0, "posterior": 2, ...},
            "by_uncertainty": {"low": 0, "moderate": 1, "high": 1},
            "results": [{...}, {...}]
        }
        """
        labels = Counter(r.label for r in results)
        best = Counter(r.best_approach for r in results)
        tiers = Counter(r.uncertainty_tier for r in results)

        return {
            "total": len(results),
            "by_label": {label.value: labels.get(label, 0) for label in RecommendationLabel},
            "by_best_approach": {a.value: best.get(a, 0) for a in APPROACH_ORDER},
            "by_uncertainty": {t.value: tiers.get(t, 0) for t in UncertaintyTier},
            "results": [r.to_dict() for r in results],
        }
