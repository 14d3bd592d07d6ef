"""
Clinical Decision Layer

Transforms a patient's baseline features into a surgical recommendation,
risk / benefit estimates and per-approach MCID probabilities.

Usage:
    from dcm_support.core.clinical import DecisionEngine, PatientRecord

    engine = DecisionEngine()
    result = engine.evaluate(PatientRecord(mjoa=13, duration_months=12, levels=3))
"""
from .base import (
    Approach,
    BatchSummary,
    CanalRatio,
    FieldFallback,
    ParsedRow,
    PatientRecord,
    RecommendationLabel,
    RecommendationResult,
    RiskBenefitScore,
    RiskGroupResult,
    Severity,
    Sex,
    T2Signal,
    UncertaintyTier,
)
from .batch import BatchAggregator, BatchResult
from .engine import DecisionEngine
from .rules_approach import best_approach, estimate_approach, estimate_approach_probabilities
from .rules_risk_benefit import estimate_risk_benefit
from .rules_risk_group import classify_risk_group
from .severity import classify_severity
from .uncertainty import estimate_uncertainty

__all__ = [
    "Approach",
    "BatchAggregator",
    "BatchResult",
    "BatchSummary",
    "CanalRatio",
    "DecisionEngine",
    "FieldFallback",
    "ParsedRow",
    "PatientRecord",
    "RecommendationLabel",
    "RecommendationResult",
    "RiskBenefitScore",
    "RiskGroupResult",
    "Severity",
    "Sex",
    "T2Signal",
    "UncertaintyTier",
    "best_approach",
    "classify_risk_group",
    "classify_severity",
    "estimate_approach",
    "estimate_approach_probabilities",
    "estimate_risk_benefit",
    "estimate_uncertainty",
]
