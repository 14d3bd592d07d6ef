"""
Clinical Decision Layer — Base Types

Defines the data contracts shared by the rule modules: the immutable patient
record, the enumerations it is built from, and the result structures that
the engine and batch aggregator return.  All are plain value objects with a
``to_dict()`` for JSON output.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List


class Sex(str, Enum):
    MALE   = "M"
    FEMALE = "F"


class T2Signal(str, Enum):
    """Intramedullary T2 hyperintensity on MRI."""
    NONE       = "none"
    BRIGHT     = "bright"
    MULTILEVEL = "multilevel"


class CanalRatio(str, Enum):
    """Canal occupying ratio band of the compressive / ossified lesion."""
    LOW  = "<50%"
    MID  = "50–60%"
    HIGH = ">60%"


class Severity(str, Enum):
    """
    DCM severity band derived from mJOA.

    MILD     – mJOA 15–17 (18 is normal function)
    MODERATE – mJOA 12–14
    SEVERE   – mJOA 11 or below
    """
    MILD     = "mild"
    MODERATE = "moderate"
    SEVERE   = "severe"

    @property
    def display(self) -> str:
        return _SEVERITY_DISPLAY[self]

    @property
    def rank(self) -> int:
        """0 = mild, 2 = severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_DISPLAY = {
    Severity.MILD:     "Mild (mJOA 15–17)",
    Severity.MODERATE: "Moderate (mJOA 12–14)",
    Severity.SEVERE:   "Severe (mJOA ≤11)",
}

_SEVERITY_RANK = {
    Severity.MILD:     0,
    Severity.MODERATE: 1,
    Severity.SEVERE:   2,
}


class RecommendationLabel(str, Enum):
    SURGERY_RECOMMENDED = "surgery_recommended"
    CONSIDER_SURGERY    = "consider_surgery"
    NON_OPERATIVE_TRIAL = "non_operative_trial"

    @property
    def headline(self) -> str:
        return _LABEL_HEADLINES[self]


_LABEL_HEADLINES = {
    RecommendationLabel.SURGERY_RECOMMENDED: "Surgery recommended",
    RecommendationLabel.CONSIDER_SURGERY:    "Consider surgery / surgery likely beneficial",
    RecommendationLabel.NON_OPERATIVE_TRIAL: (
        "Non-operative trial reasonable with close follow-up and structured surveillance."
    ),
}


class Approach(str, Enum):
    """Surgical approach.  Declaration order is the tie-break order."""
    ANTERIOR        = "anterior"
    POSTERIOR       = "posterior"
    CIRCUMFERENTIAL = "circumferential"


APPROACH_ORDER: List[Approach] = list(Approach)


class UncertaintyTier(str, Enum):
    """How clearly one approach leads the others."""
    LOW      = "low"
    MODERATE = "moderate"
    HIGH     = "high"


@dataclass(frozen=True)
class PatientRecord:
    """
    One patient's baseline features.  Constructed per evaluation and never
    mutated; the engine reads it and keeps nothing.
    """
    age: int = 65
    sex: Sex = Sex.MALE
    mjoa: int = 18
    duration_months: int = 0
    t2_signal: T2Signal = T2Signal.BRIGHT
    levels: int = 1
    canal_ratio: CanalRatio = CanalRatio.LOW
    opll: bool = False
    t1_hypo: bool = False
    smoker: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = value.value if isinstance(value, Enum) else value
        return out


@dataclass(frozen=True)
class RiskGroupResult:
    """Outcome of the risk-group decision table."""
    label: RecommendationLabel
    risk_text: str
    benefit_text: str
    rule: str                # name of the decision-table row that fired

    @property
    def headline(self) -> str:
        return self.label.headline


@dataclass(frozen=True)
class RiskBenefitScore:
    risk_score: int          # % chance of neurological worsening without surgery
    benefit_score: int       # % chance of meaningful improvement with surgery


@dataclass(frozen=True)
class RecommendationResult:
    """Everything the engine reports for one patient."""
    severity: Severity
    label: RecommendationLabel
    risk_text: str
    benefit_text: str
    risk_score: int
    benefit_score: int
    approach_probabilities: Dict[Approach, float]
    best_approach: Approach
    uncertainty_tier: UncertaintyTier
    summary: str
    rule: str = ""                                   # risk-group row that fired
    approach_drivers: List[str] = field(default_factory=list)

    @property
    def headline(self) -> str:
        return self.label.headline

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "severity_display": self.severity.display,
            "label": self.label.value,
            "headline": self.headline,
            "risk_text": self.risk_text,
            "benefit_text": self.benefit_text,
            "risk_score": self.risk_score,
            "benefit_score": self.benefit_score,
            "approach_probabilities": {
                a.value: self.approach_probabilities[a] for a in APPROACH_ORDER
            },
            "best_approach": self.best_approach.value,
            "uncertainty_tier": self.uncertainty_tier.value,
            "summary": self.summary,
            "rule": self.rule,
            "approach_drivers": list(self.approach_drivers),
        }


@dataclass
class BatchSummary:
    """
    Aggregate counts over a batch.

    Both groupings (recommendation label, winning approach) sum to ``total``.
    Summaries of disjoint partitions combine with ``merge`` / ``+``.
    """
    total: int = 0
    surgery_recommended: int = 0
    consider_surgery: int = 0
    non_operative: int = 0
    anterior: int = 0
    posterior: int = 0
    circumferential: int = 0

    def record(self, label: RecommendationLabel, best: Approach) -> None:
        self.total += 1
        if label is RecommendationLabel.SURGERY_RECOMMENDED:
            self.surgery_recommended += 1
        elif label is RecommendationLabel.CONSIDER_SURGERY:
            self.consider_surgery += 1
        else:
            self.non_operative += 1

        if best is Approach.ANTERIOR:
            self.anterior += 1
        elif best is Approach.POSTERIOR:
            self.posterior += 1
        else:
            self.circumferential += 1

    def merge(self, other: "BatchSummary") -> "BatchSummary":
        return BatchSummary(**{
            f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)
        })

    def __add__(self, other: "BatchSummary") -> "BatchSummary":
        if not isinstance(other, BatchSummary):
            return NotImplemented
        return self.merge(other)

    def is_consistent(self) -> bool:
        """Both groupings account for every record."""
        by_label = self.surgery_recommended + self.consider_surgery + self.non_operative
        by_approach = self.anterior + self.posterior + self.circumferential
        return by_label == self.total and by_approach == self.total

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class FieldFallback:
    """A raw field that failed to parse and was replaced by its default."""
    field: str
    raw_value: Any
    default: Any
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        default = self.default.value if isinstance(self.default, Enum) else self.default
        return {
            "field": self.field,
            "raw_value": self.raw_value,
            "default": default,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ParsedRow:
    """A batch row after parsing: the record plus any fallbacks applied."""
    row_number: int
    record: PatientRecord
    fallbacks: List[FieldFallback] = field(default_factory=list)
