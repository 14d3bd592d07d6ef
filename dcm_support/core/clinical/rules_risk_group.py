"""
Risk-Group Decision Rules

Answers "should this patient undergo surgery?" with one of three labels plus
the narrative risk / benefit text shown next to it.

Pattern logic approximates the AO Spine / WFNS guideline groups for DCM:
  - moderate or severe myelopathy is an indication for decompression when
    any structural or chronicity marker is present
  - mild myelopathy with MRI signal change or prolonged symptoms warrants
    offering surgery, with a supervised non-operative trial as an option
  - everything else starts with structured surveillance

Design principles:
  - DECISION_TABLE is an ordered list of (name, predicate, outcome) rows.
  - Rows are evaluated top-down; the FIRST match wins.  Reordering rows
    changes behaviour, so edits must keep the order intentional.
  - The final row always matches, so exactly one label is produced.
"""
from __future__ import annotations

from typing import Callable, List, NamedTuple, Optional

from dcm_support.config import EngineConfig
from .base import PatientRecord, RecommendationLabel, RiskGroupResult, Severity
from .predicates import ClinicalPredicates, derive_predicates

# ── Narrative text ────────────────────────────────────────────────────────────

SURGERY_RISK_TEXT = (
    "Moderate–severe DCM with cord signal change, extended symptoms, multilevel "
    "stenosis or high canal occupying ratio carries substantial risk of progression "
    "without surgery."
)
SURGERY_BENEFIT_TEXT = (
    "Most patients in similar cohorts gain clinically meaningful mJOA and functional "
    "improvement following decompression, with acceptable complication rates."
)

CONSIDER_RISK_TEXT = (
    "Mild DCM with MRI or duration risk markers has a meaningful chance of "
    "progression over time."
)
CONSIDER_BENEFIT_TEXT = (
    "Early decompression often yields clinically important improvement, but a "
    "monitored non-operative trial is reasonable if symptoms are stable and the "
    "patient prefers to delay surgery."
)

NON_OP_RISK_TEXT = (
    "Low–moderate short-term risk of neurological worsening with careful monitoring, "
    "assuming no new red-flag features develop."
)
NON_OP_BENEFIT_TEXT = (
    "Surgical benefit may be modest in mild, stable disease. Shared decision-making "
    "is important."
)


class DecisionRow(NamedTuple):
    name: str
    predicate: Callable[[ClinicalPredicates], bool]
    label: RecommendationLabel
    risk_text: str
    benefit_text: str


# ── Rule predicates ───────────────────────────────────────────────────────────

def _surgery_indicated(p: ClinicalPredicates) -> bool:
    """Moderate/severe myelopathy with any structural or chronicity marker."""
    return p.moderate_or_severe and (
        p.cord_signal or p.long_symptoms or p.high_canal or p.multilevel
    )


def _mild_with_risk_markers(p: ClinicalPredicates) -> bool:
    """Mild myelopathy with cord signal change or symptoms of 6+ months."""
    return p.mild and (p.cord_signal or p.long_symptoms)


def _always(p: ClinicalPredicates) -> bool:
    return True


DECISION_TABLE: List[DecisionRow] = [
    DecisionRow(
        "moderate_severe_with_markers",
        _surgery_indicated,
        RecommendationLabel.SURGERY_RECOMMENDED,
        SURGERY_RISK_TEXT,
        SURGERY_BENEFIT_TEXT,
    ),
    DecisionRow(
        "mild_with_risk_markers",
        _mild_with_risk_markers,
        RecommendationLabel.CONSIDER_SURGERY,
        CONSIDER_RISK_TEXT,
        CONSIDER_BENEFIT_TEXT,
    ),
    DecisionRow(
        "default_non_operative",
        _always,
        RecommendationLabel.NON_OPERATIVE_TRIAL,
        NON_OP_RISK_TEXT,
        NON_OP_BENEFIT_TEXT,
    ),
]


def evaluate_risk_group(predicates: ClinicalPredicates) -> RiskGroupResult:
    """Walk DECISION_TABLE top-down and return the first matching row."""
    for row in DECISION_TABLE:
        if row.predicate(predicates):
            return RiskGroupResult(
                label=row.label,
                risk_text=row.risk_text,
                benefit_text=row.benefit_text,
                rule=row.name,
            )
    # Unreachable while the last row is _always
    raise AssertionError("decision table has no catch-all row")


def classify_risk_group(
    record: PatientRecord,
    severity: Severity,
    config: Optional[EngineConfig] = None,
) -> RiskGroupResult:
    return evaluate_risk_group(derive_predicates(record, severity, config))
