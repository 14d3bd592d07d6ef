"""
Approach Probability Model

Answers "if surgery is offered, which approach?" by estimating, for each of
anterior / posterior / circumferential decompression, the probability of
reaching the mJOA MCID.

The estimate is an additive rule stack over a severity baseline so that a
clinician can see exactly which factor moved which approach:

  1. mild, short-segment, non-OPLL, canal ≤ 60%  → anterior modestly favoured
  2. multilevel disease or symptoms ≥ 12 months  → posterior favoured
  3. OPLL, by canal occupying ratio:
       > 60%   anterior has higher recovery despite more complications
       50–60%  anterior and posterior similar
       < 50%   posterior favoured for its complication profile
  4. multilevel T2 signal                        → posterior / circumferential
  5. ≥ 6 months, non-OPLL, moderate/severe       → small anterior + posterior drop
  6. high burden (age ≥ 75, smoker, T1 hypo,
     cord signal)                                → all approaches downshifted
  7. clamp each probability to [0.25, 0.90]

Steps are applied in this fixed order and any number may fire.  These are
heuristic placeholders pending calibration against prospective outcome data.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from dcm_support.config import EngineConfig
from .base import APPROACH_ORDER, Approach, PatientRecord, Severity, T2Signal
from .predicates import ClinicalPredicates, derive_predicates

_DEFAULT_CONFIG = EngineConfig()


@dataclass(frozen=True)
class ApproachEstimate:
    probabilities: Dict[Approach, float]
    best: Approach
    drivers: List[str] = field(default_factory=list)   # adjustment steps that fired


def _vector(deltas: Sequence[float]) -> np.ndarray:
    return np.asarray(deltas, dtype=float)


def _adjustment_steps(p: ClinicalPredicates, record: PatientRecord, cfg: EngineConfig):
    """Yield (step_name, delta_vector) for every adjustment that applies, in order."""
    c = cfg.approach

    if p.mild and not p.opll and not p.multilevel and not p.high_canal:
        yield "mild_short_segment", c.mild_short_segment

    if p.multilevel or p.very_long:
        yield "multilevel_or_very_long", c.multilevel_or_very_long

    if p.opll:
        if p.high_canal:
            yield "opll_high_canal", c.opll_high_canal
        elif p.mid_canal:
            yield "opll_mid_canal", c.opll_mid_canal
        else:
            yield "opll_low_canal", c.opll_low_canal

    if record.t2_signal is T2Signal.MULTILEVEL:
        yield "t2_multilevel", c.t2_multilevel

    if p.long_symptoms and not p.opll and p.moderate_or_severe:
        yield "long_symptoms_non_opll", c.long_symptoms_non_opll

    if p.high_burden:
        yield "high_burden", c.high_burden


def estimate_approach(
    record: PatientRecord,
    severity: Severity,
    config: Optional[EngineConfig] = None,
) -> ApproachEstimate:
    cfg = config or _DEFAULT_CONFIG
    c = cfg.approach
    p = derive_predicates(record, severity, cfg)

    base = c.base_by_severity[severity.value]
    probs = _vector([base, base, base + c.circumferential_offset])

    drivers = []
    for name, deltas in _adjustment_steps(p, record, cfg):
        probs = probs + _vector(deltas)
        drivers.append(name)

    low, high = c.bounds
    probs = np.round(np.clip(probs, low, high), c.precision)

    probabilities = {a: float(v) for a, v in zip(APPROACH_ORDER, probs)}
    return ApproachEstimate(
        probabilities=probabilities,
        best=best_approach(probabilities),
        drivers=drivers,
    )


def estimate_approach_probabilities(
    record: PatientRecord,
    severity: Severity,
    config: Optional[EngineConfig] = None,
) -> Dict[Approach, float]:
    return estimate_approach(record, severity, config).probabilities


def best_approach(probabilities: Dict[Approach, float]) -> Approach:
    """Highest probability; ties go to the earlier approach in declaration order."""
    values = _vector([probabilities[a] for a in APPROACH_ORDER])
    # argmax returns the first index among equal maxima
    return APPROACH_ORDER[int(np.argmax(values))]
