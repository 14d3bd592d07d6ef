"""
Risk / Benefit Scorer

Numeric companions to the risk-group narrative:
  risk_score    – % chance of neurological worsening without surgery
  benefit_score – % chance of meaningful improvement with surgery

A severity base is shifted by additive adjustments (all applied regardless
of severity) and clamped.  With the default constants the worst-case sums
already stay inside the clamp bounds; the clamp only matters for
recalibrated constants.
"""
from __future__ import annotations

from typing import Optional

from dcm_support.config import EngineConfig
from .base import PatientRecord, RiskBenefitScore, Severity, T2Signal
from .predicates import derive_predicates

_DEFAULT_CONFIG = EngineConfig()


def _clamp(value: int, bounds) -> int:
    low, high = bounds
    return max(low, min(high, value))


def estimate_risk_benefit(
    record: PatientRecord,
    severity: Severity,
    config: Optional[EngineConfig] = None,
) -> RiskBenefitScore:
    cfg = config or _DEFAULT_CONFIG
    constants = cfg.risk_benefit
    p = derive_predicates(record, severity, cfg)

    risk, benefit = constants.base_by_severity[severity.value]
    adjustments = []

    # Duration: the two branches cannot both apply
    if p.very_long:
        adjustments.append(constants.very_long_duration)
    elif p.short_symptoms:
        adjustments.append(constants.short_duration)

    if record.t2_signal is T2Signal.BRIGHT:
        adjustments.append(constants.t2_bright)
    elif record.t2_signal is T2Signal.MULTILEVEL:
        adjustments.append(constants.t2_multilevel)

    if p.high_canal:
        adjustments.append(constants.high_canal)

    if p.opll:
        adjustments.append(constants.opll)

    for d_risk, d_benefit in adjustments:
        risk += d_risk
        benefit += d_benefit

    return RiskBenefitScore(
        risk_score=_clamp(risk, constants.risk_bounds),
        benefit_score=_clamp(benefit, constants.benefit_bounds),
    )
