"""
Derived clinical predicates shared by the rule modules.

Computed once per evaluation from the PatientRecord so that the risk-group
table and the approach model read identical definitions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from dcm_support.config import EngineConfig
from .base import CanalRatio, PatientRecord, Severity, T2Signal

_DEFAULT_CONFIG = EngineConfig()


@dataclass(frozen=True)
class ClinicalPredicates:
    severity: Severity
    cord_signal: bool        # any T2 cord signal change
    long_symptoms: bool      # duration >= 6 months
    very_long: bool          # duration >= 12 months
    short_symptoms: bool     # duration < 3 months
    high_canal: bool         # canal occupying ratio > 60%
    mid_canal: bool
    low_canal: bool
    multilevel: bool         # >= 3 planned levels
    opll: bool
    high_burden: bool        # elderly, smoker, T1 hypointensity or cord signal

    @property
    def moderate_or_severe(self) -> bool:
        return self.severity in (Severity.MODERATE, Severity.SEVERE)

    @property
    def mild(self) -> bool:
        return self.severity is Severity.MILD


def derive_predicates(
    record: PatientRecord,
    severity: Severity,
    config: Optional[EngineConfig] = None,
) -> ClinicalPredicates:
    thresholds = (config or _DEFAULT_CONFIG).predicates
    cord_signal = record.t2_signal is not T2Signal.NONE

    return ClinicalPredicates(
        severity=severity,
        cord_signal=cord_signal,
        long_symptoms=record.duration_months >= thresholds.long_symptoms_months,
        very_long=record.duration_months >= thresholds.very_long_symptoms_months,
        short_symptoms=record.duration_months < thresholds.short_symptoms_months,
        high_canal=record.canal_ratio is CanalRatio.HIGH,
        mid_canal=record.canal_ratio is CanalRatio.MID,
        low_canal=record.canal_ratio is CanalRatio.LOW,
        multilevel=record.levels >= thresholds.multilevel_min_levels,
        opll=record.opll,
        high_burden=(
            record.age >= thresholds.elderly_age
            or record.smoker
            or record.t1_hypo
            or cord_signal
        ),
    )
