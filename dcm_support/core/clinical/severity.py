"""
Severity Classifier

Maps an mJOA score to a DCM severity band.  Bands are checked from the
least impaired downwards; the first match wins.
"""
from __future__ import annotations

from typing import Optional

from dcm_support.config import EngineConfig
from .base import Severity

_DEFAULT_CONFIG = EngineConfig()


def classify_severity(mjoa: int, config: Optional[EngineConfig] = None) -> Severity:
    """
    mJOA >= 15 → mild, 12–14 → moderate, otherwise severe.

    Total over the integers; a higher mJOA never yields a worse band.
    """
    thresholds = (config or _DEFAULT_CONFIG).severity
    if mjoa >= thresholds.mild_min:
        return Severity.MILD
    if mjoa >= thresholds.moderate_min:
        return Severity.MODERATE
    return Severity.SEVERE
