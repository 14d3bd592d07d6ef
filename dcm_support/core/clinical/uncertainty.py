"""
Uncertainty Estimator

Confidence in the approach ranking, from the gap between the two highest
probabilities: a clear leader means low uncertainty.
"""
from __future__ import annotations

from typing import Mapping, Optional

import numpy as np

from dcm_support.config import EngineConfig
from dcm_support.utils.exceptions import EngineUsageError
from .base import UncertaintyTier

_DEFAULT_CONFIG = EngineConfig()


def estimate_uncertainty(
    probabilities: Mapping[object, float],
    config: Optional[EngineConfig] = None,
) -> UncertaintyTier:
    """
    delta = top1 - top2;  delta >= 0.15 → low, >= 0.08 → moderate, else high.

    Raises:
        EngineUsageError: fewer than two probabilities were supplied.
    """
    cfg = config or _DEFAULT_CONFIG
    if len(probabilities) < 2:
        raise EngineUsageError(
            f"Uncertainty needs at least two approach probabilities, got {len(probabilities)}",
            component="uncertainty",
            details={"count": len(probabilities)},
        )

    ranked = np.sort(np.asarray(list(probabilities.values()), dtype=float))[::-1]
    delta = round(float(ranked[0] - ranked[1]), cfg.approach.precision)

    if delta >= cfg.uncertainty.low_delta:
        return UncertaintyTier.LOW
    if delta >= cfg.uncertainty.moderate_delta:
        return UncertaintyTier.MODERATE
    return UncertaintyTier.HIGH
