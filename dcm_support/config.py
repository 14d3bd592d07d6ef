"""
DCM Decision Support — Configuration
====================================
Runtime settings come from the environment (prefix ``DCM_``) and an optional
``.env`` file.  Every heuristic constant used by the clinical rules lives in
``EngineConfig`` so the placeholder values can be recalibrated from a JSON
override file without touching the rule modules.

Example override file (only the keys you want to change)::

    {
        "approach": {"base_by_severity": {"mild": 0.70}},
        "uncertainty": {"low_delta": 0.12}
    }
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Literal, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from dcm_support.utils.exceptions import ConfigurationError

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")

# (risk, benefit) pair
ScoreDelta = Tuple[int, int]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SeverityThresholds(_Frozen):
    """mJOA cut points: >= mild_min is mild, >= moderate_min is moderate."""
    mild_min: int = 15
    moderate_min: int = 12


class PredicateThresholds(_Frozen):
    """Thresholds behind the derived clinical predicates."""
    long_symptoms_months: int = 6
    very_long_symptoms_months: int = 12
    short_symptoms_months: int = 3
    multilevel_min_levels: int = 3
    elderly_age: int = 75


class RiskBenefitConstants(_Frozen):
    base_by_severity: Dict[str, ScoreDelta] = Field(default_factory=lambda: {
        "mild": (20, 40),
        "moderate": (40, 65),
        "severe": (60, 80),
    })
    very_long_duration: ScoreDelta = (5, 3)
    short_duration: ScoreDelta = (-3, 2)
    t2_bright: ScoreDelta = (5, 3)
    t2_multilevel: ScoreDelta = (10, 5)
    high_canal: ScoreDelta = (5, 3)
    opll: ScoreDelta = (3, 2)
    risk_bounds: Tuple[int, int] = (5, 95)
    benefit_bounds: Tuple[int, int] = (10, 95)


class ApproachConstants(_Frozen):
    """Probability of reaching mJOA MCID, per approach (anterior, posterior, circumferential)."""
    base_by_severity: Dict[str, float] = Field(default_factory=lambda: {
        "mild": 0.65,
        "moderate": 0.55,
        "severe": 0.45,
    })
    circumferential_offset: float = -0.03
    # Deltas below are (anterior, posterior, circumferential)
    mild_short_segment: Tuple[float, float, float] = (0.05, 0.0, -0.02)
    multilevel_or_very_long: Tuple[float, float, float] = (-0.02, 0.05, 0.02)
    opll_high_canal: Tuple[float, float, float] = (0.10, 0.03, 0.0)
    opll_mid_canal: Tuple[float, float, float] = (0.03, 0.03, 0.0)
    opll_low_canal: Tuple[float, float, float] = (0.02, 0.05, 0.0)
    t2_multilevel: Tuple[float, float, float] = (-0.01, 0.03, 0.01)
    long_symptoms_non_opll: Tuple[float, float, float] = (-0.01, -0.01, 0.0)
    high_burden: Tuple[float, float, float] = (-0.03, -0.03, -0.03)
    bounds: Tuple[float, float] = (0.25, 0.90)
    precision: int = 4


class UncertaintyConstants(_Frozen):
    low_delta: float = 0.15
    moderate_delta: float = 0.08


class EngineConfig(_Frozen):
    """All tunable heuristic constants of the decision engine."""
    severity: SeverityThresholds = Field(default_factory=SeverityThresholds)
    predicates: PredicateThresholds = Field(default_factory=PredicateThresholds)
    risk_benefit: RiskBenefitConstants = Field(default_factory=RiskBenefitConstants)
    approach: ApproachConstants = Field(default_factory=ApproachConstants)
    uncertainty: UncertaintyConstants = Field(default_factory=UncertaintyConstants)


class Settings(BaseSettings):
    """Process-level settings, read from DCM_* environment variables."""
    model_config = SettingsConfigDict(
        env_prefix="DCM_",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_file: Optional[str] = None
    fallback_policy: Literal["lenient", "strict"] = "lenient"
    engine_config: Optional[str] = None     # path to a JSON override file
    batch_workers: Optional[int] = None


def load_engine_config(path: Optional[str] = None) -> EngineConfig:
    """
    Build an EngineConfig, applying JSON overrides from ``path`` if given.

    Nested sections may be partial; omitted keys keep their defaults.
    """
    if path is None:
        return EngineConfig()

    override_path = Path(path)
    try:
        raw = json.loads(override_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read engine config: {exc}", path=str(path))

    try:
        defaults = EngineConfig().model_dump()
        return EngineConfig.model_validate(_deep_merge(defaults, raw))
    except (ValidationError, TypeError) as exc:
        raise ConfigurationError(f"Invalid engine config: {exc}", path=str(path))


def _deep_merge(base: dict, override: dict) -> dict:
    if not isinstance(override, dict):
        raise TypeError(f"expected a JSON object, got {type(override).__name__}")
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_settings() -> Settings:
    """Settings from DCM_* environment variables; bad values raise ConfigurationError."""
    try:
        return Settings()
    except ValidationError as exc:
        invalid = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        raise ConfigurationError(
            f"Invalid DCM_* environment settings: {', '.join(invalid)}",
            path="environment",
            details={"invalid_settings": invalid},
        )


def get_engine_config() -> EngineConfig:
    """EngineConfig honouring the DCM_ENGINE_CONFIG override, if set."""
    return load_engine_config(get_settings().engine_config)
