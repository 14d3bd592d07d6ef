"""
Patient Record Parser

Turns raw field values (form input or one CSV row) into an immutable
PatientRecord.

Two policies:
  lenient – a field that is missing or fails to parse is replaced by its
            default and a FieldFallback is recorded for the caller
  strict  – the first such field raises FieldValidationError

Optional flags (opll, smoker, t1_hypo) that are absent or blank mean "no"
and are never reported as fallbacks.
"""
from __future__ import annotations

import math
from typing import Any, Callable, List, Mapping, NamedTuple, Optional, Tuple

from dcm_support.core.clinical.base import (
    CanalRatio,
    FieldFallback,
    PatientRecord,
    Sex,
    T2Signal,
)
from dcm_support.utils import FieldValidationError, get_logger

logger = get_logger(__name__)

POLICIES = ("lenient", "strict")

TRUE_TOKENS = {"yes", "y", "true", "t", "1"}
FALSE_TOKENS = {"no", "n", "false", "f", "0"}

_CANAL_ALIASES = {
    "<50%": CanalRatio.LOW,
    "50–60%": CanalRatio.MID,
    "50-60%": CanalRatio.MID,
    ">60%": CanalRatio.HIGH,
}


class _Invalid(Exception):
    """Internal signal: raw value unusable, with a short reason."""


class FieldSpec(NamedTuple):
    name: str
    parse: Callable[[Any], Any]
    default: Any
    optional: bool = False     # absent/blank → default silently


# ── Scalar parsers ────────────────────────────────────────────────────────────

def _is_blank(raw: Any) -> bool:
    if raw is None:
        return True
    if isinstance(raw, float) and math.isnan(raw):
        return True
    return isinstance(raw, str) and raw.strip() == ""


def _to_int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise _Invalid("not a number")
    if isinstance(raw, int):
        return raw
    try:
        value = float(str(raw).strip())
    except ValueError:
        raise _Invalid("not a number")
    if not math.isfinite(value) or not value.is_integer():
        raise _Invalid("not an integer")
    return int(value)


def _int_in_range(low: Optional[int] = None, high: Optional[int] = None):
    def parse(raw: Any) -> int:
        value = _to_int(raw)
        if low is not None and value < low:
            raise _Invalid(f"below {low}")
        if high is not None and value > high:
            raise _Invalid(f"above {high}")
        return value
    return parse


def _parse_sex(raw: Any) -> Sex:
    token = str(raw).strip().upper()
    if token in ("M", "MALE"):
        return Sex.MALE
    if token in ("F", "FEMALE"):
        return Sex.FEMALE
    raise _Invalid("unknown sex")


def _parse_t2(raw: Any) -> T2Signal:
    try:
        return T2Signal(str(raw).strip().lower())
    except ValueError:
        raise _Invalid("unknown T2 signal")


def _parse_canal(raw: Any) -> CanalRatio:
    token = str(raw).strip().replace(" ", "")
    if token in _CANAL_ALIASES:
        return _CANAL_ALIASES[token]
    raise _Invalid("unknown canal ratio")


def _parse_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    token = str(raw).strip().lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    raise _Invalid("not yes/no")


FIELD_SPECS: List[FieldSpec] = [
    FieldSpec("age",             _int_in_range(low=0),      65),
    FieldSpec("sex",             _parse_sex,                Sex.MALE),
    FieldSpec("mjoa",            _int_in_range(0, 18),      18),
    FieldSpec("duration_months", _int_in_range(low=0),      0),
    FieldSpec("t2_signal",       _parse_t2,                 T2Signal.BRIGHT),
    FieldSpec("levels",          _int_in_range(low=1),      1),
    FieldSpec("canal_ratio",     _parse_canal,              CanalRatio.LOW),
    FieldSpec("opll",            _parse_flag,               False, optional=True),
    FieldSpec("t1_hypo",         _parse_flag,               False, optional=True),
    FieldSpec("smoker",          _parse_flag,               False, optional=True),
]


class PatientRecordParser:
    """
    Builds PatientRecords from raw mappings under a fallback policy.

    Usage:
        parser = PatientRecordParser(policy="lenient")
        record, fallbacks = parser.parse({"age": "70", "mjoa": "abc", ...})
    """

    def __init__(self, policy: str = "lenient"):
        if policy not in POLICIES:
            raise ValueError(f"policy must be one of {POLICIES}, got {policy!r}")
        self.policy = policy

    def parse(
        self,
        raw: Mapping[str, Any],
        row_number: Optional[int] = None,
    ) -> Tuple[PatientRecord, List[FieldFallback]]:
        values = {}
        fallbacks: List[FieldFallback] = []

        for spec in FIELD_SPECS:
            value = raw.get(spec.name)

            if _is_blank(value):
                if spec.optional:
                    values[spec.name] = spec.default
                    continue
                reason = "missing"
            else:
                try:
                    values[spec.name] = spec.parse(value)
                    continue
                except _Invalid as exc:
                    reason = str(exc)

            if self.policy == "strict":
                details = {"row": row_number} if row_number is not None else None
                raise FieldValidationError(spec.name, value, reason, details=details)

            values[spec.name] = spec.default
            fallback = FieldFallback(
                field=spec.name,
                raw_value=value,
                default=spec.default,
                reason=reason,
            )
            fallbacks.append(fallback)
            where = f"row {row_number}: " if row_number is not None else ""
            logger.warning(
                f"PatientRecordParser: {where}{spec.name}={value!r} ({reason}), "
                f"using default {fallback.to_dict()['default']!r}",
                extra={"row": row_number, "field": spec.name, "policy": self.policy},
            )

        return PatientRecord(**values), fallbacks
