"""
Pytest Configuration and Fixtures

Shared fixtures for decision-engine tests.
"""
import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dcm_support.core.clinical import (
    CanalRatio,
    DecisionEngine,
    PatientRecord,
    Sex,
    T2Signal,
)


@pytest.fixture
def engine() -> DecisionEngine:
    return DecisionEngine()


@pytest.fixture
def moderate_multilevel_patient() -> PatientRecord:
    """mJOA 13, 12 months, bright T2, 3 levels, canal < 50% — surgery recommended."""
    return PatientRecord(
        age=65, sex=Sex.MALE, mjoa=13, duration_months=12,
        t2_signal=T2Signal.BRIGHT, levels=3, canal_ratio=CanalRatio.LOW,
    )


@pytest.fixture
def mild_stable_patient() -> PatientRecord:
    """mJOA 16, 2 months, no cord signal, single level — non-operative trial."""
    return PatientRecord(
        age=65, sex=Sex.MALE, mjoa=16, duration_months=2,
        t2_signal=T2Signal.NONE, levels=1, canal_ratio=CanalRatio.LOW,
    )


@pytest.fixture
def mild_cord_signal_patient() -> PatientRecord:
    """mJOA 16, 8 months, bright T2, single level — consider surgery."""
    return PatientRecord(
        age=65, sex=Sex.MALE, mjoa=16, duration_months=8,
        t2_signal=T2Signal.BRIGHT, levels=1, canal_ratio=CanalRatio.LOW,
    )


@pytest.fixture
def severe_opll_patient() -> PatientRecord:
    """mJOA 8 with OPLL occupying > 60% of the canal."""
    return PatientRecord(
        age=65, sex=Sex.FEMALE, mjoa=8, duration_months=2,
        t2_signal=T2Signal.NONE, levels=1, canal_ratio=CanalRatio.HIGH, opll=True,
    )


@pytest.fixture
def sample_csv_text() -> str:
    return (
        "age,sex,mjoa,duration_months,levels,canal_ratio,t2_signal,opll,smoker\n"
        "65,M,13,12,3,<50%,bright,no,no\n"
        "78,M,8,24,4,>60%,multilevel,yes,yes\n"
    )


@pytest.fixture
def sample_csv_file(tmp_path, sample_csv_text) -> Path:
    path = tmp_path / "cohort.csv"
    path.write_text(sample_csv_text, encoding="utf-8")
    return path
