"""
Pytest Configuration and Fixtures

Shared patient fixtures for the decision-support tests.
"""
import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dcm_decision.core.clinical import RecommendationEngine


@pytest.fixture
def engine() -> RecommendationEngine:
    """Engine surfacing the final (averaged) approach distribution."""
    return RecommendationEngine("final")


@pytest.fixture
def moderate_multilevel_patient() -> dict:
    """Moderate DCM, multilevel T2 change, gait impairment."""
    return {
        "age": 65,
        "baselineMJOA": 13,
        "symptomDurationMonths": 12,
        "t2Signal": "multilevel",
        "opll": False,
        "canalOccupyingRatio": "50-60%",
        "gaitImpairment": True,
    }


@pytest.fixture
def mild_stable_patient() -> dict:
    """Mild DCM, short history, no MRI or gait red flags."""
    return {
        "baselineMJOA": 17,
        "symptomDurationMonths": 6,
        "t2Signal": "none",
        "gaitImpairment": False,
    }


@pytest.fixture
def opll_patient() -> dict:
    """OPLL with > 60% canal occupation over a long segment."""
    return {
        "opll": True,
        "canalOccupyingRatio": ">60%",
        "levelsOperated": 5,
    }


@pytest.fixture
def severe_patient() -> dict:
    """Severe DCM with long history and every imaging red flag."""
    return {
        "age": 72,
        "baselineMJOA": 10,
        "symptomDurationMonths": 30,
        "t2Signal": "focal",
        "t1Hypointensity": True,
        "gaitImpairment": True,
        "opll": True,
    }
