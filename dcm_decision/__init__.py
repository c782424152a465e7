"""
DCM Decision Support

Deterministic recommendation engine for degenerative cervical myelopathy
(DCM) surgical discussions: whether surgery is indicated and, if so, which
approach (anterior, posterior, circumferential) is favored.

Usage:
    from dcm_decision import recommend

    result = recommend({"age": 65, "baselineMJOA": 13, "t2Signal": "multilevel"})
    print(result.recommendation_label, result.best_approach)
"""
from .config import settings
from .utils import setup_logging

setup_logging(settings.log_level, settings.log_file)

from .core.clinical import (  # noqa: E402
    RecommendationEngine,
    RecommendationResult,
    PatientRecord,
    recommend,
)

__version__ = "1.0.0"

__all__ = [
    "RecommendationEngine",
    "RecommendationResult",
    "PatientRecord",
    "recommend",
    "__version__",
]
