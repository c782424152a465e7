"""
Recommendation Engine

Single entry point for the DCM pipeline:

    normalize → score risk/benefit → blend surgery decision
              → allocate approach → assemble result

Usage:
    from dcm_decision.core.clinical import RecommendationEngine

    engine = RecommendationEngine()
    result = engine.recommend({"baseline_mjoa": 11, "t2_signal": "focal"})
    print(result.recommendation_label, result.best_approach.value)

Every stage is a pure function of its inputs; the engine holds only its
configuration and is safe to share between threads.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Union

from dcm_decision.config import settings
from dcm_decision.utils import ConfigurationError, get_logger
from .approach import APPROACH_SOURCES, allocate_approach
from .assembler import assemble_result
from .base import PatientRecord, RecommendationResult
from .decision import decide_surgery
from .normalizer import normalize_patient
from .scoring import compute_risk_benefit

logger = get_logger(__name__)

PatientLike = Union[Mapping[str, Any], PatientRecord]


class RecommendationEngine:
    """
    Transforms patient profiles into RecommendationResults.

    Args:
        approach_source: which approach distribution ("rule", "scored" or
                         "final") is surfaced and ranked. Defaults to the
                         configured DCM_APPROACH_SOURCE.
    """

    def __init__(self, approach_source: Optional[str] = None):
        source = (approach_source or settings.approach_source).strip().lower()
        if source not in APPROACH_SOURCES:
            raise ConfigurationError(
                f"Unknown approach source {source!r}; expected one of {APPROACH_SOURCES}",
                setting="approach_source",
            )
        self.approach_source = source

    def recommend(self, patient: Optional[PatientLike]) -> RecommendationResult:
        """
        Evaluate one patient.

        Args:
            patient: a PatientRecord, or a raw mapping using any supported
                     field spelling. Missing fields take defaults.

        Raises:
            PatientValidationError: a supplied value is malformed or out of range.
        """
        record = normalize_patient(patient)
        risk_benefit = compute_risk_benefit(record)
        decision = decide_surgery(record, risk_benefit.risk_score, risk_benefit.benefit_score)
        allocation = allocate_approach(record, decision.recommended, self.approach_source)
        result = assemble_result(record, risk_benefit, decision, allocation)

        logger.debug(
            f"RecommendationEngine: severity={record.severity.value} "
            f"risk={result.risk_score} benefit={result.benefit_score} "
            f"p_combined={result.p_surgery_combined:.3f} -> {result.recommendation_label!r}, "
            f"best={result.best_approach.value} ({result.uncertainty_level.value} uncertainty)"
        )
        return result

    def recommend_many(self, patients: Iterable[PatientLike]) -> List[RecommendationResult]:
        """Evaluate patients in order; the first invalid one raises."""
        return [self.recommend(p) for p in patients]


def recommend(patient: Optional[PatientLike], approach_source: Optional[str] = None) -> RecommendationResult:
    """Convenience wrapper around ``RecommendationEngine(approach_source).recommend``."""
    return RecommendationEngine(approach_source).recommend(patient)
