"""
Clinical Decision Layer

Transforms a patient's clinical / imaging profile into a surgical
recommendation and an approach distribution.

Usage:
    from dcm_decision.core.clinical import RecommendationEngine

    engine = RecommendationEngine()
    result = engine.recommend(patient_mapping)
"""
from .engine import RecommendationEngine, recommend
from .base import (
    Approach,
    ApproachProbs,
    CanalRatio,
    PatientRecord,
    RecommendationResult,
    Severity,
    Sex,
    T2Signal,
    UncertaintyLevel,
)
from .normalizer import FieldError, ParseOutcome, compute_severity, normalize_patient, parse_patient

__all__ = [
    "RecommendationEngine",
    "recommend",
    "Approach",
    "ApproachProbs",
    "CanalRatio",
    "PatientRecord",
    "RecommendationResult",
    "Severity",
    "Sex",
    "T2Signal",
    "UncertaintyLevel",
    "FieldError",
    "ParseOutcome",
    "compute_severity",
    "normalize_patient",
    "parse_patient",
]
