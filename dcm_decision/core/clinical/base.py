"""
Clinical Decision Layer: Base Types

Defines the data contracts shared by every stage of the recommendation
pipeline: the normalized patient record, approach distributions and the
final recommendation result consumed by renderers and exporters.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple


class Sex(str, Enum):
    MALE = "M"
    FEMALE = "F"


class CanalRatio(str, Enum):
    """Canal occupying ratio band on axial imaging."""
    BELOW_50 = "<50%"
    FROM_50_TO_60 = "50-60%"
    ABOVE_60 = ">60%"


class T2Signal(str, Enum):
    """T2-weighted intramedullary cord signal change."""
    NONE = "none"
    FOCAL = "focal"
    MULTILEVEL = "multilevel"


class Severity(str, Enum):
    """
    DCM severity category, derived from baseline mJOA.

    MILD      – mJOA ≥ 15.5
    MODERATE  – 12 ≤ mJOA < 15.5
    SEVERE    – mJOA < 12
    """
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class Approach(str, Enum):
    ANTERIOR = "anterior"
    POSTERIOR = "posterior"
    CIRCUMFERENTIAL = "circumferential"
    NONE = "none"        # surgery not recommended → approach undefined


class UncertaintyLevel(str, Enum):
    """How clearly one approach is favored over the runner-up."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


# Fixed priority used for ordering and for breaking probability ties
APPROACH_ORDER: Tuple[Approach, ...] = (
    Approach.ANTERIOR,
    Approach.POSTERIOR,
    Approach.CIRCUMFERENTIAL,
)


@dataclass(frozen=True)
class PatientRecord:
    """
    Fully populated, typed patient profile.

    Built only by the normalizer; ``severity`` is always derived from
    ``baseline_mjoa`` and never taken from the caller.
    """
    # ── Demographics ──────────────────────────────────────────────────────
    age: int
    sex: Sex
    smoker: bool

    # ── Clinical course ───────────────────────────────────────────────────
    symptom_duration_months: float
    baseline_mjoa: float
    severity: Severity
    levels_operated: int

    # ── Imaging ───────────────────────────────────────────────────────────
    opll: bool
    canal_occupying_ratio: CanalRatio
    t2_signal: T2Signal
    t1_hypointensity: bool

    # ── Function / comorbidity ────────────────────────────────────────────
    gait_impairment: bool
    psych_disorder: bool

    # ── Patient-reported outcomes ─────────────────────────────────────────
    baseline_ndi: float
    baseline_sf36_pcs: float
    baseline_sf36_mcs: float

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the canonical (camelCase) field names."""
        return {
            "age": self.age,
            "sex": self.sex.value,
            "smoker": self.smoker,
            "symptomDurationMonths": self.symptom_duration_months,
            "baselineMJOA": self.baseline_mjoa,
            "severity": self.severity.value,
            "levelsOperated": self.levels_operated,
            "opll": self.opll,
            "canalOccupyingRatio": self.canal_occupying_ratio.value,
            "t2Signal": self.t2_signal.value,
            "t1Hypointensity": self.t1_hypointensity,
            "gaitImpairment": self.gait_impairment,
            "psychDisorder": self.psych_disorder,
            "baselineNDI": self.baseline_ndi,
            "baselineSF36PCS": self.baseline_sf36_pcs,
            "baselineSF36MCS": self.baseline_sf36_mcs,
        }


@dataclass(frozen=True)
class ApproachProbs:
    """
    Probability per surgical approach.

    Either all three values are ≥ 0 and sum to 1, or all three are exactly
    zero (the "approach undefined" sentinel).
    """
    anterior: float = 0.0
    posterior: float = 0.0
    circumferential: float = 0.0

    @classmethod
    def zero(cls) -> "ApproachProbs":
        return cls(0.0, 0.0, 0.0)

    def get(self, approach: Approach) -> float:
        if approach == Approach.NONE:
            return 0.0
        return getattr(self, approach.value)

    def values(self) -> Tuple[float, float, float]:
        return (self.anterior, self.posterior, self.circumferential)

    def total(self) -> float:
        return self.anterior + self.posterior + self.circumferential

    def is_zero(self) -> bool:
        return self.anterior == 0.0 and self.posterior == 0.0 and self.circumferential == 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "anterior": self.anterior,
            "posterior": self.posterior,
            "circumferential": self.circumferential,
        }


@dataclass(frozen=True)
class RecommendationResult:
    """
    Immutable output of one engine call.

    ``approach_probs`` is the surfaced variant (see ``approach_source``);
    the rule and scored variants are kept alongside for transparency.
    """
    patient: PatientRecord

    # ── Risk / benefit ────────────────────────────────────────────────────
    severity_label: str
    risk_score: int                  # risk of worsening without surgery, 0-100
    benefit_score: int               # chance of meaningful benefit with surgery, 0-100

    # ── Surgery decision ──────────────────────────────────────────────────
    p_surgery_rule: float
    p_surgery_scored: float
    p_surgery_combined: float
    surgery_recommended: bool
    recommendation_label: str

    # ── Approach ──────────────────────────────────────────────────────────
    approach_probs_rule: ApproachProbs
    approach_probs_scored: ApproachProbs
    approach_probs: ApproachProbs
    approach_source: str
    best_approach: Approach
    second_best_approach: Approach
    second_best_approach_prob: float
    uncertainty_level: UncertaintyLevel

    # ── Narrative for renderers ───────────────────────────────────────────
    risk_text: str = ""
    benefit_text: str = ""
    approach_narrative: str = ""

    @property
    def severity(self) -> Severity:
        return self.patient.severity

    # ── Serialisation ─────────────────────────────────────────────────────
    def to_dict(self) -> Dict[str, Any]:
        """Nested, JSON-safe representation."""
        return {
            "input": self.patient.to_dict(),
            "severity": self.patient.severity.value,
            "severityLabel": self.severity_label,
            "riskScore": self.risk_score,
            "benefitScore": self.benefit_score,
            "pSurgeryRule": self.p_surgery_rule,
            "pSurgeryScored": self.p_surgery_scored,
            "pSurgeryCombined": self.p_surgery_combined,
            "surgeryRecommended": self.surgery_recommended,
            "recommendationLabel": self.recommendation_label,
            "approachProbsRule": self.approach_probs_rule.to_dict(),
            "approachProbsScored": self.approach_probs_scored.to_dict(),
            "approachProbs": self.approach_probs.to_dict(),
            "approachSource": self.approach_source,
            "bestApproach": self.best_approach.value,
            "secondBestApproach": self.second_best_approach.value,
            "secondBestApproachProb": self.second_best_approach_prob,
            "uncertaintyLevel": self.uncertainty_level.value,
            "riskText": self.risk_text,
            "benefitText": self.benefit_text,
            "approachNarrative": self.approach_narrative,
        }

    def to_row(self) -> Dict[str, Any]:
        """Flat representation (one scalar per column) for tabular export."""
        row: Dict[str, Any] = dict(self.patient.to_dict())
        row.update({
            "riskScore": self.risk_score,
            "benefitScore": self.benefit_score,
            "pSurgeryRule": self.p_surgery_rule,
            "pSurgeryScored": self.p_surgery_scored,
            "pSurgeryCombined": self.p_surgery_combined,
            "surgeryRecommended": self.surgery_recommended,
            "recommendationLabel": self.recommendation_label,
        })
        for approach in APPROACH_ORDER:
            row[f"p_{approach.value}"] = self.approach_probs.get(approach)
        row.update({
            "bestApproach": self.best_approach.value,
            "secondBestApproach": self.second_best_approach.value,
            "secondBestApproachProb": self.second_best_approach_prob,
            "uncertaintyLevel": self.uncertainty_level.value,
        })
        return row
