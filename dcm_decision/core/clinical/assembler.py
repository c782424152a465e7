"""
Result Assembler

Bundles the stage outputs into one immutable RecommendationResult. The only
choice made here is which approach distribution is surfaced as
``approach_probs``; no scores or probabilities are recomputed.
"""
from __future__ import annotations

from .approach import APPROACH_NARRATIVE, ApproachAllocation
from .base import PatientRecord, RecommendationResult
from .decision import SurgeryDecision
from .normalizer import severity_label
from .scoring import RiskBenefit


def assemble_result(
    patient: PatientRecord,
    risk_benefit: RiskBenefit,
    decision: SurgeryDecision,
    allocation: ApproachAllocation,
) -> RecommendationResult:
    return RecommendationResult(
        patient=patient,
        severity_label=severity_label(patient.severity),
        risk_score=risk_benefit.risk_score,
        benefit_score=risk_benefit.benefit_score,
        p_surgery_rule=decision.p_rule,
        p_surgery_scored=decision.p_scored,
        p_surgery_combined=decision.p_combined,
        surgery_recommended=decision.recommended,
        recommendation_label=decision.label,
        approach_probs_rule=allocation.rule,
        approach_probs_scored=allocation.scored,
        approach_probs=allocation.surfaced,
        approach_source=allocation.source,
        best_approach=allocation.best,
        second_best_approach=allocation.second_best,
        second_best_approach_prob=allocation.second_best_prob,
        uncertainty_level=allocation.uncertainty,
        risk_text=risk_benefit.risk_text,
        benefit_text=risk_benefit.benefit_text,
        approach_narrative=APPROACH_NARRATIVE,
    )
