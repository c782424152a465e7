"""
Surgery Decision Blender

Blends a severity-conditioned rule probability with a score-based
probability and maps the combined value to one of three labels.

The non-operative label is reachable only for mild disease: a moderate or
severe patient is never routed there, whatever the combined probability.
"""
from __future__ import annotations

from dataclasses import dataclass

from .base import PatientRecord, Severity, T2Signal

# ── Rule probabilities ────────────────────────────────────────────────────────
P_RULE_MILD_HIGH_RISK = 0.8     # mild + (duration > 12 mo OR T2 change OR gait)
P_RULE_MILD_LOW_RISK = 0.2
P_RULE_MODERATE = 0.8
P_RULE_SEVERE = 0.9
MILD_RISK_DURATION_MONTHS = 12

# ── Score-based probability: intercept + weights on the 0-1 scores ──────────
SCORED_INTERCEPT = 0.2
SCORED_RISK_WEIGHT = 0.4
SCORED_BENEFIT_WEIGHT = 0.2

# ── Classification thresholds on the combined probability ────────────────────
NON_OPERATIVE_BELOW = 0.35      # applies to mild disease only
SURGERY_RECOMMENDED_FROM = 0.7

LABEL_NON_OPERATIVE = "Non-operative trial reasonable with close follow-up"
LABEL_CONSIDER_SURGERY = "Consider surgery / surgery likely beneficial"
LABEL_SURGERY_RECOMMENDED = "Surgery recommended"

RECOMMENDATION_LABELS = (
    LABEL_NON_OPERATIVE,
    LABEL_CONSIDER_SURGERY,
    LABEL_SURGERY_RECOMMENDED,
)


@dataclass(frozen=True)
class SurgeryDecision:
    p_rule: float
    p_scored: float
    p_combined: float
    recommended: bool
    label: str


def clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def rule_probability(p: PatientRecord) -> float:
    if p.severity == Severity.MILD:
        high_risk_mild = (
            p.symptom_duration_months > MILD_RISK_DURATION_MONTHS
            or p.t2_signal != T2Signal.NONE
            or p.gait_impairment
        )
        return P_RULE_MILD_HIGH_RISK if high_risk_mild else P_RULE_MILD_LOW_RISK
    if p.severity == Severity.MODERATE:
        return P_RULE_MODERATE
    return P_RULE_SEVERE


def scored_probability(risk_score: int, benefit_score: int) -> float:
    return clamp01(
        SCORED_INTERCEPT
        + SCORED_RISK_WEIGHT * (risk_score / 100)
        + SCORED_BENEFIT_WEIGHT * (benefit_score / 100)
    )


def classify(p_combined: float, severity: Severity):
    """Return (recommended, label) for a combined probability."""
    if p_combined < NON_OPERATIVE_BELOW and severity == Severity.MILD:
        return False, LABEL_NON_OPERATIVE
    if p_combined < SURGERY_RECOMMENDED_FROM:
        return True, LABEL_CONSIDER_SURGERY
    return True, LABEL_SURGERY_RECOMMENDED


def decide_surgery(p: PatientRecord, risk_score: int, benefit_score: int) -> SurgeryDecision:
    p_rule = rule_probability(p)
    p_scored = scored_probability(risk_score, benefit_score)
    p_combined = clamp01((p_rule + p_scored) / 2)
    recommended, label = classify(p_combined, p.severity)
    return SurgeryDecision(
        p_rule=p_rule,
        p_scored=p_scored,
        p_combined=p_combined,
        recommended=recommended,
        label=label,
    )
