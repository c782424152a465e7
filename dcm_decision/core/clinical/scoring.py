"""
Risk / Benefit Scorer

Two independent bounded scores (0-100) built from additive rule tables:

  - risk_score:    chance of neurological worsening / failure to improve
                   without surgery
  - benefit_score: chance of a clinically meaningful (MCID) mJOA gain
                   with surgery

Each rule is a module-level constant so the tables can be reviewed or
tuned without hunting through logic.
"""
from __future__ import annotations

from dataclasses import dataclass

from .base import PatientRecord, Severity, T2Signal

# ── Baselines by severity ─────────────────────────────────────────────────────
RISK_BASELINE = {
    Severity.MILD: 20,
    Severity.MODERATE: 55,
    Severity.SEVERE: 80,
}
BENEFIT_BASELINE = {
    Severity.MILD: 80,
    Severity.MODERATE: 40,
    Severity.SEVERE: 10,
}

# ── Duration bands (months) ───────────────────────────────────────────────────
LONG_DURATION_MONTHS = 24
PROLONGED_DURATION_MONTHS = 12

# ── Risk deltas ───────────────────────────────────────────────────────────────
RISK_LONG_DURATION = 8
RISK_PROLONGED_DURATION = 4
RISK_T2_FOCAL = 6
RISK_T2_MULTILEVEL = 10
RISK_T1_HYPOINTENSITY = 6
RISK_GAIT_IMPAIRMENT = 8
RISK_OPLL = 6

# ── Benefit deltas ────────────────────────────────────────────────────────────
BENEFIT_LONG_DURATION = -10
BENEFIT_PROLONGED_DURATION = -5
BENEFIT_SEVERE_MJOA = -8
BENEFIT_HIGH_NDI = 5
BENEFIT_LOW_PCS = 5

SEVERE_MJOA_BELOW = 12
HIGH_NDI_MIN = 40           # NDI ≥ 40: substantial disability, more room to improve
LOW_PCS_MAX = 35            # SF-36 PCS ≤ 35

RISK_TEXT = (
    "Estimated probability that the patient will worsen neurologically or fail to "
    "improve without surgery, based on symptom severity, duration, MRI changes, "
    "and canal compromise."
)
BENEFIT_TEXT = (
    "Estimated probability of achieving clinically meaningful mJOA improvement with "
    "surgery, drawing on published DCM outcome cohorts and modified by baseline "
    "severity and risk markers."
)
SEVERITY_CONTEXT = {
    Severity.MILD: (
        "Mild DCM with limited neurologic impairment; many patients remain stable but "
        "risk increases with longer symptom duration or new MRI changes."
    ),
    Severity.MODERATE: (
        "Moderate DCM with clear functional impact; natural history studies suggest "
        "meaningful risk of progression without surgery."
    ),
    Severity.SEVERE: (
        "Severe DCM with substantial baseline impairment; most series show high risk "
        "of further neurologic deterioration without decompression."
    ),
}


@dataclass(frozen=True)
class RiskBenefit:
    risk_score: int
    benefit_score: int
    risk_text: str = RISK_TEXT
    benefit_text: str = BENEFIT_TEXT


def _clamp_score(value: float) -> int:
    return int(min(100, max(0, round(value))))


def risk_without_surgery(p: PatientRecord) -> int:
    risk = RISK_BASELINE[p.severity]

    if p.symptom_duration_months > LONG_DURATION_MONTHS:
        risk += RISK_LONG_DURATION
    elif p.symptom_duration_months > PROLONGED_DURATION_MONTHS:
        risk += RISK_PROLONGED_DURATION

    if p.t2_signal == T2Signal.FOCAL:
        risk += RISK_T2_FOCAL
    elif p.t2_signal == T2Signal.MULTILEVEL:
        risk += RISK_T2_MULTILEVEL

    if p.t1_hypointensity:
        risk += RISK_T1_HYPOINTENSITY
    if p.gait_impairment:
        risk += RISK_GAIT_IMPAIRMENT
    if p.opll:
        risk += RISK_OPLL

    return _clamp_score(risk)


def benefit_with_surgery(p: PatientRecord) -> int:
    benefit = BENEFIT_BASELINE[p.severity]

    if p.symptom_duration_months > LONG_DURATION_MONTHS:
        benefit += BENEFIT_LONG_DURATION
    elif p.symptom_duration_months > PROLONGED_DURATION_MONTHS:
        benefit += BENEFIT_PROLONGED_DURATION

    if p.baseline_mjoa < SEVERE_MJOA_BELOW:
        benefit += BENEFIT_SEVERE_MJOA
    if p.baseline_ndi >= HIGH_NDI_MIN:
        benefit += BENEFIT_HIGH_NDI
    if p.baseline_sf36_pcs <= LOW_PCS_MAX:
        benefit += BENEFIT_LOW_PCS

    return _clamp_score(benefit)


def compute_risk_benefit(p: PatientRecord) -> RiskBenefit:
    """Score both sides independently; no cross-normalization is applied."""
    return RiskBenefit(
        risk_score=risk_without_surgery(p),
        benefit_score=benefit_with_surgery(p),
        risk_text=RISK_TEXT,
        benefit_text=f"{SEVERITY_CONTEXT[p.severity]} {BENEFIT_TEXT}",
    )
