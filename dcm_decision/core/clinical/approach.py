"""
Approach Allocator

Distributes probability over the three surgical approaches in three passes:

  1. rule:   literature-style preferences, four stacking adjustments on a
             fixed prior, floored at zero and renormalized
  2. scored: damped copy of the rule distribution plus a per-approach
             offset, renormalized
  3. final:  per-approach mean of rule and scored, renormalized

Best / second-best are ranked on the surfaced distribution with ties
broken by APPROACH_ORDER, and the gap between them sets the uncertainty.
Any vector that cannot be normalized (all zero) becomes the zero sentinel.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from dcm_decision.utils import ConfigurationError, EngineContractError
from .base import (
    APPROACH_ORDER,
    Approach,
    ApproachProbs,
    CanalRatio,
    PatientRecord,
    T2Signal,
    UncertaintyLevel,
)

# Vector layout follows APPROACH_ORDER: (anterior, posterior, circumferential)
RULE_PRIOR = np.array([0.4, 0.4, 0.2])

# ── Rule adjustments ──────────────────────────────────────────────────────────
# (a) short-segment disease without OPLL, severe canal compromise or multilevel T2
FOCAL_ANTERIOR_SHIFT = np.array([0.2, -0.1, -0.1])
FOCAL_MAX_LEVELS = 2
# (b) long-segment disease or multilevel T2 change
MULTILEVEL_POSTERIOR_SHIFT = np.array([-0.1, 0.2, 0.1])
MULTILEVEL_MIN_LEVELS = 4
# (c) OPLL with > 60% canal occupation
OPLL_CIRCUMFERENTIAL_SHIFT = np.array([-0.4, 0.1, 0.3])
# (d) severe myelopathy across long segments
SEVERE_LONG_SEGMENT_SHIFT = np.array([-0.15, 0.05, 0.1])
SEVERE_MJOA_BELOW = 12

# ── Scored pass ───────────────────────────────────────────────────────────────
SCORED_DAMPING = 0.5
SCORED_OFFSETS = np.array([0.15, 0.15, 0.10])

# ── Uncertainty from best-minus-second gap ────────────────────────────────────
LOW_UNCERTAINTY_GAP = 0.25
MODERATE_UNCERTAINTY_GAP = 0.10

SUM_TOLERANCE = 1e-9

APPROACH_SOURCES = ("rule", "scored", "final")

APPROACH_NARRATIVE = (
    "The estimated probability of achieving clinically meaningful mJOA improvement "
    "(MCID) is shown for anterior, posterior, and circumferential procedures. "
    "Uncertainty reflects how close these probabilities are: low = one clear "
    "favorite, high = several similar options."
)
APPROACH_SUBTITLES = {
    Approach.ANTERIOR: "Often preferred for focal 1–2 level ventral disease.",
    Approach.POSTERIOR: "Useful for multilevel dorsal compression or lordotic alignment.",
    Approach.CIRCUMFERENTIAL: (
        "Reserved for extensive OPLL or marked ventral compromise requiring combined access."
    ),
}


@dataclass(frozen=True)
class ApproachAllocation:
    rule: ApproachProbs
    scored: ApproachProbs
    final: ApproachProbs
    source: str
    best: Approach
    second_best: Approach
    second_best_prob: float
    uncertainty: UncertaintyLevel

    @property
    def surfaced(self) -> ApproachProbs:
        return getattr(self, self.source)


def _normalize(vec: np.ndarray) -> np.ndarray:
    """Floor negatives at zero and scale to unit sum; all-zero stays all-zero."""
    vec = np.clip(vec, 0.0, None)
    total = float(vec.sum())
    if total <= 0.0 or not np.isfinite(total):
        return np.zeros(len(APPROACH_ORDER))
    return vec / total


def _to_probs(vec: np.ndarray) -> ApproachProbs:
    return ApproachProbs(*(float(v) for v in vec))


def _to_vector(probs: ApproachProbs) -> np.ndarray:
    return np.array(probs.values(), dtype=float)


def rule_distribution(p: PatientRecord) -> ApproachProbs:
    vec = RULE_PRIOR.copy()

    if (
        p.levels_operated <= FOCAL_MAX_LEVELS
        and not p.opll
        and p.canal_occupying_ratio != CanalRatio.ABOVE_60
        and p.t2_signal != T2Signal.MULTILEVEL
    ):
        vec += FOCAL_ANTERIOR_SHIFT

    if p.levels_operated >= MULTILEVEL_MIN_LEVELS or p.t2_signal == T2Signal.MULTILEVEL:
        vec += MULTILEVEL_POSTERIOR_SHIFT

    if p.opll and p.canal_occupying_ratio == CanalRatio.ABOVE_60:
        vec += OPLL_CIRCUMFERENTIAL_SHIFT

    if p.baseline_mjoa < SEVERE_MJOA_BELOW and p.levels_operated >= MULTILEVEL_MIN_LEVELS:
        vec += SEVERE_LONG_SEGMENT_SHIFT

    return _to_probs(_normalize(vec))


def scored_distribution(rule: ApproachProbs) -> ApproachProbs:
    if rule.is_zero():
        return ApproachProbs.zero()
    vec = SCORED_DAMPING * _to_vector(rule) + SCORED_OFFSETS
    return _to_probs(_normalize(vec))


def final_distribution(rule: ApproachProbs, scored: ApproachProbs) -> ApproachProbs:
    vec = (_to_vector(rule) + _to_vector(scored)) / 2
    return _to_probs(_normalize(vec))


def rank_approaches(probs: ApproachProbs) -> Tuple[Approach, Approach]:
    """Best and second-best approach; equal probabilities keep APPROACH_ORDER."""
    if probs.is_zero():
        return Approach.NONE, Approach.NONE
    ranked = sorted(APPROACH_ORDER, key=lambda a: -probs.get(a))
    return ranked[0], ranked[1]


def classify_gap(gap: float) -> UncertaintyLevel:
    if gap >= LOW_UNCERTAINTY_GAP:
        return UncertaintyLevel.LOW
    if gap >= MODERATE_UNCERTAINTY_GAP:
        return UncertaintyLevel.MODERATE
    return UncertaintyLevel.HIGH


def classify_uncertainty(probs: ApproachProbs) -> UncertaintyLevel:
    best, second = rank_approaches(probs)
    if best == Approach.NONE:
        return UncertaintyLevel.MODERATE
    return classify_gap(probs.get(best) - probs.get(second))


def check_distribution(probs: ApproachProbs, name: str = "approach") -> None:
    """
    Raise EngineContractError unless ``probs`` is a valid distribution or
    the zero sentinel.
    """
    values = probs.values()
    if probs.is_zero():
        return
    if any(not np.isfinite(v) or v < 0.0 for v in values):
        raise EngineContractError(
            f"{name} distribution has negative or non-finite values",
            details=probs.to_dict(),
        )
    if abs(probs.total() - 1.0) > SUM_TOLERANCE:
        raise EngineContractError(
            f"{name} distribution sums to {probs.total()!r}, expected 1",
            details=probs.to_dict(),
        )


def allocate_approach(
    p: PatientRecord,
    surgery_recommended: bool,
    source: str = "final",
) -> ApproachAllocation:
    """
    Compute all three distributions and rank the one named by ``source``.

    When surgery is not recommended every distribution is the zero
    sentinel, best approach is NONE and uncertainty is MODERATE.
    """
    if source not in APPROACH_SOURCES:
        raise ConfigurationError(
            f"Unknown approach source {source!r}; expected one of {APPROACH_SOURCES}",
            setting="approach_source",
        )

    if not surgery_recommended:
        zero = ApproachProbs.zero()
        return ApproachAllocation(
            rule=zero,
            scored=zero,
            final=zero,
            source=source,
            best=Approach.NONE,
            second_best=Approach.NONE,
            second_best_prob=0.0,
            uncertainty=UncertaintyLevel.MODERATE,
        )

    rule = rule_distribution(p)
    scored = scored_distribution(rule)
    final = final_distribution(rule, scored)
    for name, probs in (("rule", rule), ("scored", scored), ("final", final)):
        check_distribution(probs, name)

    surfaced = {"rule": rule, "scored": scored, "final": final}[source]
    best, second = rank_approaches(surfaced)
    return ApproachAllocation(
        rule=rule,
        scored=scored,
        final=final,
        source=source,
        best=best,
        second_best=second,
        second_best_prob=surfaced.get(second),
        uncertainty=classify_uncertainty(surfaced),
    )
