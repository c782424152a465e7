"""
Clinician Text Summary

Renders a RecommendationResult (or a batch summary) as plain text that can
be printed, pasted into a note, or handed to a PDF exporter.
"""
from typing import Any, Dict, List

from dcm_decision.core.clinical.approach import APPROACH_SUBTITLES
from dcm_decision.core.clinical.base import APPROACH_ORDER, Approach, RecommendationResult, UncertaintyLevel

UNCERTAINTY_LABELS = {
    UncertaintyLevel.LOW: "Low - one approach is clearly favored",
    UncertaintyLevel.MODERATE: "Moderate - a favored approach with a plausible alternative",
    UncertaintyLevel.HIGH: "High - several approaches are similarly favored",
}

DISCLAIMER = (
    "Patterns combine literature-based preferences (e.g., multilevel disease, OPLL) "
    "with model-style estimates. They support shared decision-making conversations "
    "and do not replace individualized surgical planning."
)


def _pct(value: float) -> str:
    return f"{value * 100:.1f}%"


def render_text_summary(result: RecommendationResult) -> str:
    """Multi-line clinician summary of one recommendation."""
    p = result.patient
    lines: List[str] = [
        "DCM Surgical Decision Support",
        "=" * 29,
        f"Patient: {p.age} y, {p.sex.value}, mJOA {p.baseline_mjoa:g}, "
        f"symptoms {p.symptom_duration_months:g} mo, {p.levels_operated} level(s)",
        f"Severity: {result.severity_label}",
        "",
        f"Risk without surgery:  {result.risk_score}%",
        f"Benefit with surgery:  {result.benefit_score}%",
        f"P(surgery) rule / scored / combined: "
        f"{result.p_surgery_rule:.2f} / {result.p_surgery_scored:.2f} / {result.p_surgery_combined:.2f}",
        f"Recommendation: {result.recommendation_label}",
        "",
    ]

    if result.best_approach == Approach.NONE:
        lines.append("Approach: not applicable (surgery not recommended)")
    else:
        lines.append(f"Approach probabilities ({result.approach_source}):")
        for approach in APPROACH_ORDER:
            marker = "*" if approach == result.best_approach else " "
            lines.append(
                f" {marker} {approach.value:<16} {_pct(result.approach_probs.get(approach)):>6}  "
                f"{APPROACH_SUBTITLES[approach]}"
            )
        lines.append(f"Favored approach: {result.best_approach.value}")
        lines.append(f"Uncertainty: {UNCERTAINTY_LABELS[result.uncertainty_level]}")

    lines.extend(["", DISCLAIMER])
    return "\n".join(lines)


def render_batch_summary(summary: Dict[str, Any]) -> str:
    """Render BatchReport.summary() as a short console block."""
    lines = [
        f"Rows: {summary['total_rows']}  evaluated: {summary['evaluated']}  failed: {summary['failed']}",
        f"Surgery recommended: {summary['surgery_recommended']}",
    ]
    if summary["failed_rows"]:
        lines.append("Failed rows: " + ", ".join(str(r) for r in summary["failed_rows"]))
    for label, count in sorted(summary["by_label"].items()):
        lines.append(f"  {count:>4}  {label}")
    for approach, count in sorted(summary["by_best_approach"].items()):
        lines.append(f"  {count:>4}  best approach: {approach}")
    return "\n".join(lines)
