"""
Report Generation Module

Plain-text renderings of recommendation results for clinicians and for
batch console output. Layout/PDF rendering is left to presentation code.
"""
from .summary import render_text_summary, render_batch_summary, UNCERTAINTY_LABELS

__all__ = [
    "render_text_summary",
    "render_batch_summary",
    "UNCERTAINTY_LABELS",
]
