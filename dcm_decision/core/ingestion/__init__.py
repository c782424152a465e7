"""
Batch Ingestion Module

Evaluates many patients (CSV export or DataFrame) with per-row error
reporting.
"""
from .batch import (
    BatchRowOutcome,
    BatchReport,
    load_batch_csv,
    evaluate_rows,
    evaluate_csv,
)

__all__ = [
    "BatchRowOutcome",
    "BatchReport",
    "load_batch_csv",
    "evaluate_rows",
    "evaluate_csv",
]
