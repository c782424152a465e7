#!/usr/bin/env python3
"""
DCM Decision Support CLI.

Usage:
    python -m dcm_decision evaluate --json '{"age": 65, "baseline_mjoa": 13}'
    python -m dcm_decision evaluate --json patient.json --text
    python -m dcm_decision batch patients.csv --out results.csv
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dcm_decision.core.clinical import RecommendationEngine
from dcm_decision.core.ingestion import evaluate_csv
from dcm_decision.core.reports import render_batch_summary, render_text_summary
from dcm_decision.utils import DecisionSupportError


def _load_patient(arg: str) -> Dict[str, Any]:
    """Accept either inline JSON or a path to a JSON file."""
    path = Path(arg)
    text = path.read_text(encoding="utf-8") if path.suffix == ".json" and path.exists() else arg
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("patient JSON must be an object")
    return data


def cmd_evaluate(args: argparse.Namespace) -> int:
    """Evaluate a single patient and print JSON (or a text summary)."""
    try:
        patient = _load_patient(args.json)
    except (ValueError, OSError) as e:
        print(json.dumps({"error": "BAD_INPUT", "message": str(e)}))
        return 2

    try:
        result = RecommendationEngine(args.approach_source).recommend(patient)
    except DecisionSupportError as e:
        print(json.dumps(e.to_dict(), indent=2, default=str))
        return 2

    if args.text:
        print(render_text_summary(result))
    else:
        print(json.dumps(result.to_dict(), indent=2))
    return 0


def cmd_batch(args: argparse.Namespace) -> int:
    """Evaluate a CSV of patients; bad rows are reported, not fatal."""
    try:
        report = evaluate_csv(args.csv, RecommendationEngine(args.approach_source))
    except DecisionSupportError as e:
        print(json.dumps(e.to_dict(), indent=2, default=str))
        return 2

    summary = report.summary()
    if args.out:
        report.to_frame().to_csv(args.out, index=False)
    if args.json_summary:
        print(json.dumps(summary, indent=2))
    else:
        print(render_batch_summary(summary))
        if args.out:
            print(f"Results written to {args.out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="dcm_decision",
        description="DCM surgical decision support: surgery indication and approach.",
    )
    ap.add_argument(
        "--approach-source",
        choices=["rule", "scored", "final"],
        default=None,
        help="Approach distribution to surface (default: DCM_APPROACH_SOURCE or final)",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    ev = sub.add_parser("evaluate", help="Evaluate one patient")
    ev.add_argument("--json", "-j", required=True, help="Inline JSON object or path to a .json file")
    ev.add_argument("--text", action="store_true", help="Print a clinician text summary instead of JSON")
    ev.set_defaults(func=cmd_evaluate)

    bt = sub.add_parser("batch", help="Evaluate a CSV of patients")
    bt.add_argument("csv", help="Input CSV with a header row")
    bt.add_argument("--out", "-o", help="Write the flat results table to this CSV")
    bt.add_argument("--json-summary", action="store_true", help="Print the summary as JSON")
    bt.set_defaults(func=cmd_batch)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
