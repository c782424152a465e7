"""
Batch Evaluation

Runs the recommendation engine over many patient rows, in input order.

Partial-failure semantics: a row that cannot be parsed (wrong column
count, non-numeric value, out-of-range value) is reported with its 1-based
row index and the batch carries on with the next row.

Expected CSV header (any supported spelling works, unknown columns are ignored):
    age, sex, smoker, symptom_duration_months, baseline_mjoa, levels_operated,
    canal_ratio, t2_signal, opll, t1_hypointensity, gait_impairment,
    psych_disorder, baseline_ndi, baseline_sf36_pcs, baseline_sf36_mcs
"""
from __future__ import annotations

import io
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, TextIO, Union

import pandas as pd

from dcm_decision.core.clinical import RecommendationEngine, RecommendationResult
from dcm_decision.core.clinical.normalizer import FieldError, parse_patient
from dcm_decision.utils import BatchInputError, get_logger

logger = get_logger(__name__)

# Extra column added by load_batch_csv; non-empty when the row's shape is wrong
MALFORMED_COLUMN = "__malformed__"
_BAD_LINE_MARKER = "\x00bad-line:"


@dataclass(frozen=True)
class BatchRowOutcome:
    """Result of one batch row: either a recommendation or field errors."""
    row_index: int                                  # 1-based, data rows only
    result: Optional[RecommendationResult] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row_index,
            "ok": self.ok,
            "result": self.result.to_dict() if self.result else None,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass
class BatchReport:
    """All row outcomes of one batch, in input order."""
    outcomes: List[BatchRowOutcome] = field(default_factory=list)

    @property
    def results(self) -> List[RecommendationResult]:
        return [o.result for o in self.outcomes if o.ok]

    @property
    def failures(self) -> List[BatchRowOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def summary(self) -> Dict[str, Any]:
        """
        Aggregate counts suitable for a JSON response or a console summary.

        Example output:
        {
            "total_rows": 3,
            "evaluated": 2,
            "failed": 1,
            "failed_rows": [3],
            "surgery_recommended": 1,
            "by_label": {"Surgery recommended": 1, ...},
            "by_best_approach": {"posterior": 1, "none": 1},
            "by_severity": {"moderate": 1, "mild": 1}
        }
        """
        results = self.results
        return {
            "total_rows": len(self.outcomes),
            "evaluated": len(results),
            "failed": len(self.failures),
            "failed_rows": [o.row_index for o in self.failures],
            "surgery_recommended": sum(1 for r in results if r.surgery_recommended),
            "by_label": dict(Counter(r.recommendation_label for r in results)),
            "by_best_approach": dict(Counter(r.best_approach.value for r in results)),
            "by_severity": dict(Counter(r.severity.value for r in results)),
        }

    def to_frame(self) -> pd.DataFrame:
        """One flat row per input row; failed rows carry only ``row`` and ``errors``."""
        records = []
        for outcome in self.outcomes:
            record: Dict[str, Any] = {"row": outcome.row_index}
            if outcome.ok:
                record.update(outcome.result.to_row())
                record["errors"] = ""
            else:
                record["errors"] = "; ".join(str(e) for e in outcome.errors)
            records.append(record)
        return pd.DataFrame.from_records(records)


def _read_text(source: Union[str, Path, TextIO]) -> str:
    if hasattr(source, "read"):
        return source.read()
    path = Path(source)
    if not path.exists():
        raise BatchInputError(f"Batch file not found: {path}", source=str(path))
    return path.read_text(encoding="utf-8-sig")


def load_batch_csv(source: Union[str, Path, TextIO]) -> pd.DataFrame:
    """
    Load a batch CSV with every cell kept as a string.

    Rows whose field count differs from the header are kept in place and
    flagged in MALFORMED_COLUMN so that row numbering is preserved.

    Raises:
        BatchInputError: the file is missing, empty or has no header row.
    """
    name = str(getattr(source, "name", source))
    text = _read_text(source)
    if not text.strip():
        raise BatchInputError("Batch file is empty", source=name)

    read_options = dict(dtype=str, keep_default_na=False, skip_blank_lines=True, skipinitialspace=True)
    try:
        header = pd.read_csv(io.StringIO(text), nrows=0, **read_options)
        width = len(header.columns)

        def _flag_bad_line(bad_line: List[str]) -> List[str]:
            return [f"{_BAD_LINE_MARKER}{len(bad_line)}"] + [""] * (width - 1)

        frame = pd.read_csv(
            io.StringIO(text),
            engine="python",
            on_bad_lines=_flag_bad_line,
            **read_options,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise BatchInputError(f"Unable to parse batch CSV: {e}", source=name)

    frame.columns = [str(c).strip() for c in frame.columns]
    frame[MALFORMED_COLUMN] = [_shape_problem(row, width) for row in frame.itertuples(index=False)]
    first = frame.columns[0]
    frame[first] = frame[first].where(~frame[first].astype(str).str.startswith(_BAD_LINE_MARKER), "")

    logger.info(f"Loaded batch CSV {name}: {len(frame)} rows, columns={list(frame.columns[:-1])}")
    return frame


def _shape_problem(row: tuple, width: int) -> str:
    cells = row[:width]
    if cells and isinstance(cells[0], str) and cells[0].startswith(_BAD_LINE_MARKER):
        got = cells[0][len(_BAD_LINE_MARKER):]
        return f"wrong column count: expected {width}, got {got}"
    if any(not isinstance(c, str) for c in cells):
        # missing trailing fields are padded with NaN by the parser
        return f"wrong column count: expected {width}, got fewer"
    return ""


def _iter_rows(rows: Union[pd.DataFrame, Iterable[Mapping[str, Any]]]) -> Iterable[Mapping[str, Any]]:
    if isinstance(rows, pd.DataFrame):
        return rows.to_dict(orient="records")
    return rows


def evaluate_rows(
    rows: Union[pd.DataFrame, Iterable[Mapping[str, Any]]],
    engine: Optional[RecommendationEngine] = None,
) -> BatchReport:
    """
    Evaluate rows sequentially, never aborting on a bad row.

    Args:
        rows:   a DataFrame (e.g. from load_batch_csv) or any iterable of
                mappings using supported field spellings.
        engine: engine to use; a default-configured one when omitted.
    """
    engine = engine or RecommendationEngine()
    report = BatchReport()

    for index, row in enumerate(_iter_rows(rows), start=1):
        problem = row.get(MALFORMED_COLUMN) if isinstance(row, Mapping) else None
        if problem:
            outcome = BatchRowOutcome(index, errors=[FieldError(field="row", message=problem)])
        else:
            parsed = parse_patient(row)
            if parsed.ok:
                outcome = BatchRowOutcome(index, result=engine.recommend(parsed.record))
            else:
                outcome = BatchRowOutcome(index, errors=list(parsed.errors))

        if not outcome.ok:
            logger.warning(
                f"Batch row {index} rejected: " + "; ".join(str(e) for e in outcome.errors)
            )
        report.outcomes.append(outcome)

    summary = report.summary()
    logger.info(
        f"Batch complete: {summary['evaluated']}/{summary['total_rows']} rows evaluated, "
        f"{summary['failed']} failed"
    )
    return report


def evaluate_csv(
    source: Union[str, Path, TextIO],
    engine: Optional[RecommendationEngine] = None,
) -> BatchReport:
    """Load a batch CSV and evaluate every row."""
    return evaluate_rows(load_batch_csv(source), engine)
