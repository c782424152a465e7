"""
Unit Tests for Batch Evaluation

Row ordering, partial-failure semantics, CSV loading and aggregation.
"""
import io

import pandas as pd
import pytest

from dcm_decision.core.clinical import Approach, RecommendationEngine
from dcm_decision.core.ingestion import BatchReport, evaluate_csv, evaluate_rows, load_batch_csv
from dcm_decision.core.ingestion.batch import MALFORMED_COLUMN
from dcm_decision.utils import BatchInputError

HEADER = (
    "age,sex,smoker,symptom_duration_months,baseline_mjoa,levels_operated,canal_ratio,"
    "t2_signal,opll,t1_hypointensity,gait_impairment,psych_disorder,baseline_ndi,"
    "baseline_sf36_pcs,baseline_sf36_mcs"
)
ROW_MODERATE = "65,M,0,12,13,3,50-60%,multilevel,0,0,1,0,30,40,45"
ROW_EXTRA_FIELD = "70,F,1,24,11,4,>60%,focal,1,1,1,0,50,30,40,99"
ROW_MILD = "58,F,0,6,17,2,<50%,none,0,0,0,0,20,45,50"
ROW_BAD_NUMBER = "61,M,0,abc,13,3,<50%,none,0,0,0,0,30,40,45"


@pytest.fixture
def batch_csv() -> io.StringIO:
    return io.StringIO("\n".join([HEADER, ROW_MODERATE, ROW_EXTRA_FIELD, ROW_MILD, ROW_BAD_NUMBER]) + "\n")


class TestEvaluateRows:

    def test_bad_row_does_not_abort(self):
        rows = [
            {"age": 65, "baseline_mjoa": 13},
            {"age": "abc", "baseline_mjoa": 13},
            {"age": 50, "baseline_mjoa": 17, "symptom_duration_months": 3},
        ]
        report = evaluate_rows(rows)

        assert [o.row_index for o in report.outcomes] == [1, 2, 3]
        assert [o.ok for o in report.outcomes] == [True, False, True]
        assert report.outcomes[1].errors[0].field == "age"
        assert len(report.results) == 2

    def test_accepts_dataframe(self):
        frame = pd.DataFrame([
            {"age": 65, "baselineMJOA": 13.0},
            {"age": 50, "baselineMJOA": float("nan")},
        ])
        report = evaluate_rows(frame)

        assert all(o.ok for o in report.outcomes)
        # NaN is treated as missing -> default mJOA 13
        assert report.outcomes[1].result.patient.baseline_mjoa == 13

    def test_uses_given_engine(self):
        report = evaluate_rows([{"levelsOperated": 2}], RecommendationEngine("rule"))
        assert report.results[0].approach_source == "rule"

    def test_empty_input(self):
        report = evaluate_rows([])
        assert report.outcomes == []
        assert report.summary()["total_rows"] == 0


class TestLoadCsv:

    def test_cells_are_strings(self, batch_csv):
        frame = load_batch_csv(batch_csv)

        assert len(frame) == 4
        assert frame.loc[0, "age"] == "65"
        assert MALFORMED_COLUMN in frame.columns

    def test_extra_fields_flagged_in_place(self, batch_csv):
        frame = load_batch_csv(batch_csv)

        assert frame.loc[0, MALFORMED_COLUMN] == ""
        assert "wrong column count" in frame.loc[1, MALFORMED_COLUMN]
        assert frame.loc[2, MALFORMED_COLUMN] == ""

    def test_missing_file(self, tmp_path):
        with pytest.raises(BatchInputError) as excinfo:
            load_batch_csv(tmp_path / "nope.csv")
        assert excinfo.value.code == "INGESTION_ERROR"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(BatchInputError):
            load_batch_csv(path)

    def test_blank_lines_skipped(self):
        frame = load_batch_csv(io.StringIO(HEADER + "\n" + ROW_MODERATE + "\n\n" + ROW_MILD + "\n"))
        assert len(frame) == 2


class TestEvaluateCsv:

    def test_partial_failure(self, batch_csv):
        report = evaluate_csv(batch_csv)
        outcomes = report.outcomes

        assert [o.row_index for o in outcomes] == [1, 2, 3, 4]
        assert outcomes[0].ok
        assert outcomes[0].result.recommendation_label == "Consider surgery / surgery likely beneficial"
        assert not outcomes[1].ok
        assert outcomes[1].errors[0].field == "row"
        assert "expected 15" in outcomes[1].errors[0].message
        assert outcomes[2].ok
        assert outcomes[2].result.surgery_recommended is False
        assert not outcomes[3].ok
        assert outcomes[3].errors[0].field == "symptomDurationMonths"

    def test_short_row_rejected(self):
        report = evaluate_csv(io.StringIO(HEADER + "\n" + ROW_MODERATE + "\n61,M\n"))
        assert report.outcomes[0].ok
        assert not report.outcomes[1].ok

    def test_from_path(self, tmp_path):
        path = tmp_path / "batch.csv"
        path.write_text(HEADER + "\n" + ROW_MODERATE + "\n")
        report = evaluate_csv(path)
        assert report.results[0].best_approach == Approach.POSTERIOR


class TestBatchReport:

    def test_summary(self, batch_csv):
        summary = evaluate_csv(batch_csv).summary()

        assert summary["total_rows"] == 4
        assert summary["evaluated"] == 2
        assert summary["failed"] == 2
        assert summary["failed_rows"] == [2, 4]
        assert summary["surgery_recommended"] == 1
        assert summary["by_best_approach"] == {"posterior": 1, "none": 1}
        assert summary["by_severity"] == {"moderate": 1, "mild": 1}

    def test_to_frame(self, batch_csv):
        frame = evaluate_csv(batch_csv).to_frame()

        assert list(frame["row"]) == [1, 2, 3, 4]
        assert frame.loc[0, "errors"] == ""
        assert frame.loc[0, "bestApproach"] == "posterior"
        assert "wrong column count" in frame.loc[1, "errors"]
        assert pd.isna(frame.loc[1, "riskScore"])

    def test_outcome_to_dict(self, batch_csv):
        outcome = evaluate_csv(batch_csv).outcomes[3]
        data = outcome.to_dict()
        assert data["row"] == 4
        assert data["ok"] is False
        assert data["result"] is None
        assert data["errors"][0]["field"] == "symptomDurationMonths"

    def test_empty_report_frame(self):
        assert BatchReport().to_frame().empty
