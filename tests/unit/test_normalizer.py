"""
Unit Tests for the Input Normalizer

Defaults, field-name aliases, coercion of stringly-typed values, severity
derivation and field-level validation errors.
"""
import pytest
import numpy as np

from dcm_decision.core.clinical import (
    CanalRatio,
    PatientRecord,
    Severity,
    Sex,
    T2Signal,
    compute_severity,
    normalize_patient,
    parse_patient,
)
from dcm_decision.core.clinical.normalizer import severity_label
from dcm_decision.models import canonical_field_name
from dcm_decision.utils import PatientValidationError


class TestDefaults:
    """Missing fields are never an error."""

    def test_empty_input_uses_defaults(self):
        record = normalize_patient({})

        assert record.age == 60
        assert record.sex == Sex.MALE
        assert record.smoker is False
        assert record.symptom_duration_months == 12
        assert record.baseline_mjoa == 13
        assert record.severity == Severity.MODERATE
        assert record.levels_operated == 3
        assert record.canal_occupying_ratio == CanalRatio.BELOW_50
        assert record.t2_signal == T2Signal.NONE
        assert record.baseline_ndi == 30
        assert record.baseline_sf36_pcs == 40
        assert record.baseline_sf36_mcs == 45

    def test_none_input(self):
        assert normalize_patient(None) == normalize_patient({})

    def test_blank_values_take_defaults(self):
        record = normalize_patient({"age": "", "baselineMJOA": "   ", "t2Signal": None, "opll": float("nan")})
        assert record.age == 60
        assert record.baseline_mjoa == 13
        assert record.t2_signal == T2Signal.NONE
        assert record.opll is False

    def test_unknown_fields_ignored(self):
        record = normalize_patient({"mrn": "12345", "favourite_colour": "blue", "age": 70})
        assert record.age == 70


class TestFieldAliases:
    """Collaborators' spellings map onto the canonical schema."""

    @pytest.mark.parametrize("key", ["baselineMJOA", "baseline_mJOA", "baseline_mjoa", "BASELINE_MJOA", "mjoa"])
    def test_mjoa_spellings(self, key):
        assert normalize_patient({key: 17}).baseline_mjoa == 17

    def test_csv_header_names(self):
        record = normalize_patient({
            "symptom_duration_months": "30",
            "levels_operated": "4",
            "canal_ratio": "50-60%",
            "t2_signal": "focal",
            "t1_hypointensity": "1",
            "gait_impairment": "1",
            "psych_disorder": "0",
            "baseline_sf36_pcs": "33",
            "baseline_sf36_mcs": "41",
        })
        assert record.symptom_duration_months == 30
        assert record.levels_operated == 4
        assert record.canal_occupying_ratio == CanalRatio.FROM_50_TO_60
        assert record.t2_signal == T2Signal.FOCAL
        assert record.t1_hypointensity is True
        assert record.gait_impairment is True
        assert record.psych_disorder is False
        assert record.baseline_sf36_pcs == 33
        assert record.baseline_sf36_mcs == 41

    def test_first_non_blank_spelling_wins(self):
        record = normalize_patient({"baseline_mjoa": "", "baselineMJOA": 11})
        assert record.baseline_mjoa == 11

    def test_unknown_name(self):
        assert canonical_field_name("shoe_size") is None
        assert canonical_field_name("t1Hypo") == "t1Hypointensity"


class TestCoercion:
    """Stringly-typed form / CSV values."""

    @pytest.mark.parametrize("raw,expected", [
        ("1", True), ("0", False), ("yes", True), ("No", False),
        ("1.0", True), ("0.0", False), (1, True), (0, False), (True, True),
    ])
    def test_flags(self, raw, expected):
        assert normalize_patient({"opll": raw}).opll is expected

    @pytest.mark.parametrize("raw,expected", [
        ("<50%", CanalRatio.BELOW_50),
        ("50-60%", CanalRatio.FROM_50_TO_60),
        ("50–60%", CanalRatio.FROM_50_TO_60),
        (" >60% ", CanalRatio.ABOVE_60),
        ("> 60", CanalRatio.ABOVE_60),
    ])
    def test_canal_ratio(self, raw, expected):
        assert normalize_patient({"canal_ratio": raw}).canal_occupying_ratio == expected

    @pytest.mark.parametrize("raw,expected", [
        ("none", T2Signal.NONE),
        ("Focal", T2Signal.FOCAL),
        ("Multi-level", T2Signal.MULTILEVEL),
        ("multilevel", T2Signal.MULTILEVEL),
    ])
    def test_t2_signal(self, raw, expected):
        assert normalize_patient({"t2Signal": raw}).t2_signal == expected

    def test_sex(self):
        assert normalize_patient({"sex": "f"}).sex == Sex.FEMALE
        assert normalize_patient({"sex": "Male"}).sex == Sex.MALE

    def test_whole_numbers_from_csv(self):
        record = normalize_patient({"age": "65.0", "levelsOperated": 4.0})
        assert record.age == 65
        assert isinstance(record.age, int)
        assert record.levels_operated == 4

    def test_numeric_strings(self):
        assert normalize_patient({"baselineMJOA": "14.5"}).baseline_mjoa == 14.5


class TestSeverity:
    """Severity is derived from mJOA with a 15.5 / 12 split."""

    def test_boundaries(self):
        assert compute_severity(15.5) == Severity.MILD
        assert compute_severity(15.49) == Severity.MODERATE
        assert compute_severity(12) == Severity.MODERATE
        assert compute_severity(11.99) == Severity.SEVERE

    def test_boundary_through_normalizer(self):
        assert normalize_patient({"baselineMJOA": 15.5}).severity == Severity.MILD
        assert normalize_patient({"baselineMJOA": 15.49}).severity == Severity.MODERATE

    def test_supplied_severity_is_ignored(self):
        record = normalize_patient({"baselineMJOA": 10, "severity": "mild"})
        assert record.severity == Severity.SEVERE

    def test_record_severity_recomputed(self):
        base = normalize_patient({"baselineMJOA": 10})
        tampered = PatientRecord(**{**base.__dict__, "severity": Severity.MILD})
        assert normalize_patient(tampered).severity == Severity.SEVERE

    def test_monotonic_in_mjoa(self):
        rank = {Severity.MILD: 0, Severity.MODERATE: 1, Severity.SEVERE: 2}
        ranks = [rank[compute_severity(float(m))] for m in np.arange(0, 18.01, 0.05)]
        assert all(a >= b for a, b in zip(ranks, ranks[1:]))

    def test_labels(self):
        assert "15.5" in severity_label(Severity.MILD)
        assert severity_label(Severity.SEVERE).startswith("Severe")


class TestValidationErrors:
    """Present-but-invalid values produce field errors, never crashes."""

    def test_out_of_range_age(self):
        outcome = parse_patient({"age": 120})

        assert not outcome.ok
        assert outcome.record is None
        assert [e.field for e in outcome.errors] == ["age"]
        assert outcome.errors[0].bound == (18, 95)

    def test_mjoa_above_scale(self):
        outcome = parse_patient({"baseline_mjoa": 19})
        assert outcome.errors[0].field == "baselineMJOA"
        assert outcome.errors[0].bound == (0, 18)

    def test_non_numeric_value(self):
        outcome = parse_patient({"baseline_ndi": "abc"})
        assert outcome.errors[0].field == "baselineNDI"
        assert outcome.errors[0].value == "abc"

    def test_fractional_age(self):
        outcome = parse_patient({"age": "65.5"})
        assert outcome.errors[0].field == "age"
        assert "whole number" in outcome.errors[0].message

    def test_unrecognized_enum(self):
        outcome = parse_patient({"t2Signal": "patchy", "canal_ratio": "unknown"})
        assert {e.field for e in outcome.errors} == {"t2Signal", "canalOccupyingRatio"}

    def test_multiple_errors_collected(self):
        outcome = parse_patient({"age": 10, "baselineMJOA": -1, "levelsOperated": 12})
        assert {e.field for e in outcome.errors} == {"age", "baselineMJOA", "levelsOperated"}

    def test_normalize_raises(self):
        with pytest.raises(PatientValidationError) as excinfo:
            normalize_patient({"age": 120, "baselineMJOA": 13})

        err = excinfo.value
        assert err.code == "VALIDATION_ERROR"
        assert err.field_errors[0].field == "age"
        assert err.to_dict()["details"]["fields"][0]["bound"] == [18, 95]
