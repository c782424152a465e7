"""
Input Normalizer

Turns a raw, partial patient mapping (form fields, a CSV row, a JSON body)
into a fully populated ``PatientRecord``.

  - Missing or blank fields take documented defaults; absence is never an error.
  - Present values are coerced and bounds-checked; violations come back as
    field-level errors instead of being silently clamped.
  - ``severity`` is always re-derived from baseline mJOA.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from dcm_decision.models.patient import PLAUSIBLE_RANGES, PatientInput, canonical_field_name
from dcm_decision.utils import PatientValidationError, get_logger
from .base import PatientRecord, Severity

logger = get_logger(__name__)

# ── Severity thresholds (mJOA) ────────────────────────────────────────────────
MILD_MJOA_MIN = 15.5        # mJOA ≥ 15.5 → mild
MODERATE_MJOA_MIN = 12.0    # 12 ≤ mJOA < 15.5 → moderate; below → severe


@dataclass(frozen=True)
class FieldError:
    """A single field that could not be accepted."""
    field: str
    message: str
    value: Any = None
    bound: Optional[Tuple[float, float]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "message": self.message,
            "value": self.value,
            "bound": list(self.bound) if self.bound else None,
        }

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class ParseOutcome:
    """Tagged result: exactly one of ``record`` / ``errors`` is meaningful."""
    record: Optional[PatientRecord] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.record is not None and not self.errors


def compute_severity(mjoa: float) -> Severity:
    if mjoa >= MILD_MJOA_MIN:
        return Severity.MILD
    if mjoa >= MODERATE_MJOA_MIN:
        return Severity.MODERATE
    return Severity.SEVERE


def severity_label(severity: Severity) -> str:
    if severity == Severity.MILD:
        return "Mild (mJOA ≥ 15.5)"
    if severity == Severity.MODERATE:
        return "Moderate (mJOA 12–15.4)"
    return "Severe (mJOA < 12)"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def canonicalize(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Re-key a raw mapping onto canonical field names.

    Unknown keys and blank values are dropped. When several spellings of
    the same field are present, the first non-blank one wins.
    """
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        name = canonical_field_name(key)
        if name is None or name in out or _is_blank(value):
            continue
        out[name] = value.strip() if isinstance(value, str) else value
    return out


def _field_errors(exc: ValidationError) -> List[FieldError]:
    errors: List[FieldError] = []
    for err in exc.errors():
        name = str(err["loc"][0]) if err.get("loc") else "unknown"
        message = err.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append(FieldError(
            field=name,
            message=message,
            value=err.get("input"),
            bound=PLAUSIBLE_RANGES.get(name),
        ))
    return errors


def _to_record(data: PatientInput) -> PatientRecord:
    return PatientRecord(
        age=data.age,
        sex=data.sex,
        smoker=data.smoker,
        symptom_duration_months=float(data.symptomDurationMonths),
        baseline_mjoa=float(data.baselineMJOA),
        severity=compute_severity(data.baselineMJOA),
        levels_operated=data.levelsOperated,
        opll=data.opll,
        canal_occupying_ratio=data.canalOccupyingRatio,
        t2_signal=data.t2Signal,
        t1_hypointensity=data.t1Hypointensity,
        gait_impairment=data.gaitImpairment,
        psych_disorder=data.psychDisorder,
        baseline_ndi=float(data.baselineNDI),
        baseline_sf36_pcs=float(data.baselineSF36PCS),
        baseline_sf36_mcs=float(data.baselineSF36MCS),
    )


def parse_patient(raw: Union[Mapping[str, Any], PatientRecord, None]) -> ParseOutcome:
    """
    Validate a raw patient mapping without raising.

    Returns a ``ParseOutcome`` holding either the normalized record or the
    list of offending fields.
    """
    if isinstance(raw, PatientRecord):
        return ParseOutcome(record=replace(raw, severity=compute_severity(raw.baseline_mjoa)))
    try:
        data = PatientInput(**canonicalize(raw or {}))
    except ValidationError as exc:
        errors = _field_errors(exc)
        logger.debug(f"parse_patient: rejected fields {[e.field for e in errors]}")
        return ParseOutcome(errors=errors)
    return ParseOutcome(record=_to_record(data))


def normalize_patient(raw: Union[Mapping[str, Any], PatientRecord, None]) -> PatientRecord:
    """
    Normalize a raw patient mapping into a ``PatientRecord``.

    Raises:
        PatientValidationError: a present value is malformed or out of range.
    """
    outcome = parse_patient(raw)
    if not outcome.ok:
        summary = "; ".join(str(e) for e in outcome.errors)
        raise PatientValidationError(f"Invalid patient input: {summary}", outcome.errors)
    return outcome.record
