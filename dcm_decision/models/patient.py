"""
patient.py: Pydantic request schema for one patient profile.

Every field is optional: absent or blank values take the documented
clinical defaults. Present values are coerced (stringly-typed form and
CSV input is expected) and checked against plausible clinical bounds.
"""
from __future__ import annotations

import numbers
import re
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dcm_decision.core.clinical.base import CanalRatio, Sex, T2Signal

# Plausible clinical bounds (inclusive) for numeric fields
PLAUSIBLE_RANGES: Dict[str, Tuple[float, float]] = {
    "age": (18, 95),
    "symptomDurationMonths": (0, 600),
    "baselineMJOA": (0, 18),
    "levelsOperated": (0, 10),
    "baselineNDI": (0, 100),
    "baselineSF36PCS": (0, 100),
    "baselineSF36MCS": (0, 100),
}

# Spellings used by forms / CSV exports that do not squash onto a canonical name
FIELD_ALIASES: Dict[str, str] = {
    "canalratio": "canalOccupyingRatio",
    "canal": "canalOccupyingRatio",
    "t1hypo": "t1Hypointensity",
    "t1": "t1Hypointensity",
    "t2": "t2Signal",
    "duration": "symptomDurationMonths",
    "symptomduration": "symptomDurationMonths",
    "durationmonths": "symptomDurationMonths",
    "mjoa": "baselineMJOA",
    "levels": "levelsOperated",
    "ndi": "baselineNDI",
    "pcs": "baselineSF36PCS",
    "mcs": "baselineSF36MCS",
    "sf36pcs": "baselineSF36PCS",
    "sf36mcs": "baselineSF36MCS",
    "gait": "gaitImpairment",
    "psych": "psychDisorder",
}

_TRUE_STRINGS = {"1", "1.0", "true", "t", "yes", "y", "on"}
_FALSE_STRINGS = {"0", "0.0", "false", "f", "no", "n", "off"}
_SQUASH = re.compile(r"[\s_\-]+")


def _squash(name: str) -> str:
    return _SQUASH.sub("", name).lower()


def canonical_field_name(name: str) -> Optional[str]:
    """
    Map a collaborator's field name onto the canonical schema name.

    ``baseline_mJOA``, ``baselineMJOA`` and ``baseline_mjoa`` all resolve to
    ``baselineMJOA``. Returns None for unknown fields.
    """
    key = _squash(str(name))
    return _CANONICAL_BY_SQUASHED.get(key) or FIELD_ALIASES.get(key)


def _coerce_bool(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, numbers.Number):
        if value in (0, 1):
            return bool(value)
        raise ValueError("expected 0 or 1")
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValueError("expected a yes/no value")


class PatientInput(BaseModel):
    """Validated, typed patient fields before severity is derived."""

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False, frozen=True)

    age: int = Field(60, ge=18, le=95, description="Age in years")
    sex: Sex = Field(Sex.MALE)
    smoker: bool = False
    symptomDurationMonths: float = Field(12, ge=0, le=600)
    baselineMJOA: float = Field(13, ge=0, le=18, description="Baseline mJOA (0-18)")
    levelsOperated: int = Field(3, ge=0, le=10, description="Planned surgical levels")
    opll: bool = False
    canalOccupyingRatio: CanalRatio = CanalRatio.BELOW_50
    t2Signal: T2Signal = T2Signal.NONE
    t1Hypointensity: bool = False
    gaitImpairment: bool = False
    psychDisorder: bool = False
    baselineNDI: float = Field(30, ge=0, le=100)
    baselineSF36PCS: float = Field(40, ge=0, le=100)
    baselineSF36MCS: float = Field(45, ge=0, le=100)

    @field_validator(
        "smoker", "opll", "t1Hypointensity", "gaitImpairment", "psychDisorder",
        mode="before",
    )
    @classmethod
    def _parse_flag(cls, value: Any) -> Any:
        return _coerce_bool(value)

    @field_validator("age", "levelsOperated", mode="before")
    @classmethod
    def _parse_whole_number(cls, value: Any) -> Any:
        # CSV exports often write integers as "65.0"
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                raise ValueError("expected a whole number") from None
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError("expected a whole number")
            return int(value)
        return value

    @field_validator("sex", mode="before")
    @classmethod
    def _parse_sex(cls, value: Any) -> Any:
        if isinstance(value, Sex):
            return value
        text = str(value).strip().lower()
        if text in ("m", "male"):
            return Sex.MALE
        if text in ("f", "female"):
            return Sex.FEMALE
        raise ValueError("expected M or F")

    @field_validator("canalOccupyingRatio", mode="before")
    @classmethod
    def _parse_canal(cls, value: Any) -> Any:
        if isinstance(value, CanalRatio):
            return value
        text = str(value).strip().replace("–", "-").replace("—", "-").replace(" ", "")
        if text.startswith("<"):
            return CanalRatio.BELOW_50
        if "50" in text and "60" in text:
            return CanalRatio.FROM_50_TO_60
        if text.startswith(">") or "60" in text:
            return CanalRatio.ABOVE_60
        raise ValueError("expected one of <50%, 50-60%, >60%")

    @field_validator("t2Signal", mode="before")
    @classmethod
    def _parse_t2(cls, value: Any) -> Any:
        if isinstance(value, T2Signal):
            return value
        text = str(value).strip().lower()
        if "multi" in text:
            return T2Signal.MULTILEVEL
        if "focal" in text:
            return T2Signal.FOCAL
        if text in ("none", "no", "0", "absent", "normal"):
            return T2Signal.NONE
        raise ValueError("expected none, focal or multilevel")


_CANONICAL_BY_SQUASHED: Dict[str, str] = {_squash(name): name for name in PatientInput.model_fields}
