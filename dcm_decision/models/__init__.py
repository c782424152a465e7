"""
Request Schemas

Pydantic models describing what collaborators (forms, CSV batches, API
callers) may hand to the recommendation engine.
"""
from .patient import PatientInput, FIELD_ALIASES, PLAUSIBLE_RANGES, canonical_field_name

__all__ = [
    "PatientInput",
    "FIELD_ALIASES",
    "PLAUSIBLE_RANGES",
    "canonical_field_name",
]
