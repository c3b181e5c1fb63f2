"""Shared data models for ParkSense.

All models use Pydantic for validation and serialization.
"""

from parksense.models.analysis import (
    FALLBACK_CONDITION,
    FALLBACK_RAW_TEXT,
    REQUIRED_FIELDS,
    ConfidenceLevel,
    ParkingAnalysisResult,
)

__all__ = [
    "FALLBACK_CONDITION",
    "FALLBACK_RAW_TEXT",
    "REQUIRED_FIELDS",
    "ConfidenceLevel",
    "ParkingAnalysisResult",
]
