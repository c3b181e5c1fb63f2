"""Parking analysis result model."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, Field

FALLBACK_CONDITION = "Unable to analyze - please check sign manually"
FALLBACK_RAW_TEXT = "Error reading sign"

# Fields every result reaching the display stage must carry.
REQUIRED_FIELDS = ("canPark", "confidence", "rawText")


def _now_iso() -> str:
    return datetime.now().isoformat()


class ConfidenceLevel(str, Enum):
    """Coarse confidence bands shown next to a result."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def label(self) -> str:
        return _CONFIDENCE_LABELS[self]

    @classmethod
    def from_score(cls, score: float) -> ConfidenceLevel:
        """Band a confidence score: above 0.9 is high, above 0.8 medium."""
        if score > 0.9:
            return cls.HIGH
        if score > 0.8:
            return cls.MEDIUM
        return cls.LOW


_CONFIDENCE_LABELS = {
    ConfidenceLevel.HIGH: "High Confidence",
    ConfidenceLevel.MEDIUM: "Medium Confidence",
    ConfidenceLevel.LOW: "Low Confidence - Please Verify",
}


class ParkingAnalysisResult(BaseModel):
    """Structured parking rules read from a single sign.

    Field names are snake_case in Python; the wire format uses the camelCase
    aliases, so ``model_dump(by_alias=True)`` yields the provider contract.
    """

    can_park: bool | None = Field(
        ..., alias="canPark", description="Whether parking is allowed now; None if unknown"
    )
    time_limit: str | None = Field(default=None, alias="timeLimit", description="e.g. '2 hours'")
    days: list[str] = Field(default_factory=list, description="Weekdays the rules apply")
    hours: str | None = Field(default=None, description="Time range the rules apply")
    payment_required: bool | None = Field(default=None, alias="paymentRequired")
    vehicle_types: list[str] = Field(default_factory=list, alias="vehicleTypes")
    special_conditions: list[str] = Field(default_factory=list, alias="specialConditions")
    confidence: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        ..., description="Model confidence in the reading"
    )
    raw_text: str = Field(..., alias="rawText", description="Text transcribed from the sign")
    is_mock_data: bool = Field(default=False, alias="isMockData")
    error: str | None = Field(default=None, description="Diagnostic message on fallback")
    timestamp: str = Field(default_factory=_now_iso, description="ISO-8601 construction time")
    model: str | None = Field(default=None, description="Provider model identifier or 'mock'")

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def is_fallback(self) -> bool:
        """Check if this result was synthesized after a failed analysis."""
        return self.error is not None

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_score(self.confidence)

    def to_display_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase field names used by the display layer."""
        return self.model_dump(by_alias=True)

    @classmethod
    def fallback(
        cls,
        error: str,
        now: datetime | None = None,
        model: str | None = None,
    ) -> ParkingAnalysisResult:
        """Build the fixed result used when a response cannot be validated.

        Args:
            error: Diagnostic message describing the failure.
            now: Construction time. Defaults to the current time.
            model: Model identifier that produced the bad output.

        Returns:
            A well-formed result with unknown parking status and zero confidence.
        """
        return cls(
            can_park=None,
            time_limit=None,
            days=[],
            hours=None,
            payment_required=None,
            vehicle_types=[],
            special_conditions=[FALLBACK_CONDITION],
            confidence=0.0,
            raw_text=FALLBACK_RAW_TEXT,
            error=error,
            timestamp=(now or datetime.now()).isoformat(),
            model=model,
        )
