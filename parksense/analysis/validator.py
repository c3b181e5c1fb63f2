"""Provider output validation.

``ResponseValidator.validate`` is total: every input yields a
``ParkingAnalysisResult``. Output that cannot be parsed, lacks a required
field, has a non-boolean ``canPark`` or has no ``rawText`` string becomes
the fixed fallback result with a diagnostic ``error``. An out-of-range
confidence is coerced to 0.5 instead of rejecting an otherwise usable
reading.

Example:
    >>> validator = ResponseValidator(model="gpt-4o")
    >>> result = validator.validate('```json\\n{"canPark": true, ...}\\n```')
    >>> result.is_fallback
    False
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from parksense.models.analysis import REQUIRED_FIELDS, ParkingAnalysisResult

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5

_LIST_FIELDS = ("days", "vehicleTypes", "specialConditions")
_TEXT_FIELDS = ("timeLimit", "hours")
_FLAG_FIELDS = ("paymentRequired",)


@dataclass(frozen=True)
class ValidationOutcome:
    """Tagged validation result.

    Attributes:
        ok: True if the provider output passed validation.
        result: The validated result, or the fallback when ``ok`` is False.
        reason: Why validation failed. None when ``ok``.
    """

    ok: bool
    result: ParkingAnalysisResult
    reason: str | None = None


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers wrapped around a payload."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def is_valid_confidence(value: Any) -> bool:
    """Check for a real number in [0, 1]. Booleans do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return 0.0 <= value <= 1.0


class ResponseValidator:
    """Turn raw provider text into a typed parking result."""

    def __init__(self, model: str | None = None) -> None:
        """Initialize the validator.

        Args:
            model: Model identifier stamped onto every result.
        """
        self._model = model

    def validate(self, raw_output: str | None, now: datetime | None = None) -> ParkingAnalysisResult:
        """Validate provider output. Never raises."""
        return self.validate_outcome(raw_output, now=now).result

    def validate_outcome(
        self,
        raw_output: str | None,
        now: datetime | None = None,
    ) -> ValidationOutcome:
        """Validate provider output and report whether the fallback was used.

        Args:
            raw_output: Text generated by the provider.
            now: Timestamp to stamp on the result. Defaults to the current time.

        Returns:
            ValidationOutcome carrying the result.
        """
        now = now or datetime.now()

        if not isinstance(raw_output, str) or not raw_output.strip():
            return self._fail("Empty response from provider", now)

        text = strip_code_fences(raw_output)
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            logger.debug(f"Response text: {text[:500]}")
            return self._fail(f"Failed to parse response JSON: {e}", now)

        if not isinstance(data, dict):
            return self._fail(f"Response JSON is not an object: {type(data).__name__}", now)

        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            return self._fail(f"Missing required fields: {', '.join(missing)}", now)

        if not isinstance(data["canPark"], bool):
            return self._fail(f"canPark must be a boolean, got {data['canPark']!r}", now)

        raw_text = data["rawText"]
        if not isinstance(raw_text, str) or not raw_text.strip():
            return self._fail(f"rawText must be a non-empty string, got {raw_text!r}", now)

        if not is_valid_confidence(data["confidence"]):
            logger.warning(
                f"Invalid confidence {data['confidence']!r}; using {DEFAULT_CONFIDENCE}"
            )
            data["confidence"] = DEFAULT_CONFIDENCE

        try:
            result = ParkingAnalysisResult.model_validate(self._normalize(data, now))
        except ValidationError as e:
            return self._fail(f"Response failed validation: {e.error_count()} error(s)", now)

        return ValidationOutcome(ok=True, result=result)

    def _normalize(self, data: dict[str, Any], now: datetime) -> dict[str, Any]:
        """Coerce loosely typed fields so model construction succeeds."""
        normalized: dict[str, Any] = {
            "canPark": data["canPark"],
            "confidence": float(data["confidence"]),
            "rawText": data["rawText"],
        }

        for name in _FLAG_FIELDS:
            value = data.get(name)
            normalized[name] = value if isinstance(value, bool) else None

        for name in _TEXT_FIELDS:
            value = data.get(name)
            normalized[name] = value if isinstance(value, str) and value else None

        for name in _LIST_FIELDS:
            value = data.get(name)
            if isinstance(value, list):
                normalized[name] = [str(item) for item in value if item is not None]
            else:
                normalized[name] = []

        normalized["isMockData"] = False
        normalized["timestamp"] = now.isoformat()
        normalized["model"] = self._model
        return normalized

    def _fail(self, reason: str, now: datetime) -> ValidationOutcome:
        logger.warning(f"Falling back after invalid provider output: {reason}")
        return ValidationOutcome(
            ok=False,
            result=ParkingAnalysisResult.fallback(reason, now=now, model=self._model),
            reason=reason,
        )
