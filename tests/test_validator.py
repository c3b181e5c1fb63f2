"""Tests for provider output validation and fallback."""

from __future__ import annotations

import json
import math
from datetime import datetime
from typing import Any

import pytest

from parksense.analysis.validator import ResponseValidator, strip_code_fences
from parksense.models.analysis import FALLBACK_CONDITION, FALLBACK_RAW_TEXT

FIXED_NOW = datetime(2024, 1, 15, 10, 0)


def valid_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "canPark": True,
        "timeLimit": "2 hours",
        "days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
        "hours": "9:00 AM - 6:00 PM",
        "paymentRequired": True,
        "vehicleTypes": ["Passenger vehicles"],
        "specialConditions": [],
        "confidence": 0.92,
        "rawText": "2 HR PARKING 9AM-6PM MON-FRI",
    }
    payload.update(overrides)
    return payload


def assert_is_fallback(result: Any) -> None:
    assert result.can_park is None
    assert result.time_limit is None
    assert result.days == []
    assert result.hours is None
    assert result.payment_required is None
    assert result.vehicle_types == []
    assert result.special_conditions == [FALLBACK_CONDITION]
    assert result.confidence == 0
    assert result.raw_text == FALLBACK_RAW_TEXT
    assert result.error


class TestStripCodeFences:
    """Tests for code-fence removal."""

    def test_json_fence(self) -> None:
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_fence(self) -> None:
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence(self) -> None:
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


class TestResponseValidatorSuccess:
    """Tests for valid provider output."""

    def test_parses_plain_json(self) -> None:
        result = ResponseValidator(model="gpt-4o").validate(json.dumps(valid_payload()), FIXED_NOW)

        assert result.can_park is True
        assert result.time_limit == "2 hours"
        assert result.days[0] == "Monday"
        assert result.payment_required is True
        assert result.confidence == 0.92
        assert result.raw_text.startswith("2 HR PARKING")
        assert result.error is None
        assert result.is_mock_data is False

    def test_parses_fenced_json(self) -> None:
        raw = f"```json\n{json.dumps(valid_payload())}\n```"

        result = ResponseValidator().validate(raw)

        assert result.is_fallback is False
        assert result.can_park is True

    def test_stamps_timestamp_and_model(self) -> None:
        result = ResponseValidator(model="gpt-4o").validate(json.dumps(valid_payload()), FIXED_NOW)

        assert result.timestamp == FIXED_NOW.isoformat()
        assert result.model == "gpt-4o"

    def test_optional_fields_may_be_absent(self) -> None:
        raw = json.dumps({"canPark": False, "confidence": 0.7, "rawText": "NO PARKING"})

        result = ResponseValidator().validate(raw)

        assert result.can_park is False
        assert result.time_limit is None
        assert result.days == []
        assert result.vehicle_types == []
        assert result.special_conditions == []

    def test_loose_field_types_are_normalized(self) -> None:
        raw = json.dumps(
            valid_payload(
                timeLimit=2,
                days="Monday",
                vehicleTypes=["Cars", None, 3],
            )
        )

        result = ResponseValidator().validate(raw)

        assert result.is_fallback is False
        assert result.time_limit is None
        assert result.days == []
        assert result.vehicle_types == ["Cars", "3"]

    @pytest.mark.parametrize("value", ["yes", None, 1, "true"])
    def test_non_boolean_can_park_falls_back(self, value: Any) -> None:
        result = ResponseValidator().validate(json.dumps(valid_payload(canPark=value)))

        assert_is_fallback(result)

    def test_outcome_reports_success(self) -> None:
        outcome = ResponseValidator().validate_outcome(json.dumps(valid_payload()))

        assert outcome.ok is True
        assert outcome.reason is None


class TestResponseValidatorFallback:
    """Invalid output always yields the fallback result, never an exception."""

    @pytest.mark.parametrize("missing", ["canPark", "confidence", "rawText"])
    def test_missing_required_field(self, missing: str) -> None:
        payload = valid_payload()
        del payload[missing]

        result = ResponseValidator().validate(json.dumps(payload), FIXED_NOW)

        assert_is_fallback(result)
        assert missing in (result.error or "")

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            "not json at all",
            "```json\n{broken\n```",
            "[1, 2, 3]",
            '"just a string"',
            None,
            '{"canPark": true, "rawText": "X", "confidence": 1' + "0" * 5000 + "}",
            "[" * 100000 + "]" * 100000,
        ],
    )
    def test_unparseable_output(self, raw: Any) -> None:
        result = ResponseValidator().validate(raw)

        assert_is_fallback(result)

    @pytest.mark.parametrize("value", [None, "", "   ", 42, {}, ["NO PARKING"]])
    def test_raw_text_must_be_non_empty_string(self, value: Any) -> None:
        result = ResponseValidator().validate(json.dumps(valid_payload(rawText=value)))

        assert_is_fallback(result)
        assert "rawText" in (result.error or "")

    def test_fallback_carries_timestamp_and_model(self) -> None:
        result = ResponseValidator(model="gpt-4o").validate("garbage", FIXED_NOW)

        assert result.timestamp == FIXED_NOW.isoformat()
        assert result.model == "gpt-4o"

    def test_outcome_reports_reason(self) -> None:
        outcome = ResponseValidator().validate_outcome("garbage")

        assert outcome.ok is False
        assert outcome.reason is not None
        assert outcome.result.error == outcome.reason

    def test_minimal_fields_always_present(self) -> None:
        result = ResponseValidator().validate("{}")

        dumped = result.to_display_dict()
        for field in ("canPark", "confidence", "rawText"):
            assert field in dumped


class TestConfidenceCoercion:
    """Out-of-range confidence becomes 0.5; valid values pass unchanged."""

    @pytest.mark.parametrize(
        "value",
        [-0.1, 1.01, 2, 100, -5, "0.9", "high", None, True, False, [0.5], {"v": 1}, math.inf],
    )
    def test_invalid_confidence_becomes_half(self, value: Any) -> None:
        raw = json.dumps(valid_payload(confidence=value))

        result = ResponseValidator().validate(raw)

        assert result.is_fallback is False
        assert result.confidence == 0.5

    def test_nan_confidence_becomes_half(self) -> None:
        raw = json.dumps(valid_payload()).replace("0.92", "NaN")

        result = ResponseValidator().validate(raw)

        assert result.confidence == 0.5

    @pytest.mark.parametrize("value", [0, 0.0, 0.25, 0.5, 0.85, 1, 1.0])
    def test_valid_confidence_unchanged(self, value: float) -> None:
        raw = json.dumps(valid_payload(confidence=value))

        result = ResponseValidator().validate(raw)

        assert result.confidence == value
