"""Tests for the mock oracle."""

from __future__ import annotations

import random
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from parksense.analysis.mock import MOCK_CATALOG, MOCK_MODEL, MockOracle, MockStrategy

MONDAY_10AM = datetime(2024, 1, 15, 10, 0)
SATURDAY_10AM = datetime(2024, 1, 20, 10, 0)


class TestTimeDerivedMock:
    """Tests for MockOracle.get_mock_response()."""

    def test_weekday_business_hours_restricts_parking(self) -> None:
        result = MockOracle(delay_seconds=0).get_mock_response(MONDAY_10AM)

        assert result.can_park is False
        assert result.payment_required is True
        assert result.time_limit == "2 hours"

    def test_saturday_allows_free_parking(self) -> None:
        result = MockOracle(delay_seconds=0).get_mock_response(SATURDAY_10AM)

        assert result.can_park is True
        assert result.payment_required is False
        assert result.time_limit is None

    def test_weekday_evening_allows_parking_with_limit(self) -> None:
        result = MockOracle(delay_seconds=0).get_mock_response(datetime(2024, 1, 15, 20, 0))

        assert result.can_park is True
        assert result.payment_required is False
        assert result.time_limit == "2 hours"

    @pytest.mark.parametrize("hour", [9, 18])
    def test_business_hours_bounds_are_inclusive(self, hour: int) -> None:
        result = MockOracle(delay_seconds=0).get_mock_response(datetime(2024, 1, 16, hour, 0))

        assert result.can_park is False

    def test_fixed_fields(self) -> None:
        result = MockOracle(delay_seconds=0).get_mock_response(MONDAY_10AM)

        assert result.days == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
        assert result.hours == "9:00 AM - 6:00 PM"
        assert result.confidence == 0.85
        assert result.model == MOCK_MODEL
        assert result.is_mock_data is True
        assert result.timestamp == MONDAY_10AM.isoformat()

    def test_same_moment_same_result(self) -> None:
        oracle = MockOracle(delay_seconds=0)

        assert oracle.get_mock_response(MONDAY_10AM) == oracle.get_mock_response(MONDAY_10AM)


class TestCatalogMock:
    """Tests for MockOracle.get_catalog_response()."""

    def test_result_comes_from_catalog(self) -> None:
        result = MockOracle(delay_seconds=0).get_catalog_response(MONDAY_10AM)

        assert result.raw_text in {entry["rawText"] for entry in MOCK_CATALOG}
        assert result.is_mock_data is True
        assert result.model == MOCK_MODEL

    def test_seeded_rng_is_repeatable(self) -> None:
        first = MockOracle(delay_seconds=0, rng=random.Random(7)).get_catalog_response(MONDAY_10AM)
        second = MockOracle(delay_seconds=0, rng=random.Random(7)).get_catalog_response(MONDAY_10AM)

        assert first == second

    def test_every_entry_is_reachable(self) -> None:
        oracle = MockOracle(delay_seconds=0, rng=random.Random(0))

        seen = {oracle.get_catalog_response(MONDAY_10AM).raw_text for _ in range(200)}

        assert len(seen) == len(MOCK_CATALOG)

    def test_catalog_entries_are_distinct(self) -> None:
        assert len({entry["rawText"] for entry in MOCK_CATALOG}) == len(MOCK_CATALOG)


class TestMockLatency:
    """Both strategies simulate provider latency."""

    @pytest.mark.parametrize("strategy", [MockStrategy.TIME, MockStrategy.CATALOG])
    def test_sleeps_for_configured_delay(self, strategy: MockStrategy) -> None:
        sleep = MagicMock()
        oracle = MockOracle(delay_seconds=2.5, sleep=sleep)

        oracle.respond(strategy, MONDAY_10AM)

        sleep.assert_called_once_with(2.5)

    def test_zero_delay_skips_sleep(self) -> None:
        sleep = MagicMock()

        MockOracle(delay_seconds=0, sleep=sleep).get_mock_response(MONDAY_10AM)

        sleep.assert_not_called()


class TestRespond:
    """Tests for strategy dispatch."""

    def test_accepts_strategy_strings(self) -> None:
        result = MockOracle(delay_seconds=0).respond("time", SATURDAY_10AM)

        assert result.can_park is True

    def test_rejects_unknown_strategy(self) -> None:
        with pytest.raises(ValueError):
            MockOracle(delay_seconds=0).respond("psychic", MONDAY_10AM)
