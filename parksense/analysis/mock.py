"""Synthetic analysis results for running without a provider credential.

Two strategies are available:

- ``MockStrategy.TIME``: derives the reading from the current day and hour,
  so the same moment always yields the same result.
- ``MockStrategy.CATALOG``: picks one of a few canned sign readings at random.

Both sleep for ``delay_seconds`` first to imitate provider latency.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from datetime import datetime
from enum import StrEnum
from typing import Any

from parksense.models.analysis import ParkingAnalysisResult

logger = logging.getLogger(__name__)

MOCK_MODEL = "mock"
DEFAULT_DELAY_SECONDS = 1.5

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
BUSINESS_HOURS = "9:00 AM - 6:00 PM"
BUSINESS_START_HOUR = 9
BUSINESS_END_HOUR = 18


class MockStrategy(StrEnum):
    """How the oracle produces a synthetic result."""

    TIME = "time"
    CATALOG = "catalog"


MOCK_CATALOG: tuple[dict[str, Any], ...] = (
    {
        "canPark": True,
        "timeLimit": "2 hours",
        "days": WEEKDAYS,
        "hours": BUSINESS_HOURS,
        "paymentRequired": True,
        "vehicleTypes": ["Passenger vehicles"],
        "specialConditions": [],
        "confidence": 0.92,
        "rawText": "2 HR PARKING 9AM-6PM MON-FRI PAYMENT REQUIRED",
    },
    {
        "canPark": False,
        "timeLimit": None,
        "days": WEEKDAYS,
        "hours": "7:00 AM - 9:00 AM, 4:00 PM - 6:00 PM",
        "paymentRequired": False,
        "vehicleTypes": [],
        "specialConditions": ["No Parking - Tow Zone"],
        "confidence": 0.88,
        "rawText": "NO PARKING 7-9AM 4-6PM MON-FRI TOW ZONE",
    },
    {
        "canPark": True,
        "timeLimit": "30 minutes",
        "days": [*WEEKDAYS, "Saturday"],
        "hours": "8:00 AM - 8:00 PM",
        "paymentRequired": True,
        "vehicleTypes": ["Passenger vehicles"],
        "specialConditions": ["Loading zone - 15 min max for commercial vehicles"],
        "confidence": 0.95,
        "rawText": "30 MIN PARKING 8AM-8PM MON-SAT LOADING ZONE",
    },
)


class MockOracle:
    """Produce synthetic parking results.

    Example:
        >>> oracle = MockOracle(delay_seconds=0)
        >>> result = oracle.get_mock_response(datetime(2024, 1, 15, 10, 0))
        >>> result.can_park
        False
    """

    def __init__(
        self,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the oracle.

        Args:
            delay_seconds: Simulated latency before each response.
            rng: Random source for the catalog strategy.
            sleep: Sleep function, replaceable in tests.
        """
        self._delay_seconds = delay_seconds
        self._rng = rng or random.Random()
        self._sleep = sleep

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    def _simulate_latency(self) -> None:
        if self._delay_seconds > 0:
            self._sleep(self._delay_seconds)

    def get_mock_response(self, now: datetime | None = None) -> ParkingAnalysisResult:
        """Derive a result from the day and hour of ``now``.

        Weekdays between 9:00 and 18:59 are treated as paid, restricted
        hours. Everything else allows free parking.
        """
        self._simulate_latency()
        now = now or datetime.now()

        is_weekday = now.weekday() < 5
        is_business_hours = BUSINESS_START_HOUR <= now.hour <= BUSINESS_END_HOUR
        restricted = is_weekday and is_business_hours

        return ParkingAnalysisResult(
            can_park=not restricted,
            time_limit="2 hours" if is_weekday else None,
            days=list(WEEKDAYS),
            hours=BUSINESS_HOURS,
            payment_required=restricted,
            vehicle_types=["Passenger vehicles"],
            special_conditions=[],
            confidence=0.85,
            raw_text="2 HR PARKING 9AM-6PM MON-FRI PAYMENT REQUIRED",
            is_mock_data=True,
            timestamp=now.isoformat(),
            model=MOCK_MODEL,
        )

    def get_catalog_response(self, now: datetime | None = None) -> ParkingAnalysisResult:
        """Pick a canned sign reading uniformly at random."""
        self._simulate_latency()
        now = now or datetime.now()

        entry = dict(self._rng.choice(MOCK_CATALOG))
        entry.update(isMockData=True, timestamp=now.isoformat(), model=MOCK_MODEL)
        return ParkingAnalysisResult.model_validate(entry)

    def respond(
        self,
        strategy: MockStrategy | str = MockStrategy.TIME,
        now: datetime | None = None,
    ) -> ParkingAnalysisResult:
        """Produce a result with the given strategy."""
        strategy = MockStrategy(strategy)
        logger.info(f"Using mock analysis ({strategy.value})")
        if strategy == MockStrategy.CATALOG:
            return self.get_catalog_response(now)
        return self.get_mock_response(now)
