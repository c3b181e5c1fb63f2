"""Parking sign analysis service.

Wires the pipeline together: optimize the image, build the request, call the
provider and validate the output. Without a credential the mock oracle
answers instead.

Example:
    >>> from parksense.analysis.service import ParkingSignAnalyzer
    >>> from parksense.config.settings import ParkSenseSettings
    >>>
    >>> analyzer = ParkingSignAnalyzer(ParkSenseSettings(api_key=None))
    >>> result = analyzer.analyze(frame)
    >>> result.is_mock_data
    True
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from parksense.analysis.errors import ConfigurationError
from parksense.analysis.mock import MockOracle
from parksense.analysis.provider import VisionProvider
from parksense.analysis.request import AnalysisRequestBuilder
from parksense.analysis.validator import ResponseValidator
from parksense.config.settings import ParkSenseSettings
from parksense.models.analysis import ParkingAnalysisResult
from parksense.vision.codec import ImageCodec

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[ParkSenseSettings], VisionProvider]


def _default_provider_factory(settings: ParkSenseSettings) -> VisionProvider:
    return VisionProvider(
        api_key=settings.api_key or "",
        provider=settings.provider,
        max_retries=settings.max_retries,
        retry_delay=settings.retry_delay,
        timeout=settings.timeout,
        base_url=settings.base_url,
    )


class ParkingSignAnalyzer:
    """Analyze one parking sign image into a ``ParkingAnalysisResult``.

    The credential is read from ``settings`` on every call, so replacing the
    settings switches between mock and provider mode without rebuilding the
    analyzer.

    Raises from ``analyze``:
        ConfigurationError: No credential while mock mode is disabled, or the
            provider rejected the credential (``CredentialError``).
        ProviderError: Transport failure or malformed provider envelope.
    """

    def __init__(
        self,
        settings: ParkSenseSettings,
        oracle: MockOracle | None = None,
        provider_factory: ProviderFactory | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the analyzer.

        Args:
            settings: Resolved runtime settings including the credential.
            oracle: Mock oracle. Defaults to one using the configured delay.
            provider_factory: Builds the provider client from settings.
            clock: Source of "now" for requests and result timestamps.
        """
        self._settings = settings
        self._oracle = oracle or MockOracle(delay_seconds=settings.mock_delay_seconds)
        self._provider_factory = provider_factory or _default_provider_factory
        self._clock = clock

    @property
    def settings(self) -> ParkSenseSettings:
        return self._settings

    @settings.setter
    def settings(self, settings: ParkSenseSettings) -> None:
        self._settings = settings

    @property
    def mock_mode(self) -> bool:
        """True if the next analysis will be served by the mock oracle."""
        return not self._settings.has_credential

    def analyze(self, image: Any, now: datetime | None = None) -> ParkingAnalysisResult:
        """Analyze an image.

        Args:
            image: Captured frame, PIL image or encoded bytes.
            now: Moment to treat as "now". Defaults to the clock.

        Returns:
            Validated result, fallback result, or mock result.
        """
        settings = self._settings
        now = now or self._clock()

        if not settings.has_credential:
            if not settings.allow_mock:
                raise ConfigurationError(
                    f"No API key configured for provider '{settings.provider}'. "
                    "Set one to analyze real parking signs."
                )
            logger.info("No API key configured; serving mock analysis")
            result = self._oracle.respond(settings.mock_strategy, now)
            if not result.is_mock_data:
                result = result.model_copy(update={"is_mock_data": True})
            return result

        codec = ImageCodec(max_width=settings.max_width, quality=settings.quality)
        builder = AnalysisRequestBuilder(
            model=settings.model,
            codec=codec,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            detail=settings.detail,
        )
        request = builder.build_request(image, now)
        provider = self._provider_factory(settings)

        start = datetime.now()
        raw_output = provider.complete(request)
        elapsed_ms = (datetime.now() - start).total_seconds() * 1000

        outcome = ResponseValidator(model=settings.model).validate_outcome(raw_output, now=now)
        if outcome.ok:
            logger.info(
                f"Analysis complete in {elapsed_ms:.0f}ms: can_park={outcome.result.can_park}, "
                f"confidence={outcome.result.confidence:.2f}, prompt={request.prompt_version}"
            )
        else:
            logger.warning(
                f"Analysis degraded to fallback in {elapsed_ms:.0f}ms "
                f"(prompt={request.prompt_version}): {outcome.reason}"
            )
        return outcome.result
