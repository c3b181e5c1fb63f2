"""Resolved runtime settings for the analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from parksense.config.loader import Config


@dataclass(frozen=True)
class ParkSenseSettings:
    """Settings passed explicitly into ``ParkingSignAnalyzer``.

    ``api_key`` is the only credential source the analyzer consults. When it
    is None the analyzer serves mock results (or refuses, if ``allow_mock``
    is False).
    """

    api_key: str | None = None
    provider: str = "openai"
    model: str = "gpt-4o"
    max_tokens: int = 500
    temperature: float = 0.1
    detail: str = "high"
    max_retries: int = 3
    retry_delay: float = 1.0
    timeout: float = 60.0
    base_url: str | None = None
    allow_mock: bool = True
    mock_strategy: str = "time"
    mock_delay_seconds: float = 1.5
    max_width: int = 1024
    quality: float = 0.8

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    def with_api_key(self, api_key: str | None) -> ParkSenseSettings:
        """Return a copy with a different credential."""
        return replace(self, api_key=api_key)

    @classmethod
    def from_config(cls, config: Config, api_key: str | None = None) -> ParkSenseSettings:
        """Build settings from a loaded configuration and a resolved credential."""
        return cls(
            api_key=api_key,
            provider=config.analysis.provider,
            model=config.analysis.model,
            max_tokens=config.analysis.max_tokens,
            temperature=config.analysis.temperature,
            detail=config.analysis.detail,
            max_retries=config.analysis.max_retries,
            retry_delay=config.analysis.retry_delay,
            timeout=config.analysis.timeout,
            base_url=config.analysis.base_url,
            allow_mock=config.analysis.allow_mock,
            mock_strategy=config.mock.strategy,
            mock_delay_seconds=config.mock.delay_seconds,
            max_width=config.image.max_width,
            quality=config.image.quality,
        )
