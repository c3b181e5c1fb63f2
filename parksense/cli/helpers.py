"""Helpers for the ParkSense CLI: logging, credential resolution, output."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from parksense.analysis.provider import PROVIDER_MODEL_DEFAULTS
from parksense.cli.options import LogFormat
from parksense.config.secrets import PROVIDER_ENV_KEYS, read_provider_api_key
from parksense.config.settings import ParkSenseSettings

if TYPE_CHECKING:
    from parksense.config.loader import Config
    from parksense.models.analysis import ParkingAnalysisResult

logger = logging.getLogger(__name__)


class _JSONLogFormatter(logging.Formatter):
    """Compact JSON formatter for machine-readable logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=True)


def _configure_logging(
    level: str = "INFO",
    log_format: str = LogFormat.READABLE.value,
) -> None:
    """Configure process-wide logging."""
    normalized_level = level.upper()
    resolved_level = getattr(logging, normalized_level, logging.INFO)
    root = logging.getLogger()
    root.handlers = [h for h in root.handlers if not getattr(h, "_parksense_handler", False)]

    handler = logging.StreamHandler()
    handler._parksense_handler = True  # type: ignore[attr-defined]
    if log_format == LogFormat.JSON.value:
        formatter: logging.Formatter = _JSONLogFormatter(datefmt="%Y-%m-%dT%H:%M:%S")
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(resolved_level)

    # Third-party HTTP transport logs are noisy at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)


def _model_matches_provider(provider: str, model: str) -> bool:
    """Validate basic provider/model compatibility."""
    lowered = model.strip().lower()
    if provider == "anthropic":
        return "claude" in lowered
    if provider == "openai":
        return any(token in lowered for token in ("gpt", "o1", "o3", "o4"))
    return False


def _normalize_model(provider: str, configured_model: str | None) -> str:
    """Normalize model so provider/model pairs are valid by default."""
    fallback = PROVIDER_MODEL_DEFAULTS[provider]
    if configured_model is None:
        return fallback

    if _model_matches_provider(provider, configured_model):
        return configured_model

    logger.warning(
        "Configured model '%s' does not look compatible with provider '%s'; using '%s' instead.",
        configured_model,
        provider,
        fallback,
    )
    return fallback


def _resolve_settings(
    config: Config,
    *,
    provider: str | None = None,
    model: str | None = None,
    force_mock: bool = False,
) -> ParkSenseSettings:
    """Resolve provider, model and credential into analyzer settings.

    Falls back to the other provider when only its key is set. Without any
    key the settings carry no credential and the analyzer serves mock data.
    """
    base = ParkSenseSettings.from_config(config)
    primary = (provider or base.provider).strip().lower()
    if primary not in PROVIDER_ENV_KEYS:
        raise ValueError(f"Unsupported provider: {primary}")
    configured_model = model or base.model

    if force_mock:
        logger.info("Mock mode requested; ignoring any configured API key.")
        return replace(base, provider=primary, api_key=None)

    primary_key = read_provider_api_key(primary)
    if primary_key:
        return replace(
            base,
            provider=primary,
            model=_normalize_model(primary, configured_model),
            api_key=primary_key,
        )

    fallback_provider = "openai" if primary == "anthropic" else "anthropic"
    fallback_key = read_provider_api_key(fallback_provider)
    if fallback_key:
        logger.warning(
            "Configured provider '%s' is missing %s; falling back to '%s'.",
            primary,
            PROVIDER_ENV_KEYS[primary],
            fallback_provider,
        )
        return replace(
            base,
            provider=fallback_provider,
            model=_normalize_model(fallback_provider, configured_model),
            api_key=fallback_key,
        )

    logger.warning(
        "No API key found (%s or %s). Results will be mock data.",
        PROVIDER_ENV_KEYS["openai"],
        PROVIDER_ENV_KEYS["anthropic"],
    )
    return replace(base, provider=primary, api_key=None)


def _yes_no(value: bool | None) -> str:
    if value is None:
        return "Unknown"
    return "Yes" if value else "No"


def format_result(result: ParkingAnalysisResult) -> str:
    """Render a result as a short plain-text report."""
    if result.can_park is None:
        headline = "Unable to determine parking rules"
    elif result.can_park:
        headline = "You can park here"
    else:
        headline = "No parking allowed"

    lines = []
    if result.is_mock_data:
        lines.append("[Demo result] Mock data. Add a provider API key for real analysis.")
    lines.append(headline)
    if result.time_limit:
        lines.append(f"  Time limit:        {result.time_limit}")
    lines.append(f"  Payment required:  {_yes_no(result.payment_required)}")
    if result.days:
        lines.append(f"  Active days:       {', '.join(result.days)}")
    if result.hours:
        lines.append(f"  Active hours:      {result.hours}")
    if result.vehicle_types:
        lines.append(f"  Vehicle types:     {', '.join(result.vehicle_types)}")
    for condition in result.special_conditions:
        lines.append(f"  Note:              {condition}")
    lines.append(f"  Sign text:         {result.raw_text}")
    lines.append(
        f"  Confidence:        {result.confidence:.0%} ({result.confidence_level.label})"
    )
    if result.error:
        lines.append(f"  Error:             {result.error}")
    return "\n".join(lines)


def _render(result: ParkingAnalysisResult, as_json: bool) -> str:
    if as_json:
        return json.dumps(result.to_display_dict(), indent=2)
    return format_result(result)
