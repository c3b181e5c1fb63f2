"""Provider request construction.

The builder is the only place wall-clock time enters a request. Callers
inject the timestamp, so tests can pin "now" to a fixed moment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from parksense.analysis.prompts import (
    PROMPT_VERSION,
    SYSTEM_PROMPT,
    TIMESTAMP_FORMAT,
    USER_PROMPT_TEMPLATE,
)
from parksense.interfaces.vision import CapturedImage, EncodedImage
from parksense.vision.codec import ImageCodec

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.1
DEFAULT_DETAIL = "high"


def format_timestamp(moment: datetime) -> str:
    """Render a timestamp as readable text, e.g. 'Monday, January 15, 2024 at 10:00 AM'."""
    hour = moment.hour % 12 or 12
    return TIMESTAMP_FORMAT.format(
        weekday=moment.strftime("%A"),
        month=moment.strftime("%B"),
        day=moment.day,
        year=moment.year,
        hour=hour,
        minute=moment.minute,
        meridiem="AM" if moment.hour < 12 else "PM",
    )


@dataclass(frozen=True)
class ProviderRequest:
    """A fully built analysis request for one image.

    Attributes:
        model: Provider model identifier.
        system_prompt: Output-contract instructions.
        user_text: Instruction text including the current time.
        image: Optimized image payload.
        detail: Image detail hint for the provider.
        max_tokens: Upper bound on generated tokens.
        temperature: Sampling temperature.
        prompt_version: Version of the prompt wording used.
    """

    model: str
    system_prompt: str
    user_text: str
    image: EncodedImage
    detail: str = DEFAULT_DETAIL
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    prompt_version: str = PROMPT_VERSION

    def to_chat_payload(self) -> dict[str, Any]:
        """Render as an OpenAI-compatible chat completion body."""
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": self.user_text},
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": self.image.to_data_uri(),
                                "detail": self.detail,
                            },
                        },
                    ],
                },
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def to_anthropic_payload(self) -> dict[str, Any]:
        """Render as an Anthropic messages body."""
        return {
            "model": self.model,
            "system": self.system_prompt,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": self.image.media_type,
                                "data": self.image.to_base64(),
                            },
                        },
                        {"type": "text", "text": self.user_text},
                    ],
                }
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }


class AnalysisRequestBuilder:
    """Build provider requests for parking sign images."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        codec: ImageCodec | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        detail: str = DEFAULT_DETAIL,
        system_prompt: str | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            model: Provider model identifier.
            codec: Image codec used to optimize raw frames.
            max_tokens: Upper bound on generated tokens.
            temperature: Sampling temperature. Kept low for repeatable readings.
            detail: Image detail hint.
            system_prompt: Override for the output-contract instructions.
        """
        self._model = model
        self._codec = codec or ImageCodec()
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._detail = detail
        self._system_prompt = system_prompt or SYSTEM_PROMPT

    @property
    def model(self) -> str:
        return self._model

    def build_request(
        self,
        image: EncodedImage | CapturedImage | Any,
        current_timestamp: datetime,
    ) -> ProviderRequest:
        """Build a request for one image at a given moment.

        Args:
            image: Already-encoded payload, captured frame, PIL image or bytes.
                Anything not already encoded is run through the codec.
            current_timestamp: The moment the model should treat as "now".

        Returns:
            ProviderRequest ready for the transport.
        """
        encoded = image if isinstance(image, EncodedImage) else self._codec.optimize(image)
        user_text = USER_PROMPT_TEMPLATE.format(current_time=format_timestamp(current_timestamp))

        logger.debug(
            f"Built request: model={self._model}, image={encoded.width}x{encoded.height}, "
            f"now={current_timestamp.isoformat()}"
        )
        return ProviderRequest(
            model=self._model,
            system_prompt=self._system_prompt,
            user_text=user_text,
            image=encoded,
            detail=self._detail,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
