"""Vision provider transport.

Sends a ``ProviderRequest`` to a vision-capable chat model and returns the
generated text. Supports OpenAI chat completions and the Anthropic messages
API, with retry and exponential backoff for transient failures.

Example:
    >>> provider = VisionProvider(api_key="sk-...", provider="openai")
    >>> raw = provider.complete(request)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from parksense.analysis.errors import ConfigurationError, CredentialError, ProviderError

if TYPE_CHECKING:
    from parksense.analysis.request import ProviderRequest

logger = logging.getLogger(__name__)

VALID_PROVIDERS = {"anthropic", "openai"}

PROVIDER_MODEL_DEFAULTS: dict[str, str] = {
    "anthropic": "claude-3-5-sonnet-20241022",
    "openai": "gpt-4o",
}


class VisionProvider:
    """Client for a vision-capable chat completion endpoint.

    Authentication failures are raised as ``CredentialError`` immediately.
    Other API failures are retried up to ``max_retries`` times and then
    raised as ``ProviderError``.
    """

    def __init__(
        self,
        api_key: str,
        provider: str = "openai",
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 60.0,
        base_url: str | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the provider client.

        Args:
            api_key: Provider credential.
            provider: "openai" or "anthropic".
            max_retries: Maximum attempts on transient failure.
            retry_delay: Initial delay between retries (exponential backoff).
            timeout: Per-request timeout in seconds.
            base_url: Optional endpoint override for OpenAI-compatible servers.
            sleep: Sleep function, replaceable in tests.

        Raises:
            ConfigurationError: If provider is not supported or the key is empty.
        """
        if provider not in VALID_PROVIDERS:
            raise ConfigurationError(
                f"Invalid provider: {provider}. Must be one of {sorted(VALID_PROVIDERS)}"
            )
        if not api_key:
            raise ConfigurationError(f"No API key configured for provider '{provider}'")

        self._api_key = api_key
        self._provider = provider
        self._max_retries = max(1, max_retries)
        self._retry_delay = retry_delay
        self._timeout = timeout
        self._base_url = base_url
        self._sleep = sleep

        logger.debug(f"VisionProvider initialized: provider={provider}, max_retries={max_retries}")

    @property
    def provider(self) -> str:
        return self._provider

    def complete(self, request: ProviderRequest) -> str:
        """Send a request and return the generated text.

        Args:
            request: Built analysis request.

        Returns:
            Raw text content produced by the model.

        Raises:
            CredentialError: If the provider rejects the credential.
            ConfigurationError: If the provider SDK is unavailable.
            ProviderError: If the call still fails after retries.
        """
        last_error: ProviderError | None = None
        for attempt in range(self._max_retries):
            try:
                return self._call_vision_api(request)
            except ProviderError as e:
                last_error = e
                if attempt < self._max_retries - 1:
                    delay = self._retry_delay * (2 ** attempt)
                    logger.warning(
                        f"Provider call failed (attempt {attempt + 1}/{self._max_retries}): {e}. "
                        f"Retrying in {delay:.1f}s"
                    )
                    self._sleep(delay)

        raise ProviderError(f"Failed after {self._max_retries} attempts: {last_error}")

    def _call_vision_api(self, request: ProviderRequest) -> str:
        """Dispatch to the configured provider.

        Kept separate so tests can patch the network call.
        """
        if self._provider == "anthropic":
            return self._call_anthropic(request)
        return self._call_openai(request)

    def _call_openai(self, request: ProviderRequest) -> str:
        try:
            import openai
        except ImportError as e:
            raise ConfigurationError(
                "openai package not installed. Install with: pip install openai"
            ) from e

        try:
            client = openai.OpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,
            )
            response = client.chat.completions.create(**request.to_chat_payload())
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise CredentialError(f"OpenAI rejected the API key: {e}") from e
        except openai.APIError as e:
            raise ProviderError(f"OpenAI API error: {e}") from e

        return extract_chat_content(response)

    def _call_anthropic(self, request: ProviderRequest) -> str:
        try:
            import anthropic
        except ImportError as e:
            raise ConfigurationError(
                "anthropic package not installed. Install with: pip install anthropic"
            ) from e

        try:
            client = anthropic.Anthropic(
                api_key=self._api_key,
                timeout=self._timeout,
                max_retries=0,
            )
            message = client.messages.create(**request.to_anthropic_payload())
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            raise CredentialError(f"Anthropic rejected the API key: {e}") from e
        except anthropic.APIError as e:
            raise ProviderError(f"Anthropic API error: {e}") from e

        content = getattr(message, "content", None)
        if not content or not hasattr(content[0], "text"):
            raise ProviderError("Unexpected response format from Anthropic API")
        return str(content[0].text)


def extract_chat_content(response: Any) -> str:
    """Pull ``choices[0].message.content`` out of a chat completion.

    Accepts SDK response objects or plain decoded JSON dicts.

    Raises:
        ProviderError: If the envelope is malformed or the content is empty.
    """
    try:
        if isinstance(response, dict):
            content = response["choices"][0]["message"]["content"]
        else:
            content = response.choices[0].message.content
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise ProviderError(f"Malformed provider response: {e}") from e

    if not content:
        raise ProviderError("Provider returned empty response")
    return str(content)
