"""Tests for the vision provider transport.

Network calls are mocked: either ``_call_vision_api`` is patched, or the SDK
client class is replaced so the request payload can be inspected.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from parksense.analysis.errors import ConfigurationError, CredentialError, ProviderError
from parksense.analysis.provider import VisionProvider, extract_chat_content
from parksense.analysis.request import ProviderRequest
from parksense.interfaces.vision import EncodedImage


def make_request() -> ProviderRequest:
    return ProviderRequest(
        model="gpt-4o",
        system_prompt="system",
        user_text="user",
        image=EncodedImage(data=b"abc", width=1, height=1),
    )


def chat_response(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def openai_status_error(cls: type, status: int) -> Exception:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return cls("error", response=response, body=None)


class TestVisionProviderInit:
    """Tests for construction-time checks."""

    def test_rejects_unknown_provider(self) -> None:
        with pytest.raises(ConfigurationError):
            VisionProvider(api_key="key", provider="acme")

    def test_rejects_empty_key(self) -> None:
        with pytest.raises(ConfigurationError):
            VisionProvider(api_key="", provider="openai")


class TestVisionProviderRetries:
    """Tests for retry and error mapping in complete()."""

    def test_returns_content_on_success(self) -> None:
        provider = VisionProvider(api_key="key", sleep=MagicMock())

        with patch.object(provider, "_call_vision_api", return_value='{"canPark": true}'):
            assert provider.complete(make_request()) == '{"canPark": true}'

    def test_retries_provider_errors_with_backoff(self) -> None:
        sleep = MagicMock()
        provider = VisionProvider(api_key="key", max_retries=3, retry_delay=1.0, sleep=sleep)

        with patch.object(
            provider,
            "_call_vision_api",
            side_effect=[ProviderError("boom"), ProviderError("boom"), "ok"],
        ) as mock_api:
            assert provider.complete(make_request()) == "ok"

        assert mock_api.call_count == 3
        assert [call.args[0] for call in sleep.call_args_list] == [1.0, 2.0]

    def test_raises_after_exhausting_retries(self) -> None:
        provider = VisionProvider(api_key="key", max_retries=2, sleep=MagicMock())

        with patch.object(provider, "_call_vision_api", side_effect=ProviderError("down")):
            with pytest.raises(ProviderError, match="Failed after 2 attempts"):
                provider.complete(make_request())

    def test_credential_errors_are_not_retried(self) -> None:
        provider = VisionProvider(api_key="key", max_retries=3, sleep=MagicMock())

        with patch.object(
            provider, "_call_vision_api", side_effect=CredentialError("bad key")
        ) as mock_api:
            with pytest.raises(CredentialError):
                provider.complete(make_request())

        assert mock_api.call_count == 1


class TestOpenAITransport:
    """Tests for the OpenAI SDK call."""

    def test_sends_chat_payload_with_bearer_key(self) -> None:
        provider = VisionProvider(api_key="sk-test", sleep=MagicMock())

        with patch("openai.OpenAI") as client_cls:
            client = client_cls.return_value
            client.chat.completions.create.return_value = chat_response("{}")
            content = provider.complete(make_request())

        assert content == "{}"
        assert client_cls.call_args.kwargs["api_key"] == "sk-test"
        sent = client.chat.completions.create.call_args.kwargs
        assert sent == make_request().to_chat_payload()

    def test_authentication_error_becomes_credential_error(self) -> None:
        provider = VisionProvider(api_key="sk-bad", sleep=MagicMock())

        with patch("openai.OpenAI") as client_cls:
            client_cls.return_value.chat.completions.create.side_effect = openai_status_error(
                openai.AuthenticationError, 401
            )
            with pytest.raises(CredentialError):
                provider.complete(make_request())

    def test_server_error_becomes_provider_error(self) -> None:
        provider = VisionProvider(api_key="sk-test", max_retries=1, sleep=MagicMock())

        with patch("openai.OpenAI") as client_cls:
            client_cls.return_value.chat.completions.create.side_effect = openai_status_error(
                openai.InternalServerError, 500
            )
            with pytest.raises(ProviderError):
                provider.complete(make_request())

    def test_empty_content_is_provider_error(self) -> None:
        provider = VisionProvider(api_key="sk-test", max_retries=1, sleep=MagicMock())

        with patch("openai.OpenAI") as client_cls:
            client_cls.return_value.chat.completions.create.return_value = chat_response(None)
            with pytest.raises(ProviderError):
                provider.complete(make_request())


class TestAnthropicTransport:
    """Tests for the Anthropic SDK call."""

    def test_sends_messages_payload(self) -> None:
        provider = VisionProvider(api_key="sk-ant", provider="anthropic", sleep=MagicMock())

        with patch("anthropic.Anthropic") as client_cls:
            client = client_cls.return_value
            client.messages.create.return_value = SimpleNamespace(
                content=[SimpleNamespace(text='{"canPark": false}')]
            )
            content = provider.complete(make_request())

        assert content == '{"canPark": false}'
        sent = client.messages.create.call_args.kwargs
        assert sent["system"] == "system"
        assert sent == make_request().to_anthropic_payload()


class TestExtractChatContent:
    """Tests for envelope parsing."""

    def test_reads_dict_envelope(self) -> None:
        envelope = {"choices": [{"message": {"content": "hello"}}]}

        assert extract_chat_content(envelope) == "hello"

    def test_reads_sdk_object(self) -> None:
        assert extract_chat_content(chat_response("hello")) == "hello"

    @pytest.mark.parametrize(
        "envelope",
        [{}, {"choices": []}, {"choices": [{}]}, {"choices": [{"message": {"content": ""}}]}],
    )
    def test_malformed_envelope(self, envelope: dict) -> None:
        with pytest.raises(ProviderError):
            extract_chat_content(envelope)
