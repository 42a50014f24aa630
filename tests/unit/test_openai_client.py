"""Tests for the OpenAI-compatible client."""

from unittest.mock import MagicMock, patch

import httpx
import pytest
from openai import APIConnectionError, AuthenticationError, InternalServerError

from crispe.core.errors import ConfigurationError, TransportError
from crispe.core.schema.messages import CompletionMessage
from crispe.llm.clients.openai import DEFAULT_BASE_URL, DEFAULT_MODEL, OpenAIClient

MESSAGES = [
    CompletionMessage(role="system", content="system"),
    CompletionMessage(role="user", content="user"),
]

REQUEST = httpx.Request("POST", "https://api.siliconflow.cn/v1/chat/completions")


@pytest.fixture
def clean_env(tmp_path, monkeypatch):
    """Run without config.json and without key variables."""
    monkeypatch.chdir(tmp_path)
    for name in ("OPENAI_API_KEY", "SILICONFLOW_API_KEY", "OPENAI_MODEL", "OPENAI_BASE_URL"):
        monkeypatch.delenv(name, raising=False)


class TestOpenAIClientConfig:
    """Tests for credential and default resolution."""

    def test_missing_key_raises_configuration_error(self, clean_env):
        with patch('crispe.llm.clients.openai.OpenAI') as mock_openai_class:
            with pytest.raises(ConfigurationError, match="API Key missing"):
                OpenAIClient()

        mock_openai_class.assert_not_called()

    @patch('crispe.llm.clients.openai.OpenAI')
    def test_siliconflow_key_from_environment(self, mock_openai_class, clean_env, monkeypatch):
        monkeypatch.setenv("SILICONFLOW_API_KEY", "sk-silicon")

        client = OpenAIClient()

        assert client.api_key == "sk-silicon"
        assert client.model == DEFAULT_MODEL
        assert client.base_url == DEFAULT_BASE_URL
        kwargs = mock_openai_class.call_args.kwargs
        assert kwargs["max_retries"] == 0
        assert kwargs["base_url"] == DEFAULT_BASE_URL

    @patch('crispe.llm.clients.openai.OpenAI')
    def test_explicit_parameters_win(self, mock_openai_class, clean_env, monkeypatch):
        monkeypatch.setenv("SILICONFLOW_API_KEY", "sk-silicon")

        client = OpenAIClient(api_key="sk-explicit", model="gpt-4o", base_url="https://api.openai.com/v1")

        assert client.api_key == "sk-explicit"
        assert client.model == "gpt-4o"
        assert client.base_url == "https://api.openai.com/v1"


class TestOpenAIClientComplete:
    """Tests for completions and error mapping."""

    @patch('crispe.llm.clients.openai.OpenAI')
    def test_complete_request(self, mock_openai_class):
        mock_response = MagicMock()
        mock_response.choices[0].message.content = "optimized prompt"
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = mock_response
        mock_openai_class.return_value = mock_client

        client = OpenAIClient(api_key="sk-test-key", model="deepseek-ai/DeepSeek-V3")
        text = client.complete(MESSAGES, temperature=0.7, max_tokens=2048)

        assert text == "optimized prompt"
        mock_client.chat.completions.create.assert_called_once_with(
            model="deepseek-ai/DeepSeek-V3",
            messages=[m.to_dict() for m in MESSAGES],
            temperature=0.7,
            max_tokens=2048,
            stream=False,
        )

    @patch('crispe.llm.clients.openai.OpenAI')
    def test_authentication_error(self, mock_openai_class):
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = AuthenticationError(
            "Invalid API key",
            response=httpx.Response(401, request=REQUEST),
            body=None,
        )
        mock_openai_class.return_value = mock_client

        client = OpenAIClient(api_key="sk-bad")

        with pytest.raises(ConfigurationError, match="authentication failed"):
            client.complete(MESSAGES, 0.7, 2048)

    @patch('crispe.llm.clients.openai.OpenAI')
    def test_connection_error_is_not_retried(self, mock_openai_class):
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = APIConnectionError(request=REQUEST)
        mock_openai_class.return_value = mock_client

        client = OpenAIClient(api_key="sk-test-key")

        with pytest.raises(TransportError, match="Failed to connect"):
            client.complete(MESSAGES, 0.7, 2048)

        assert mock_client.chat.completions.create.call_count == 1

    @patch('crispe.llm.clients.openai.OpenAI')
    def test_status_error_keeps_status_code(self, mock_openai_class):
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = InternalServerError(
            "upstream exploded",
            response=httpx.Response(503, request=REQUEST),
            body=None,
        )
        mock_openai_class.return_value = mock_client

        client = OpenAIClient(api_key="sk-test-key")

        with pytest.raises(TransportError) as exc_info:
            client.complete(MESSAGES, 0.7, 2048)

        assert exc_info.value.status_code == 503
