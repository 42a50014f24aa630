"""OpenAI-compatible client - Pure API wrapper.

Talks to any endpoint that speaks the OpenAI chat-completion protocol
(SiliconFlow by default). It knows nothing about CRISPE or prompt splitting.
"""

import logging
from typing import Optional, Sequence

from openai import APIConnectionError, APIError, APIStatusError, AuthenticationError
from openai import OpenAI

from crispe.core.config import resolve_setting
from crispe.core.errors import MISSING_KEY_MESSAGE, ConfigurationError, TransportError
from crispe.core.schema.messages import CompletionMessage
from crispe.llm.clients.base import CompletionProvider, serialize_messages

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.siliconflow.cn/v1"
DEFAULT_MODEL = "deepseek-ai/DeepSeek-V3"


class OpenAIClient(CompletionProvider):
    """Pure OpenAI-compatible API wrapper - no domain logic.

    Configuration priority: explicit parameter > config.json > environment >
    ConfigurationError. The key is looked up under ``openai.api_key`` first,
    then ``siliconflow.api_key``, in config.json before the environment.

    Example:
        >>> client = OpenAIClient(api_key="sk-...")
        >>> text = client.complete(messages, temperature=0.7, max_tokens=2048)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 120.0
    ):
        """Initialize OpenAI-compatible client.

        Args:
            api_key: API key (loads from config.json / environment if None)
            model: Model to use (default: "deepseek-ai/DeepSeek-V3")
            base_url: API base URL (default: SiliconFlow)
            timeout: Request timeout in seconds (default: 120.0)

        Raises:
            ConfigurationError: If no API key can be found
        """
        self.api_key = resolve_setting(api_key, ["openai", "api_key"], ["siliconflow", "api_key"])
        self.model = resolve_setting(model, ["openai", "model"], default=DEFAULT_MODEL)
        self.base_url = resolve_setting(base_url, ["openai", "base_url"], default=DEFAULT_BASE_URL)
        self.timeout = timeout

        if not self.api_key:
            raise ConfigurationError(
                MISSING_KEY_MESSAGE,
                details="Set {'siliconflow': {'api_key': '...'}} in config.json or SILICONFLOW_API_KEY",
            )

        self._client = OpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0
        )

    def complete(
        self,
        messages: Sequence[CompletionMessage],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Send chat messages and return the completion text.

        Single attempt, no retries.

        Raises:
            ConfigurationError: If the API key is rejected
            TransportError: On connection failures and API errors
        """
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=serialize_messages(messages),
                temperature=temperature,
                max_tokens=max_tokens,
                stream=False
            )
        except AuthenticationError as e:
            logger.error(f"OpenAI authentication failed: Status: {e.status_code}, Message: {str(e)}")
            raise ConfigurationError(
                "API authentication failed. Check the configured API key.", details=str(e)
            ) from e
        except APIConnectionError as e:
            error_cause = str(e.__cause__) if e.__cause__ else "None"
            logger.error(
                f"OpenAI APIConnectionError: Type: {type(e).__name__}, "
                f"Message: {str(e)}, Cause: {error_cause}"
            )
            raise TransportError("Failed to connect to the provider.", details=str(e)) from e
        except APIStatusError as e:
            logger.error(
                f"OpenAI APIStatusError: Status: {e.status_code}, Message: {str(e)}"
            )
            raise TransportError(
                f"Provider returned HTTP {e.status_code}.",
                status_code=e.status_code,
                details=str(e),
            ) from e
        except APIError as e:
            logger.error(f"OpenAI APIError: Type: {type(e).__name__}, Message: {str(e)}")
            raise TransportError("Provider request failed.", details=str(e)) from e

        if not response.choices:
            raise TransportError("Provider returned no choices.")
        return response.choices[0].message.content or ""
