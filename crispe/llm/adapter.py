"""Completion adapter for CRISPE prompt optimization.

This module orchestrates one generation:
1. Building the system and user messages (prompts/crispe.py)
2. Calling a completion provider with fixed sampling settings (clients/)
3. Splitting the raw completion into language variants

Architecture:
- adapter.py (this file): Provider-agnostic orchestration and response split
- clients/: Backend wrappers (relay, OpenAI-compatible API, local engine)
- prompts/: What to tell the model
"""

import logging
from typing import Literal, Optional, Union

from crispe.core.errors import ConfigurationError, GenerationError, InitializationError
from crispe.core.schema.crispe_input import CrispeInput, Language
from crispe.core.schema.messages import GeneratedPrompts
from crispe.llm.clients.base import CompletionProvider, ProgressCallback
from crispe.llm.prompts.crispe import SPLIT_MARKER, build_messages

logger = logging.getLogger(__name__)

ProviderType = Literal["relay", "openai", "local"]

TEMPERATURE = 0.7
MAX_TOKENS = 2048

GENERATION_FAILURE_MESSAGE = "Failed to generate prompt. Please check your connection."


def split_response(text: Optional[str], language: Union[Language, str]) -> GeneratedPrompts:
    """Split a raw completion into language variants.

    In "en" mode the whole trimmed text is the English prompt. In "cn" mode
    the text is split on the first SPLIT_MARKER: the part before it is the
    Chinese prompt, the part after it the English one. A missing marker is
    not an error; the whole text becomes the Chinese prompt and English stays
    empty.

    Args:
        text: Raw completion text (None is treated as empty)
        language: Language the prompt was built for

    Returns:
        GeneratedPrompts with trimmed variants
    """
    text = text or ""

    if Language.parse(language) is Language.EN:
        return GeneratedPrompts(en=text.strip(), cn="")

    head, marker, tail = text.partition(SPLIT_MARKER)
    if not marker:
        logger.warning("Split marker not found in response, returning whole text as cn")
    return GeneratedPrompts(
        cn=head.strip() or text.strip(),
        en=tail.strip(),
    )


class CompletionAdapter:
    """Provider-agnostic adapter from CRISPE input to generated prompts.

    This class orchestrates a generation:
    1. Builds messages with the CRISPE prompt builder
    2. Makes sure the provider is initialized (local engine model load)
    3. Calls the provider with temperature 0.7 and at most 2048 tokens
    4. Splits the completion into GeneratedPrompts

    Example:
        >>> from crispe.llm.adapter import CompletionAdapter
        >>>
        >>> adapter = CompletionAdapter(provider_type="relay", url="http://localhost:8000/api/optimize")
        >>> prompts = adapter.generate(CrispeInput(instruction="Write a haiku"), "cn")
        >>> prompts.cn, prompts.en

    Pass ``provider`` to share a handle between adapters (e.g. one
    LocalEngineHandle per process) or to substitute a fake in tests.
    """

    def __init__(
        self,
        provider: Optional[CompletionProvider] = None,
        provider_type: ProviderType = "relay",
        **provider_config
    ):
        """Initialize adapter with a provider.

        Args:
            provider: Ready-made provider handle; takes precedence over provider_type
            provider_type: Which backend to create ("relay", "openai", "local")
            **provider_config: Configuration for the created backend (url, api_key, model, ...)

        Raises:
            ValueError: If provider_type is unknown
            ConfigurationError: If the backend is missing required credentials
        """
        if provider is not None:
            self.provider_type = type(provider).__name__
            self.provider = provider
        else:
            self.provider_type = provider_type
            self.provider = self._create_provider(provider_type, provider_config)

        logger.info(f"Initialized CompletionAdapter with {self.provider_type} provider")

    def _create_provider(self, provider_type: str, config: dict) -> CompletionProvider:
        """Factory for creating backend providers.

        Args:
            provider_type: Backend identifier
            config: Provider configuration

        Returns:
            Provider instance

        Raises:
            ValueError: If provider_type is unknown
        """
        if provider_type == "relay":
            from crispe.llm.clients.relay import RelayClient
            return RelayClient(**config)
        elif provider_type == "openai":
            from crispe.llm.clients.openai import OpenAIClient
            return OpenAIClient(**config)
        elif provider_type == "local":
            from crispe.llm.clients.local import LocalEngineHandle
            return LocalEngineHandle(**config)
        else:
            raise ValueError(f"Unknown provider type: {provider_type}. Supported: relay, openai, local")

    def generate(
        self,
        data: CrispeInput,
        language: Union[Language, str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> GeneratedPrompts:
        """Generate optimized prompts for the given CRISPE input.

        Args:
            data: CRISPE fields to optimize
            language: Target language ("en" or "cn")
            on_progress: Optional sink for human-readable status lines

        Returns:
            GeneratedPrompts for the requested language

        Raises:
            ConfigurationError: If the provider credential is missing or rejected
            InitializationError: If the local engine failed to load
            GenerationError: For any other provider or transport failure
        """
        language = Language.parse(language)
        logger.info(f"Generating optimized prompt for language={language.value}")

        messages = build_messages(data, language)

        try:
            provider = self.provider.ensure_initialized(on_progress)

            if on_progress:
                on_progress("Sending request to AI...")

            text = provider.complete(messages, temperature=TEMPERATURE, max_tokens=MAX_TOKENS)
        except (ConfigurationError, InitializationError):
            raise
        except Exception as e:
            logger.error(f"Generation failed: {type(e).__name__}: {e}")
            raise GenerationError(GENERATION_FAILURE_MESSAGE, details=str(e)) from e

        logger.debug(f"Received completion ({len(text or '')} chars): {(text or '')[:500]}")

        result = split_response(text, language)
        logger.info(
            f"Generated prompts (en={len(result.en)} chars, cn={len(result.cn)} chars)"
        )
        return result
