"""Relay client - posts chat requests to the credential-injecting relay.

The relay (see crispe.relay) holds the provider API key server-side, so this
client needs no credentials of its own.
"""

import logging
from typing import Optional, Sequence

import httpx

from crispe.core.config import resolve_setting
from crispe.core.errors import MISSING_KEY_MESSAGE, ConfigurationError, TransportError
from crispe.core.schema.messages import CompletionMessage
from crispe.llm.clients.base import CompletionProvider, build_request_body, extract_content

logger = logging.getLogger(__name__)

DEFAULT_RELAY_URL = "http://localhost:8000/api/optimize"


class RelayClient(CompletionProvider):
    """HTTP client for the relay endpoint.

    Configuration priority: explicit parameter > config.json > RELAY_URL > default

    Example:
        >>> client = RelayClient("http://localhost:8000/api/optimize")
        >>> text = client.complete(messages, temperature=0.7, max_tokens=2048)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize relay client.

        Args:
            url: Relay endpoint URL (loads from config.json if None)
            timeout: Request timeout in seconds; None waits indefinitely
            transport: Optional httpx transport, mainly for tests
        """
        self.url = resolve_setting(url, ["relay", "url"], default=DEFAULT_RELAY_URL)
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def complete(
        self,
        messages: Sequence[CompletionMessage],
        temperature: float,
        max_tokens: int,
    ) -> str:
        body = build_request_body(messages, temperature, max_tokens)

        try:
            response = self._client.post(self.url, json=body)
        except httpx.HTTPError as e:
            logger.error(f"Relay request failed: Type: {type(e).__name__}, Message: {str(e)}")
            raise TransportError(
                "Failed to connect to the server.", details=str(e)
            ) from e

        if response.is_success:
            return extract_content(response.json())

        logger.error(f"Relay returned {response.status_code}: {response.text[:500]}")
        message = "Failed to connect to the server."
        try:
            error_data = response.json()
        except ValueError:
            error_data = {}
        if isinstance(error_data, dict) and error_data.get("error"):
            message = str(error_data["error"])
        if message == MISSING_KEY_MESSAGE:
            raise ConfigurationError(message, details=response.text)
        raise TransportError(message, status_code=response.status_code, details=response.text)
