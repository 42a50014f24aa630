"""Local inference engine backed by an Ollama server on this machine.

The engine needs a one-time model load before its first completion. The
LocalEngineHandle owns that step: it loads the model lazily on first use,
reports progress while doing so, and hands out the same ready engine on every
later call. Create one handle per process and pass it to every adapter that
should share the loaded model.
"""

import json
import logging
import threading
from typing import Any, Dict, Optional, Sequence

import httpx
from openai import APIError, OpenAI

from crispe.core.config import resolve_setting
from crispe.core.errors import InitializationError, TransportError
from crispe.core.schema.messages import CompletionMessage
from crispe.llm.clients.base import CompletionProvider, ProgressCallback, serialize_messages

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_URL = "http://localhost:11434"
# Qwen2.5 1.5B instruct, roughly 1GB, fast enough on consumer GPUs
DEFAULT_LOCAL_MODEL = "qwen2.5:1.5b-instruct"

INIT_FAILURE_MESSAGE = (
    "Failed to load the AI model. Is the local inference server running "
    "and is the model available?"
)


def format_pull_status(event: Dict[str, Any]) -> str:
    """Turn one model-pull status event into a progress line.

    Events carrying ``total`` and ``completed`` byte counts get a percentage.
    """
    status = str(event.get("status", ""))
    total = event.get("total")
    completed = event.get("completed")
    if total and completed is not None:
        percent = int(completed * 100 / total)
        return f"{status} {percent}%"
    return status


class OllamaEngine(CompletionProvider):
    """A model hosted by a local Ollama server.

    ``load`` pulls the model (a no-op download when it is already present);
    completions go through Ollama's OpenAI-compatible ``/v1`` endpoint.
    """

    def __init__(
        self,
        model: str,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        # One connection pool serves the model pull and the SDK
        self._http = httpx.Client(timeout=timeout, transport=transport)
        # Ollama ignores the key but the SDK requires one
        self._client = OpenAI(
            api_key="ollama",
            base_url=f"{self.base_url}/v1",
            max_retries=0,
            http_client=self._http,
        )

    def close(self) -> None:
        """Release the HTTP connection pool."""
        self._http.close()

    def load(self, on_progress: Optional[ProgressCallback] = None) -> None:
        """Pull the model, streaming status lines to ``on_progress``.

        Raises:
            InitializationError: If the server is unreachable or the pull fails
        """
        logger.info(f"Loading local model {self.model} from {self.base_url}")
        try:
            with self._http.stream(
                "POST", f"{self.base_url}/api/pull", json={"model": self.model, "stream": True}
            ) as response:
                if not response.is_success:
                    response.read()
                    logger.error(
                        f"Model pull returned {response.status_code}: {response.text[:500]}"
                    )
                    raise InitializationError(
                        INIT_FAILURE_MESSAGE, details=f"HTTP {response.status_code}: {response.text}"
                    )
                for line in response.iter_lines():
                    if not line.strip():
                        continue
                    event = json.loads(line)
                    if "error" in event:
                        logger.error(f"Model pull failed: {event['error']}")
                        raise InitializationError(INIT_FAILURE_MESSAGE, details=str(event["error"]))
                    if on_progress:
                        on_progress(format_pull_status(event))
        except httpx.HTTPError as e:
            logger.error(f"Local engine unreachable: Type: {type(e).__name__}, Message: {str(e)}")
            raise InitializationError(INIT_FAILURE_MESSAGE, details=str(e)) from e
        except json.JSONDecodeError as e:
            logger.error(f"Malformed model pull status: {str(e)}")
            raise InitializationError(INIT_FAILURE_MESSAGE, details=str(e)) from e

        logger.info(f"Local model {self.model} ready")

    def complete(
        self,
        messages: Sequence[CompletionMessage],
        temperature: float,
        max_tokens: int,
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=serialize_messages(messages),
                temperature=temperature,
                max_tokens=max_tokens,
                stream=False
            )
        except APIError as e:
            logger.error(f"Local engine error: Type: {type(e).__name__}, Message: {str(e)}")
            raise TransportError("Local engine request failed.", details=str(e)) from e

        if not response.choices:
            raise TransportError("Local engine returned no choices.")
        return response.choices[0].message.content or ""


class LocalEngineHandle(CompletionProvider):
    """Lazily initialized, shareable handle to the local engine.

    The first ``ensure_initialized`` call loads the model; later calls return
    the cached engine. Initialization is lock-guarded so concurrent first
    callers wait for a single load instead of racing to start their own. A
    failed load leaves the handle uninitialized, so the next call tries again.

    Example:
        >>> handle = LocalEngineHandle()
        >>> engine = handle.ensure_initialized(print)
        >>> text = engine.complete(messages, temperature=0.7, max_tokens=2048)
    """

    def __init__(
        self,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.model = resolve_setting(model, ["local", "model"], default=DEFAULT_LOCAL_MODEL)
        self.base_url = resolve_setting(base_url, ["local", "url"], default=DEFAULT_LOCAL_URL)
        self.timeout = timeout
        self._transport = transport
        self._engine: Optional[OllamaEngine] = None
        self._lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def ensure_initialized(
        self, on_progress: Optional[ProgressCallback] = None
    ) -> OllamaEngine:
        engine = self._engine
        if engine is not None:
            return engine

        with self._lock:
            if self._engine is None:
                if on_progress:
                    on_progress("Initializing local engine...")
                engine = OllamaEngine(
                    self.model, self.base_url, timeout=self.timeout, transport=self._transport
                )
                try:
                    engine.load(on_progress)
                except Exception:
                    engine.close()
                    raise
                self._engine = engine
            return self._engine

    def complete(
        self,
        messages: Sequence[CompletionMessage],
        temperature: float,
        max_tokens: int,
    ) -> str:
        return self.ensure_initialized().complete(messages, temperature, max_tokens)
