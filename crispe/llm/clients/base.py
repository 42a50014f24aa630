"""Completion provider interface.

Every backend, remote or local, satisfies the same contract: given ordered
chat messages, return one completion text. Request and response follow the
OpenAI chat-completion shape:

    {"messages": [{"role", "content"}], "temperature", "max_tokens", "stream": false}
    -> choices[0].message.content
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

from crispe.core.schema.messages import CompletionMessage

ProgressCallback = Callable[[str], None]


class CompletionProvider(ABC):
    """Backend that turns ordered chat messages into one completion text."""

    def ensure_initialized(
        self, on_progress: Optional[ProgressCallback] = None
    ) -> "CompletionProvider":
        """Return a provider ready to serve ``complete`` calls.

        Remote backends are ready as soon as they are constructed. Backends
        that must load resources first override this and report progress
        through ``on_progress``.
        """
        return self

    @abstractmethod
    def complete(
        self,
        messages: Sequence[CompletionMessage],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Send messages to the backend and return the completion text."""


def build_request_body(
    messages: Sequence[CompletionMessage],
    temperature: float,
    max_tokens: int,
) -> Dict[str, Any]:
    """Build the non-streaming chat-completion request body."""
    return {
        "messages": serialize_messages(messages),
        "temperature": temperature,
        "max_tokens": max_tokens,
        "stream": False,
    }


def serialize_messages(messages: Sequence[CompletionMessage]) -> List[Dict[str, str]]:
    return [message.to_dict() for message in messages]


def extract_content(payload: Dict[str, Any]) -> str:
    """Read ``choices[0].message.content`` from a chat-completion response.

    Raises:
        KeyError: If the response has no choices or no message
    """
    choices = payload.get("choices") or []
    if not choices:
        raise KeyError("Response missing 'choices' field")
    message = choices[0].get("message")
    if message is None:
        raise KeyError("Response choice missing 'message' field")
    return message.get("content") or ""
