"""Completion provider implementations.

Contains the provider interface and its backends: the HTTP relay, any
OpenAI-compatible API, and a locally hosted inference engine.
"""

from crispe.llm.clients.base import CompletionProvider, ProgressCallback

__all__ = ["CompletionProvider", "ProgressCallback"]
