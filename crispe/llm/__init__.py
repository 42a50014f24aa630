"""
LLM integration for CRISPE prompt optimization.

Provides the prompt builder, the completion adapter and the provider backends
it dispatches to.
"""

from crispe.llm.adapter import CompletionAdapter, split_response

__all__ = ["CompletionAdapter", "split_response"]
