"""
Schema definitions for CRISPE input, chat messages and generated prompts.

These dataclasses form the data model shared by the prompt builder, the
completion adapter and the front ends.
"""

from crispe.core.schema.crispe_input import CrispeInput, Language
from crispe.core.schema.messages import CompletionMessage, GeneratedPrompts

__all__ = [
    "CrispeInput",
    "Language",
    "CompletionMessage",
    "GeneratedPrompts",
]
