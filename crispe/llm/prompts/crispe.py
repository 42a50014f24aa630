"""CRISPE prompt construction.

This module owns everything the provider is told:
- The expert persona and optimization rules
- The language-conditioned output format, including the split marker
- The rendering of the six CRISPE fields into the user message

All functions are pure: identical input always yields identical strings.
"""

import logging
from typing import Callable, List, Tuple, Union

from crispe.core.schema.crispe_input import CrispeInput, Language
from crispe.core.schema.messages import CompletionMessage

logger = logging.getLogger(__name__)

# Literal line separating the Chinese and English versions in "cn" mode
SPLIT_MARKER = "==========DIVIDER=========="

PLACEHOLDER = "N/A"

BASE_SYSTEM_INSTRUCTION = """
You are a Prompt Engineering Expert.
Your goal is to optimize user input into a professional prompt using the CRISPE framework (Context, Role, Instruction, Specifics, Process, Example).
Rules:
1. Role Hardening: Make the role expert-level.
2. Structure: Use Markdown headers.
3. Clarity: Start instructions with verbs.
"""

BILINGUAL_OUTPUT_INSTRUCTIONS = f"""
OUTPUT INSTRUCTIONS:
You must generate TWO versions.
1. Chinese Version.
2. The exact separator line: "{SPLIT_MARKER}"
3. English Version.
Do NOT wrap in markdown code blocks.
"""

ENGLISH_OUTPUT_INSTRUCTIONS = """
OUTPUT INSTRUCTIONS:
Generate only the English version.
Do NOT wrap in markdown code blocks.
"""

# Rendering order of the user message
CRISPE_FIELDS: Tuple[Tuple[str, Callable[[CrispeInput], str]], ...] = (
    ("Context", lambda data: data.context),
    ("Role", lambda data: data.role),
    ("Instruction", lambda data: data.instruction),
    ("Specifics", lambda data: data.specifics),
    ("Process", lambda data: data.process),
    ("Example", lambda data: data.example),
)


def build_system_instruction(language: Union[Language, str]) -> str:
    """Build the system instruction for the requested output language.

    Args:
        language: Target language; "cn" requests a Chinese and an English
            version separated by SPLIT_MARKER, "en" the English version only

    Returns:
        Base instruction followed by the output-format block
    """
    if Language.parse(language) is Language.CN:
        return BASE_SYSTEM_INSTRUCTION + BILINGUAL_OUTPUT_INSTRUCTIONS
    return BASE_SYSTEM_INSTRUCTION + ENGLISH_OUTPUT_INSTRUCTIONS


def format_field(label: str, value: str) -> str:
    """Render one field as ``"<Label>: <value>"``, blank values as N/A."""
    if not value or not value.strip():
        value = PLACEHOLDER
    return f"{label}: {value}"


def build_user_message(data: CrispeInput) -> str:
    """Render the six CRISPE fields, one per line, in fixed order.

    Does not require the instruction to be filled in; a completely empty
    input renders as six N/A lines.
    """
    return "\n".join(format_field(label, accessor(data)) for label, accessor in CRISPE_FIELDS)


def build_messages(
    data: CrispeInput,
    language: Union[Language, str],
) -> List[CompletionMessage]:
    """Build the ordered [system, user] message pair for a provider call.

    Args:
        data: CRISPE fields to optimize
        language: Target output language

    Returns:
        System message first, user message second
    """
    system_instruction = build_system_instruction(language)
    user_message = build_user_message(data)
    logger.debug(
        f"Built messages (system={len(system_instruction)} chars, user={len(user_message)} chars)"
    )
    return [
        CompletionMessage(role="system", content=system_instruction),
        CompletionMessage(role="user", content=user_message),
    ]
