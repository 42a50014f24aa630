"""Prompt builders for the completion adapter.

This package contains the prompt engineering logic: the fixed system
instruction, the language-specific output rules and the rendering of the
CRISPE fields into the user message.
"""
