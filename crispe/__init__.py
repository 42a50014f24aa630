"""
CRISPE Prompt Optimizer

Turns the six CRISPE fields (Context, Role, Instruction, Specifics, Process,
Example) into an optimized prompt by asking a completion provider to rewrite
them, optionally returning a Chinese and an English variant.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
