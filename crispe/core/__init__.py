"""
Core components for the CRISPE optimizer.

This package contains the data model, error taxonomy, configuration lookup
and the single-flight generation session.
"""

__all__ = []
