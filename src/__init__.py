"""Sequence Assistant - conversation to editable step sequences.

This service turns chat into a numbered, editable sequence of steps:
- Provider adapters with ordered fallback
- Sequence parsing and per-session workspace state
- {{key}} variable substitution for display
"""

__version__ = "0.1.0"
