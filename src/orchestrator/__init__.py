"""Completion orchestrator for the sequence assistant.

Given recent conversation turns and (optionally) the current workspace
text, the orchestrator:
1. Picks the system prompt (refine an existing sequence vs. build one)
2. Calls each configured provider in priority order
3. Returns the first successful reply, or raises AllProvidersFailedError

The orchestrator does NOT parse replies into steps; that is the
workspace layer's job.
"""
