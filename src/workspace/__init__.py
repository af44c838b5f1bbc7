"""Workspace synchronization engine.

Parses assistant output into editable steps, applies user edits, resolves
{{key}} variables for display, and serializes the sequence back to text.
"""

from src.workspace.parser import has_step_markers, parse_sequence, serialize_steps
from src.workspace.schemas import Step, Variable, WorkspaceSnapshot, WorkspaceStatus
from src.workspace.sessions import ConversationSession, SessionRegistry
from src.workspace.state import WorkspaceState
from src.workspace.variables import VariableTable, resolve_variables

__all__ = [
    "Step",
    "Variable",
    "WorkspaceSnapshot",
    "WorkspaceStatus",
    "parse_sequence",
    "serialize_steps",
    "has_step_markers",
    "VariableTable",
    "resolve_variables",
    "WorkspaceState",
    "ConversationSession",
    "SessionRegistry",
]
