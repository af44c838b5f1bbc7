"""Workspace state manager.

Owns the canonical step list for one session:
- load: full replace from raw assistant text (via the sequence parser)
- begin/commit/cancel edit: at most one step editable at a time
- serialize: canonical text fed back to the orchestrator as context

Ids stay a dense 1..k run across edits; only load changes the id set.

Completion responses are tagged with a monotonic request id. A load whose
id is not the latest issued belongs to a superseded request and is dropped.
"""

import logging
import threading
from typing import Optional

from src.errors import EditStateError, StepNotFoundError
from src.workspace.parser import LINE_BREAKS, parse_sequence, serialize_steps
from src.workspace.schemas import Step, WorkspaceSnapshot, WorkspaceStatus
from src.workspace.variables import VariableTable, resolve_variables

logger = logging.getLogger(__name__)


class WorkspaceState:
    """Editable step list for a single session."""

    def __init__(self, label: str = ""):
        self.label = label
        self._steps: list[Step] = []
        self._editing_step_id: Optional[int] = None
        self._text = ""
        self._latest_request_id = 0
        self._lock = threading.RLock()

    # --- read side ---

    @property
    def status(self) -> WorkspaceStatus:
        return WorkspaceStatus.POPULATED if self._steps else WorkspaceStatus.EMPTY

    @property
    def steps(self) -> list[Step]:
        with self._lock:
            return list(self._steps)

    @property
    def editing_step_id(self) -> Optional[int]:
        return self._editing_step_id

    @property
    def text(self) -> str:
        """Last serialized form, refreshed on every load and commit."""
        return self._text

    def is_editing(self, step_id: int) -> bool:
        return self._editing_step_id == step_id

    def serialize(self) -> str:
        with self._lock:
            return serialize_steps(self._steps)

    def snapshot(self, variables: Optional[VariableTable] = None) -> WorkspaceSnapshot:
        with self._lock:
            variables = variables or VariableTable()
            return WorkspaceSnapshot(
                status=self.status,
                steps=list(self._steps),
                editing_step_id=self._editing_step_id,
                text=self._text,
                variables=variables.items(),
                rendered_steps=[
                    Step(id=s.id, content=resolve_variables(s.content, variables))
                    for s in self._steps
                ],
            )

    # --- request tagging ---

    def issue_request_id(self) -> int:
        """Tag a new completion request; any earlier request becomes stale."""
        with self._lock:
            self._latest_request_id += 1
            return self._latest_request_id

    def invalidate_pending(self) -> None:
        """Drop whatever response is still in flight (session abandoned)."""
        with self._lock:
            self._latest_request_id += 1
            logger.info(f"[{self.label}] Pending requests invalidated")

    # --- transitions ---

    def load(self, raw_text: str, request_id: Optional[int] = None) -> bool:
        """Replace the whole step list. Returns False if the load was stale."""
        with self._lock:
            if request_id is not None and request_id != self._latest_request_id:
                logger.info(
                    f"[{self.label}] Dropping stale response for request {request_id} "
                    f"(latest is {self._latest_request_id})"
                )
                return False

            self._steps = parse_sequence(raw_text or "")
            self._editing_step_id = None
            self._text = serialize_steps(self._steps)
            logger.info(f"[{self.label}] Workspace loaded: {len(self._steps)} steps")
            return True

    def clear(self) -> None:
        with self._lock:
            self._steps = []
            self._editing_step_id = None
            self._text = ""

    def _index_of(self, step_id: int) -> int:
        for index, step in enumerate(self._steps):
            if step.id == step_id:
                return index
        raise StepNotFoundError(f"Step {step_id} not found")

    def begin_edit(self, step_id: int) -> Step:
        """Put one step into editing. Any other step being edited is cancelled."""
        with self._lock:
            index = self._index_of(step_id)
            if self._editing_step_id is not None and self._editing_step_id != step_id:
                logger.debug(
                    f"[{self.label}] Edit of step {self._editing_step_id} cancelled "
                    f"by edit of step {step_id}"
                )
            self._editing_step_id = step_id
            return self._steps[index]

    def commit_edit(self, step_id: int, new_content: str) -> bool:
        """Apply an edit in place.

        Blank content is rejected: nothing changes, the step stays in
        editing, and False is returned.
        """
        with self._lock:
            index = self._index_of(step_id)
            if self._editing_step_id != step_id:
                raise EditStateError(f"Step {step_id} is not being edited")

            content = LINE_BREAKS.sub(" ", (new_content or "").strip())
            if not content:
                logger.debug(f"[{self.label}] Rejected blank edit for step {step_id}")
                return False

            self._steps[index] = Step(id=step_id, content=content)
            self._editing_step_id = None
            self._text = serialize_steps(self._steps)
            logger.info(f"[{self.label}] Step {step_id} updated")
            return True

    def cancel_edit(self, step_id: int) -> None:
        with self._lock:
            self._index_of(step_id)
            if self._editing_step_id == step_id:
                self._editing_step_id = None
