import threading

import pytest
from conftest import PLAN_REPLY, FakeBackend

from src.chat.service import ChatService
from src.conversation.schemas import Role
from src.errors import AllProvidersFailedError, RequestInFlightError, ValidationError
from src.orchestrator.completion import CompletionOrchestrator
from src.workspace.schemas import Step, WorkspaceStatus


def test_plan_a_launch_end_to_end(service, store, sessions):
    result = service.submit_message("u1", "Plan a launch")

    assert result.user_turn.content == "Plan a launch"
    assert result.assistant_turn.content == PLAN_REPLY
    assert result.completion.provider == "primary"
    workspace = sessions.get("u1").workspace
    assert workspace.steps == [
        Step(id=1, content="Define the launch goal"),
        Step(id=2, content="Announce to the mailing list"),
    ]
    assert workspace.serialize() == PLAN_REPLY
    assert [t.role for t in store.list_by_user("u1")] == [Role.USER, Role.ASSISTANT]


@pytest.mark.parametrize("content", [None, "", "   \n"])
def test_blank_content_is_rejected_before_side_effects(service, store, primary, content):
    with pytest.raises(ValidationError):
        service.submit_message("u1", content)
    assert store.list_by_user("u1") == []
    assert primary.calls == []


def test_fresh_prompt_without_workspace(service, primary):
    service.submit_message("u1", "Plan a launch")
    system_prompt, _ = primary.calls[0]
    assert "Current sequence" not in system_prompt


def test_explicit_workspace_context_is_used(service, primary):
    service.submit_message("u1", "Make step 2 shorter", workspace_text="Step 1: A\nStep 2: B")
    system_prompt, _ = primary.calls[0]
    assert "Current sequence:\nStep 1: A\nStep 2: B" in system_prompt


def test_edited_workspace_feeds_next_turn(service, sessions, primary):
    service.submit_message("u1", "Plan a launch")
    workspace = sessions.get("u1").workspace
    workspace.begin_edit(2)
    workspace.commit_edit(2, "Post on social media")

    service.submit_message("u1", "Add a follow-up")
    system_prompt, turns = primary.calls[1]
    assert "Step 1: Define the launch goal\nStep 2: Post on social media" in system_prompt
    assert turns[-1].content == "Add a follow-up"


def test_history_is_limited_to_recent_turns(store, sessions, primary):
    service = ChatService(store, CompletionOrchestrator([primary]), sessions, history_limit=3)
    for i in range(3):
        service.submit_message("u1", f"message {i}")
    _, turns = primary.calls[-1]
    assert len(turns) == 3
    assert turns[-1].content == "message 2"


def test_fallback_provider_reply_is_used(store, sessions):
    failing = FakeBackend("primary", fail=True)
    backup = FakeBackend("secondary", reply="Step 1: Backup plan")
    service = ChatService(store, CompletionOrchestrator([failing, backup]), sessions)
    result = service.submit_message("u1", "Plan a launch")
    assert result.assistant_turn.content == "Step 1: Backup plan"
    assert len(failing.calls) == 1


def test_total_failure_keeps_user_turn_and_workspace(store, sessions):
    service = ChatService(
        store,
        CompletionOrchestrator([FakeBackend("a", fail=True), FakeBackend("b", fail=True)]),
        sessions,
    )
    sessions.get("u1").workspace.load("Step 1: Keep me")

    with pytest.raises(AllProvidersFailedError):
        service.submit_message("u1", "Plan a launch")

    turns = store.list_by_user("u1")
    assert [(t.role, t.content) for t in turns] == [(Role.USER, "Plan a launch")]
    assert sessions.get("u1").workspace.steps == [Step(id=1, content="Keep me")]
    assert not sessions.get("u1").in_flight


def test_clarifying_question_wraps_as_single_step(store, sessions):
    backend = FakeBackend("a", reply="Who is the audience?")
    service = ChatService(store, CompletionOrchestrator([backend]), sessions)
    result = service.submit_message("u1", "Plan a launch")
    assert result.workspace.status == WorkspaceStatus.POPULATED
    assert result.workspace.steps == [Step(id=1, content="Who is the audience?")]


class _BlockingBackend(FakeBackend):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.entered = threading.Event()
        self.release = threading.Event()

    def complete(self, system_prompt, turns, *, label=""):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().complete(system_prompt, turns, label=label)


def test_second_request_while_in_flight_is_refused(store, sessions):
    backend = _BlockingBackend("slow", reply="Step 1: Done")
    service = ChatService(store, CompletionOrchestrator([backend]), sessions)

    worker = threading.Thread(target=service.submit_message, args=("u1", "first"))
    worker.start()
    assert backend.entered.wait(timeout=5)
    try:
        with pytest.raises(RequestInFlightError):
            service.submit_message("u1", "second")
        # Other users are unaffected
        assert sessions.get("u2").in_flight is False
    finally:
        backend.release.set()
        worker.join(timeout=5)

    assert [t.content for t in store.list_by_user("u1")] == ["first", "Step 1: Done"]


def test_abandoned_request_does_not_overwrite_workspace(store, sessions):
    backend = _BlockingBackend("slow", reply="Step 1: Late reply")
    service = ChatService(store, CompletionOrchestrator([backend]), sessions)
    results = []

    worker = threading.Thread(
        target=lambda: results.append(service.submit_message("u1", "first"))
    )
    worker.start()
    assert backend.entered.wait(timeout=5)
    sessions.reset("u1")
    backend.release.set()
    worker.join(timeout=5)

    assert results[0].workspace_updated is False
    assert sessions.get("u1").workspace.status == WorkspaceStatus.EMPTY
