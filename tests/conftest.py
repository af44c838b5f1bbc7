import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_chat_service, get_sessions
from src.api.main import app
from src.chat.service import ChatService
from src.conversation.store import InMemoryConversationStore
from src.errors import ProviderError
from src.llm.backends import LLMCallResult
from src.orchestrator.completion import CompletionOrchestrator
from src.workspace.sessions import SessionRegistry


class FakeBackend:
    """Scripted provider: returns `reply` or raises ProviderError when `fail` is set."""

    def __init__(self, name, reply="", fail=False, model_id="fake-model"):
        self._name = name
        self._model_id = model_id
        self.reply = reply
        self.fail = fail
        self.calls = []

    @property
    def provider(self):
        return self._name

    @property
    def model_id(self):
        return self._model_id

    def complete(self, system_prompt, turns, *, label=""):
        self.calls.append((system_prompt, list(turns)))
        if self.fail:
            raise ProviderError(self._name, self._model_id, ConnectionError("unreachable"))
        return LLMCallResult(
            content=self.reply,
            provider=self._name,
            model_id=self._model_id,
            input_tokens=10,
            output_tokens=20,
            duration_ms=1,
        )


PLAN_REPLY = "Step 1: Define the launch goal\nStep 2: Announce to the mailing list"


@pytest.fixture
def store():
    return InMemoryConversationStore()


@pytest.fixture
def sessions():
    return SessionRegistry()


@pytest.fixture
def primary():
    return FakeBackend("primary", reply=PLAN_REPLY)


@pytest.fixture
def secondary():
    return FakeBackend("secondary", reply="Step 1: Backup plan")


@pytest.fixture
def service(store, sessions, primary, secondary):
    orchestrator = CompletionOrchestrator([primary, secondary])
    return ChatService(store=store, orchestrator=orchestrator, sessions=sessions)


@pytest.fixture
def client(service, sessions):
    app.dependency_overrides[get_chat_service] = lambda: service
    app.dependency_overrides[get_sessions] = lambda: sessions
    yield TestClient(app)
    app.dependency_overrides.clear()
