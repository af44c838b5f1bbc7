from conftest import PLAN_REPLY

HEADERS = {"X-User-Id": "user-1"}


def _send(client, content, **extra):
    return client.post("/v1/messages", json={"content": content, **extra}, headers=HEADERS)


def test_health_and_root(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").json()["endpoints"]["messages"] == "/v1/messages"


def test_requires_user_header(client):
    assert client.get("/v1/messages").status_code == 401
    assert client.get("/v1/workspace", headers={"X-User-Id": "  "}).status_code == 401


def test_submit_message_returns_both_turns_and_workspace(client):
    response = _send(client, "Plan a launch")
    assert response.status_code == 200
    body = response.json()
    assert body["user_message"]["role"] == "user"
    assert body["assistant_message"]["content"] == PLAN_REPLY
    assert body["provider"] == "primary"
    assert body["workspace"]["text"] == PLAN_REPLY
    assert [s["id"] for s in body["workspace"]["steps"]] == [1, 2]

    history = client.get("/v1/messages", headers=HEADERS).json()
    assert history["count"] == 2
    assert [m["role"] for m in history["messages"]] == ["user", "assistant"]


def test_blank_message_is_400(client):
    assert _send(client, "   ").status_code == 400
    assert client.post("/v1/messages", json={}, headers=HEADERS).status_code == 400
    assert client.get("/v1/messages", headers=HEADERS).json()["count"] == 0


def test_all_providers_failing_is_503_and_keeps_user_turn(client, primary, secondary):
    primary.fail = True
    secondary.fail = True
    response = _send(client, "Plan a launch")
    assert response.status_code == 503
    assert response.headers["Retry-After"] == "5"
    assert "try again" in response.json()["detail"]

    history = client.get("/v1/messages", headers=HEADERS).json()["messages"]
    assert [(m["role"], m["content"]) for m in history] == [("user", "Plan a launch")]


def test_context_workspace_reaches_provider(client, primary):
    _send(client, "Shorter please", context={"workspace": "Step 1: Long step"})
    system_prompt, _ = primary.calls[0]
    assert "Step 1: Long step" in system_prompt


def test_edit_flow(client):
    _send(client, "Plan a launch")

    assert client.post("/v1/workspace/steps/2/edit", headers=HEADERS).json()["editing_step_id"] == 2

    rejected = client.post(
        "/v1/workspace/steps/2/commit", json={"content": "  "}, headers=HEADERS
    ).json()
    assert rejected["committed"] is False
    assert rejected["workspace"]["editing_step_id"] == 2

    committed = client.post(
        "/v1/workspace/steps/2/commit", json={"content": "Tweet it"}, headers=HEADERS
    ).json()
    assert committed["committed"] is True
    assert committed["workspace"]["text"] == "Step 1: Define the launch goal\nStep 2: Tweet it"


def test_commit_without_edit_is_409_and_unknown_step_404(client):
    _send(client, "Plan a launch")
    assert client.post(
        "/v1/workspace/steps/1/commit", json={"content": "x"}, headers=HEADERS
    ).status_code == 409
    assert client.post("/v1/workspace/steps/9/edit", headers=HEADERS).status_code == 404


def test_cancel_edit(client):
    _send(client, "Plan a launch")
    client.post("/v1/workspace/steps/1/edit", headers=HEADERS)
    body = client.post("/v1/workspace/steps/1/cancel", headers=HEADERS).json()
    assert body["editing_step_id"] is None


def test_load_and_variables(client):
    loaded = client.put(
        "/v1/workspace", json={"text": "Step 3: Email {{audience}}"}, headers=HEADERS
    ).json()
    assert loaded["steps"] == [{"id": 1, "content": "Email {{audience}}"}]

    body = client.put(
        "/v1/workspace/variables/audience", json={"value": "beta users"}, headers=HEADERS
    ).json()
    assert body["rendered_steps"][0]["content"] == "Email beta users"
    assert body["steps"][0]["content"] == "Email {{audience}}"

    assert client.put(
        "/v1/workspace/variables/bad key", json={"value": "x"}, headers=HEADERS
    ).status_code == 400
    assert client.delete("/v1/workspace/variables/audience", headers=HEADERS).status_code == 200
    assert client.delete("/v1/workspace/variables/audience", headers=HEADERS).status_code == 404


def test_reset_clears_workspace(client):
    _send(client, "Plan a launch")
    body = client.delete("/v1/workspace", headers=HEADERS).json()
    assert body["status"] == "empty"
    assert body["steps"] == []


def test_sessions_are_isolated(client):
    _send(client, "Plan a launch")
    other = client.get("/v1/workspace", headers={"X-User-Id": "user-2"}).json()
    assert other["status"] == "empty"
