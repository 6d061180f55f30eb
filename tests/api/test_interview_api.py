from fastapi.testclient import TestClient

from brifify.api.main import create_app
from tests.support.reasoning import FakeReasoningService, brief_call, pending
from tests.support.services import make_container


def _advance(client, **body):
    return client.post("/api/v1/interview/advance", json=body)


def test_first_answer_returns_question_and_thread(client, reasoning):
    reasoning.script_turn("Who is the app for?")

    response = _advance(client, userId="fp_abc", answer="A dog walking app", history=[])

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "question"
    assert body["next_question"] == "Who is the app for?"
    assert body["thread_id"] == "conv_1"
    assert [turn["role"] for turn in body["history"]] == ["assistant", "user", "assistant"]


def test_done_reply_returns_brief_and_charges(client, reasoning):
    reasoning.script_turn("Who is the app for?")
    first = _advance(client, userId="fp_abc", answer="A dog walking app").json()

    reasoning.script_turn("done")
    reasoning.tool_calls.append(brief_call())
    response = _advance(
        client,
        userId="fp_abc",
        answer="Busy owners",
        history=first["history"],
        threadId=first["thread_id"],
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "complete"
    assert body["outcome"]["brief"]["project_title"] == "Dog Walker Booking"
    assert body["outcome"]["remaining_tokens"] == 2
    assert body["outcome"]["charged"] is True
    assert "thread_id" not in body

    assert client.get("/api/v1/users/fp_abc/balance").json()["tokens"] == 2
    listed = client.get("/api/v1/users/fp_abc/briefs").json()
    assert [b["brief_id"] for b in listed] == [body["outcome"]["brief_id"]]


def test_zero_balance_is_429_without_reasoning_call():
    reasoning = FakeReasoningService()
    container, _, _ = make_container(reasoning, default_starting_tokens=0)

    with TestClient(create_app(container)) as client:
        response = _advance(client, userId="broke", answer="Hello")

    assert response.status_code == 429
    body = response.json()
    assert body["code"] == "ledger.insufficient_tokens"
    assert body["meta"] == {"balance": 0}
    assert reasoning.calls == []


def test_blank_answer_is_400(client):
    response = _advance(client, userId="fp_abc", answer="  ")

    assert response.status_code == 400
    assert response.json()["code"] == "request.invalid_input"


def test_history_with_consecutive_user_turns_is_400(client, reasoning):
    history = [
        {"role": "assistant", "content": "What is your project about?"},
        {"role": "user", "content": "An app"},
        {"role": "user", "content": "For dogs"},
    ]

    response = _advance(client, userId="fp_abc", answer="Hello", history=history)

    assert response.status_code == 400
    assert response.json()["code"] == "request.invalid_input"
    assert reasoning.calls == []


def test_run_timeout_is_500(client, reasoning):
    reasoning.replies.append([pending()])

    response = _advance(client, userId="fp_abc", answer="Hello")

    assert response.status_code == 500
    assert response.json()["code"] == "upstream.run_timeout"
