from tests.support.reasoning import brief_call

QUESTIONNAIRE = [{"question": "What is your project about?", "answer": "Dog walking"}]


def _generate(client, reasoning, user_id="fp_abc"):
    reasoning.tool_calls.append(brief_call())
    return client.post(
        "/api/v1/briefs/generate",
        json={"userId": user_id, "questionnaire": QUESTIONNAIRE},
    )


def test_generate_charges_and_persists(client, reasoning):
    client.post("/api/v1/users/resolve", json={"userId": "fp_abc"})

    response = _generate(client, reasoning)

    assert response.status_code == 200
    body = response.json()
    assert body["remaining_tokens"] == 2
    assert body["saved"] is True

    fetched = client.get(f"/api/v1/users/fp_abc/briefs/{body['brief_id']}")
    assert fetched.status_code == 200
    assert fetched.json()["brief"]["project_title"] == "Dog Walker Booking"


def test_generate_for_unknown_user_is_404(client, reasoning):
    response = client.post(
        "/api/v1/briefs/generate",
        json={"userId": "ghost", "questionnaire": QUESTIONNAIRE},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "ledger.user_not_found"
    assert reasoning.calls == []


def test_generate_with_empty_questionnaire_is_400(client):
    client.post("/api/v1/users/resolve", json={"userId": "fp_abc"})

    response = client.post("/api/v1/briefs/generate", json={"userId": "fp_abc", "questionnaire": []})

    assert response.status_code == 400


def test_malformed_tool_output_is_500_and_not_charged(client, reasoning):
    client.post("/api/v1/users/resolve", json={"userId": "fp_abc"})
    reasoning.tool_calls.append(None)

    response = client.post(
        "/api/v1/briefs/generate",
        json={"userId": "fp_abc", "questionnaire": QUESTIONNAIRE},
    )

    assert response.status_code == 500
    assert response.json()["code"] == "brief.generation_failed"
    assert client.get("/api/v1/users/fp_abc/balance").json()["tokens"] == 3


def test_edit_and_delete_saved_brief(client, reasoning):
    client.post("/api/v1/users/resolve", json={"userId": "fp_abc"})
    brief_id = _generate(client, reasoning).json()["brief_id"]

    edited = client.put(
        f"/api/v1/users/fp_abc/briefs/{brief_id}",
        json={"project_title": "Walkies", "description": "Dog walking", "features": ["Booking"]},
    )
    assert edited.status_code == 200
    assert edited.json()["brief"]["project_title"] == "Walkies"

    deleted = client.delete(f"/api/v1/users/fp_abc/briefs/{brief_id}")
    assert deleted.status_code == 204

    missing = client.get(f"/api/v1/users/fp_abc/briefs/{brief_id}")
    assert missing.status_code == 404
    assert missing.json()["code"] == "brief.not_found"


def test_put_with_invalid_brief_body_is_400(client):
    client.post("/api/v1/users/resolve", json={"userId": "fp_abc"})

    response = client.put(
        "/api/v1/users/fp_abc/briefs/1767225600000-abcdefghij",
        json={"project_title": "No features", "description": "x", "features": []},
    )

    assert response.status_code == 400


def test_shared_brief_is_readable_without_owner(client, reasoning):
    client.post("/api/v1/users/resolve", json={"userId": "fp_abc"})
    brief_id = _generate(client, reasoning).json()["brief_id"]

    first = client.post(f"/api/v1/users/fp_abc/briefs/{brief_id}/share")
    second = client.post(f"/api/v1/users/fp_abc/briefs/{brief_id}/share")

    assert first.status_code == 200
    link = first.json()
    assert second.json() == link
    assert link["path"] == f"/api/v1/shared/{link['share_id']}"

    shared = client.get(link["path"])
    assert shared.status_code == 200
    assert shared.json()["brief"]["project_title"] == "Dog Walker Booking"
    assert "user_id" not in shared.json()


def test_sharing_unknown_brief_and_reading_unknown_share_are_404(client):
    client.post("/api/v1/users/resolve", json={"userId": "fp_abc"})

    response = client.post("/api/v1/users/fp_abc/briefs/1767225600000-abcdefghij/share")
    assert response.status_code == 404
    assert response.json()["code"] == "brief.not_found"

    assert client.get("/api/v1/shared/unknown-token").status_code == 404


def test_deleted_brief_is_no_longer_shared(client, reasoning):
    client.post("/api/v1/users/resolve", json={"userId": "fp_abc"})
    brief_id = _generate(client, reasoning).json()["brief_id"]
    path = client.post(f"/api/v1/users/fp_abc/briefs/{brief_id}/share").json()["path"]

    client.delete(f"/api/v1/users/fp_abc/briefs/{brief_id}")

    assert client.get(path).status_code == 404
