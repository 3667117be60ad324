import pytest

from app.dashboard.source import insert_channel


VALID = {
    "user_name": "Jane Doe",
    "email": "jane@example.com",
    "feedback_text": "The dashboard loads slowly on Mondays.",
    "category": "bug_report",
}


@pytest.mark.asyncio
async def test_submit_feedback(client, clean_feedback):
    resp = await client.post("/api/feedback", json=VALID)
    assert resp.status_code == 201
    data = resp.json()
    assert data["success"] is True
    assert data["id"]


@pytest.mark.asyncio
async def test_category_defaults_to_suggestion(admin_client, clean_feedback):
    payload = {k: v for k, v in VALID.items() if k != "category"}
    resp = await admin_client.post("/api/feedback", json=payload)
    assert resp.status_code == 201

    listing = await admin_client.get("/api/admin/feedback")
    assert listing.json()["items"][0]["category"] == "suggestion"


@pytest.mark.asyncio
async def test_feedback_text_keeps_newlines(admin_client, clean_feedback):
    text = "Line one of the report.\nLine two of the report."
    resp = await admin_client.post("/api/feedback", json={**VALID, "feedback_text": text})
    assert resp.status_code == 201

    listing = await admin_client.get("/api/admin/feedback")
    assert listing.json()["items"][0]["feedback_text"] == text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override",
    [
        {"feedback_text": "too short"},
        {"email": "not-an-email"},
        {"user_name": " "},
        {"category": "praise"},
    ],
)
async def test_invalid_submissions_are_rejected(client, override):
    resp = await client.post("/api/feedback", json={**VALID, **override})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_submission_notifies_insert_subscribers(client, clean_feedback):
    received = []
    subscription = insert_channel.subscribe(received.append)
    try:
        resp = await client.post("/api/feedback", json=VALID)
        assert resp.status_code == 201
    finally:
        subscription.unsubscribe()

    assert [r.id for r in received] == [resp.json()["id"]]
    assert received[0].email == "jane@example.com"
