"""Tests for the HTTP surface."""

import asyncio

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from conftest import GatedHost, counter_ids
from db.memory import InMemoryHost
from main import app
from session_service import SessionService, get_session_service


@pytest.fixture
def service():
    svc = SessionService(InMemoryHost(id_factory=counter_ids(3)))
    app.dependency_overrides[get_session_service] = lambda: svc
    yield svc
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(service):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await service.shutdown()


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/v1/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_author_flow(client, service):
    r = await client.post("/v1/quizzes/q1/author")
    assert r.status_code == 200
    view = r.json()
    assert view["type"] == "single"
    assert [c["value"] for c in view["controls"]] == ["1", "2"]
    assert view["saving"] is False

    r = await client.post("/v1/quizzes/q1/author/answers", json={"text": "Third", "correct": False})
    assert r.status_code == 201
    assert [c["value"] for c in r.json()["controls"]] == ["1", "2", "3"]

    r = await client.post("/v1/quizzes/q1/author/answers/3/toggle")
    assert r.status_code == 200
    assert [c["checked"] for c in r.json()["controls"]] == [False, False, True]

    r = await client.delete("/v1/quizzes/q1/author/answers/1")
    assert r.status_code == 200
    assert service.host.docs["criteria:q1"] == {"2": False, "3": True}

    r = await client.patch("/v1/quizzes/q1/author/answers/2", json={"text": "Second", "commit": True})
    assert r.status_code == 200
    assert service.host.docs["setup:q1"]["answers"][0] == {"id": "2", "text": "Second"}

    r = await client.put("/v1/quizzes/q1/author/mode", json={"type": "multiple"})
    assert r.status_code == 200
    assert {c["kind"] for c in r.json()["controls"]} == {"checkbox"}

    r = await client.put("/v1/quizzes/q1/author/feedback/correct", json={"text": "Yay", "commit": True})
    assert r.json()["correct_message"] == "Yay"

    r = await client.put("/v1/quizzes/q1/author/shuffle", json={"isShuffled": True})
    assert r.json()["is_shuffled"] is True

    r = await client.post("/v1/quizzes/q1/author/save")
    assert r.status_code == 202


@pytest.mark.asyncio
async def test_author_errors(client):
    r = await client.get("/v1/quizzes/nope/author")
    assert r.status_code == 404

    await client.post("/v1/quizzes/q1/author")
    r = await client.put("/v1/quizzes/q1/author/mode", json={"type": "essay"})
    assert r.status_code == 422
    r = await client.put("/v1/quizzes/q1/author/feedback/neutral", json={"text": "x"})
    assert r.status_code == 400
    r = await client.patch("/v1/quizzes/q1/author/answers/missing", json={"text": "x"})
    assert r.status_code == 404
    r = await client.post("/v1/quizzes/q1/author/answers/missing/toggle")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_open_author_with_broken_setup_is_422(client, service):
    await service.host.setup("q9").replace({"answers": [], "type": "matrix"})
    r = await client.post("/v1/quizzes/q9/author")
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_display_flow(client):
    await client.post("/v1/quizzes/q1/author")
    # writes the criteria document {"1": true, "2": false}
    await client.post("/v1/quizzes/q1/author/answers/1/toggle")

    r = await client.post("/v1/quizzes/q1/users/u1/display")
    assert r.status_code == 200
    view = r.json()
    assert view["correct_visible"] is False
    assert view["incorrect_visible"] is False
    assert view["submitting"] is False

    r = await client.post("/v1/quizzes/q1/users/u1/display/answers/1/toggle")
    assert [c["checked"] for c in r.json()["controls"]] == [True, False]

    r = await client.post("/v1/quizzes/q1/users/u1/display/submit")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["saved"] == {"selected": {"1": True, "2": False}, "isCorrect": True}
    assert body["view"]["correct_visible"] is True
    assert body["view"]["incorrect_visible"] is False

    r = await client.get("/v1/quizzes/q1/users/u2/display")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_second_submit_while_saving_is_409():
    svc = SessionService(GatedHost())
    app.dependency_overrides[get_session_service] = lambda: svc
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            await ac.post("/v1/quizzes/q1/users/u1/display")
            await ac.post("/v1/quizzes/q1/users/u1/display/answers/1/toggle")
            session = svc.display("q1", "u1")

            first = asyncio.create_task(ac.post("/v1/quizzes/q1/users/u1/display/submit"))
            while not session.evaluator.submitting:
                await asyncio.sleep(0)

            r = await ac.post("/v1/quizzes/q1/users/u1/display/submit")
            assert r.status_code == 409
            assert r.json()["detail"] == "Submission already in progress"

            svc.host.user("q1", "u1").gate.set()
            r = await first
            assert r.status_code == 200
            assert r.json()["view"]["submitting"] is False
    finally:
        app.dependency_overrides.clear()
