"""
NeuroNotes Backend: Notes API Tests
===================================

What:  /api/notes end to end: HTTP client → app → temporary SQLite database.

What we test:
    ✅ Create then read round-trips title and content
    ✅ Delete then read → 404
    ✅ N creates → list of exactly N, newest first, X-Total-Count
    ✅ No session → 401; another user's note → 404 on read/update/delete
    ✅ Missing/blank title → 400
"""

import pytest


async def create_note(client, headers, title="Groceries", content="Buy milk"):
    response = await client.post(
        "/api/notes", json={"title": title, "content": content}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_and_read_round_trip(client, auth_headers):
    created = await create_note(client, auth_headers, "Groceries", "Buy milk. Call mom.")

    response = await client.get(f"/api/notes/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Groceries"
    assert body["content"] == "Buy milk. Call mom."
    assert body["user_id"] == created["user_id"]


@pytest.mark.asyncio
async def test_content_is_optional(client, auth_headers):
    response = await client.post("/api/notes", json={"title": "Just a title"}, headers=auth_headers)

    assert response.status_code == 201
    assert response.json()["content"] == ""


@pytest.mark.asyncio
async def test_delete_then_read_is_404(client, auth_headers):
    created = await create_note(client, auth_headers)

    response = await client.delete(f"/api/notes/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = await client.get(f"/api/notes/{created['id']}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_list_returns_all_notes_newest_first(client, auth_headers):
    titles = [f"Note {i}" for i in range(5)]
    for title in titles:
        await create_note(client, auth_headers, title, "body")

    response = await client.get("/api/notes", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["X-Total-Count"] == "5"
    assert [n["title"] for n in response.json()] == list(reversed(titles))


@pytest.mark.asyncio
async def test_update_replaces_fields(client, auth_headers):
    created = await create_note(client, auth_headers)

    response = await client.put(
        f"/api/notes/{created['id']}",
        json={"title": "Errands", "content": "Post office"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Errands"
    assert body["content"] == "Post office"
    assert body["created_at"] == created["created_at"]


@pytest.mark.asyncio
async def test_update_without_content_keeps_body(client, auth_headers):
    created = await create_note(client, auth_headers, "Groceries", "Buy milk")

    response = await client.put(
        f"/api/notes/{created['id']}", json={"title": "Shopping"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()["title"] == "Shopping"
    assert response.json()["content"] == "Buy milk"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path",
    [("get", "/api/notes"), ("post", "/api/notes"), ("get", "/api/notes/abc"), ("delete", "/api/notes/abc")],
)
async def test_requires_session(client, method, path):
    kwargs = {"json": {"title": "x"}} if method == "post" else {}

    response = await getattr(client, method)(path, **kwargs)

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized"


@pytest.mark.asyncio
async def test_invalid_token_is_401(client):
    response = await client.get("/api/notes", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_foreign_note_is_hidden(client, auth_headers, other_auth_headers):
    created = await create_note(client, auth_headers)
    path = f"/api/notes/{created['id']}"

    assert (await client.get(path, headers=other_auth_headers)).status_code == 404
    response = await client.put(path, json={"title": "Mine now"}, headers=other_auth_headers)
    assert response.status_code == 404
    assert (await client.delete(path, headers=other_auth_headers)).status_code == 404

    # Untouched for the owner
    response = await client.get(path, headers=auth_headers)
    assert response.json()["title"] == "Groceries"

    response = await client.get("/api/notes", headers=other_auth_headers)
    assert response.json() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": "   "}, {"content": "no title"}])
async def test_title_required(client, auth_headers, payload):
    response = await client.post("/api/notes", json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Title is required"


@pytest.mark.asyncio
async def test_overlong_title_rejected(client, auth_headers):
    response = await client.post("/api/notes", json={"title": "x" * 256}, headers=auth_headers)
    assert response.status_code == 400
