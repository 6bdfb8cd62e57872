"""
NeuroNotes Backend: Page Tests
==============================

What:  Server-rendered pages driven like a browser: form posts, 303
       redirects and the signed session cookie.
"""

import pytest

from neuronotes.exceptions import LLMServiceError
from neuronotes.views.state import CHAT_FAILURE_REPLY

ACCOUNT = {"name": "Alice", "email": "alice@neuronotes.dev", "password": "correct-horse-battery"}


async def browser_login(client):
    response = await client.post("/signup", data=ACCOUNT)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"

    response = await client.post(
        "/login", data={"email": ACCOUNT["email"], "password": ACCOUNT["password"]}
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/"


async def create_page_note(client, title="Groceries", content="Buy milk. Call mom."):
    response = await client.post("/note/new", data={"title": title, "content": content})
    assert response.status_code == 303
    return response.headers["location"]


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/", "/note/new", "/note/abc", "/note/abc/edit"])
async def test_pages_redirect_to_login_without_session(client, path):
    response = await client.get(path)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"


@pytest.mark.asyncio
async def test_login_and_signup_pages_render(client):
    assert "Log in" in (await client.get("/login")).text
    assert "Create an account" in (await client.get("/signup")).text


@pytest.mark.asyncio
async def test_signup_login_and_home(client):
    await browser_login(client)

    response = await client.get("/")

    assert response.status_code == 200
    assert "Alice" in response.text
    assert "No notes yet." in response.text


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    await client.post("/signup", data=ACCOUNT)

    response = await client.post("/login", data={"email": ACCOUNT["email"], "password": "nope"})

    assert response.status_code == 401
    assert "Invalid credentials. Please try again." in response.text
    assert ACCOUNT["email"] in response.text


@pytest.mark.asyncio
async def test_signup_page_errors(client):
    response = await client.post("/signup", data={**ACCOUNT, "email": "nope"})
    assert response.status_code == 400
    assert "Please enter a valid email address." in response.text

    response = await client.post("/signup", data={**ACCOUNT, "password": "123"})
    assert response.status_code == 400
    assert "Password must be at least 6 characters." in response.text

    await client.post("/signup", data=ACCOUNT)
    response = await client.post("/signup", data=ACCOUNT)
    assert response.status_code == 400
    assert "This email is already registered." in response.text


@pytest.mark.asyncio
async def test_note_lifecycle(client):
    await browser_login(client)

    location = await create_page_note(client)
    assert location.startswith("/note/")

    response = await client.get(location)
    assert response.status_code == 200
    assert "Buy milk. Call mom." in response.text

    home = await client.get("/")
    assert "Groceries" in home.text

    response = await client.post(
        f"{location}/edit", data={"title": "Errands", "content": "Post office"}
    )
    assert response.status_code == 303
    assert response.headers["location"] == location
    assert "Post office" in (await client.get(location)).text

    response = await client.get(f"{location}/delete")
    assert response.status_code == 200
    assert "Errands" in response.text

    response = await client.post(f"{location}/delete")
    assert response.status_code == 303
    assert response.headers["location"] == "/"

    response = await client.get(location)
    assert response.status_code == 404
    assert "Note not found" in response.text


@pytest.mark.asyncio
async def test_new_note_requires_title(client):
    await browser_login(client)

    response = await client.post("/note/new", data={"title": "  ", "content": "orphan body"})

    assert response.status_code == 400
    assert "Title is required" in response.text
    assert "orphan body" in response.text


@pytest.mark.asyncio
async def test_home_snippets(client):
    await browser_login(client)
    await create_page_note(client, "Long", "a" * 60)

    response = await client.get("/")

    assert "a" * 50 + "..." in response.text
    assert "a" * 51 not in response.text


@pytest.mark.asyncio
async def test_generate_from_notes(client, fake_llm):
    await browser_login(client)
    await create_page_note(client, "One", "Buy milk.")
    await create_page_note(client, "Two", "Call mom.")

    response = await client.post("/ai/generate", data={"prompt": "List three tags"})

    assert response.status_code == 200
    assert "groceries, family, errands" in response.text
    # Newest note first, joined by blank lines
    assert fake_llm.calls[0]["prompt"] == "Context: Call mom.\n\nBuy milk.\n\nTask: List three tags"


@pytest.mark.asyncio
async def test_generate_failure_message(client, fake_llm):
    await browser_login(client)
    await create_page_note(client)
    fake_llm.error = LLMServiceError()

    response = await client.post("/ai/generate", data={"prompt": "Summarize"})

    assert response.status_code == 200
    assert "Failed to generate text. Please try again." in response.text
    assert len(fake_llm.calls) == 1


@pytest.mark.asyncio
async def test_generate_without_notes(client, fake_llm):
    await browser_login(client)

    response = await client.post("/ai/generate", data={"prompt": "Summarize"})

    assert response.status_code == 200
    assert "Failed to generate text. Please try again." in response.text
    assert fake_llm.calls == []


@pytest.mark.asyncio
async def test_chat_transcript(client, fake_llm):
    await browser_login(client)
    fake_llm.text = "Try a gratitude list!"

    response = await client.post("/ai/chat", data={"message": "Ideas?"})
    assert response.status_code == 303

    fake_llm.error = LLMServiceError()
    await client.post("/ai/chat", data={"message": "More?"})

    home = await client.get("/")
    assert "Ideas?" in home.text
    assert "Try a gratitude list!" in home.text
    assert "More?" in home.text
    assert CHAT_FAILURE_REPLY in home.text
    # Second call carried the first exchange
    assert fake_llm.calls[1]["prompt"] == "User: Ideas?\nAI: Try a gratitude list!\nUser: More?\nAI:"

    await client.post("/ai/chat/clear")
    assert "Ideas?" not in (await client.get("/")).text


@pytest.mark.asyncio
async def test_logout(client):
    await browser_login(client)

    response = await client.post("/logout")
    assert response.status_code == 303

    response = await client.get("/")
    assert response.status_code == 303
    assert response.headers["location"] == "/login"


@pytest.mark.asyncio
async def test_long_chat_reply_keeps_cookie_under_browser_limit(client, fake_llm):
    await browser_login(client)
    fake_llm.text = "Here is a detailed plan for the week. " * 80

    response = await client.post("/ai/chat", data={"message": "Plan my week?"})

    assert response.status_code == 303
    assert len(response.headers["set-cookie"].encode()) <= 4096

    # Login and the latest exchange both survive in the cookie
    home = await client.get("/")
    assert home.status_code == 200
    assert "Plan my week?" in home.text
    assert "Here is a detailed plan for the week." in home.text


@pytest.mark.asyncio
async def test_chat_clear_requires_session(client):
    response = await client.post("/ai/chat/clear")

    assert response.status_code == 303
    assert response.headers["location"] == "/login"
