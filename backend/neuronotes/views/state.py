"""
NeuroNotes Backend: Per-View State
==================================

What:  Plain state objects backing each server-rendered page.
How:   Each page builds the objects it needs per request from the database,
       the form post, or the session cookie, and hands them to its template.
       Nothing here outlives a request except the chat transcript, which is
       stored in the signed session cookie.

State objects:
    AuthFormState       login / signup form (password is never re-rendered)
    NoteFormState       new / edit note form
    NoteListState       home page cards with content snippets
    DeleteConfirmState  note awaiting delete confirmation
    GeneratorState      AI generator prompt and result
    ChatTranscript      chat messages kept in the session cookie
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional

from neuronotes.schemas.ai import ChatMessage
from neuronotes.schemas.note import NoteResponse
from neuronotes.services.ai_service import build_notes_context

SNIPPET_LENGTH = 50
CHAT_HISTORY_LIMIT = 20
CHAT_SESSION_KEY = "chat_history"

# JSON size of the whole session; base64 plus signature brings the cookie
# to about 3.7 KB, under the 4 KB browsers accept
SESSION_JSON_BUDGET = 2700
CLIPPED_SUFFIX = "..."

CHAT_FAILURE_REPLY = "Sorry, something went wrong. Please try again or rephrase your request."
GENERATE_FAILURE_RESULT = "Failed to generate text. Please try again."
GENERIC_ERROR = "Something went wrong"


@dataclass
class AuthFormState:
    name: str = ""
    email: str = ""
    password: str = ""
    error: Optional[str] = None

    def __setattr__(self, key: str, value: Any) -> None:
        if key == "email" and isinstance(value, str):
            value = value.strip().lower()
        super().__setattr__(key, value)

    def for_render(self) -> "AuthFormState":
        """Copy safe to hand to a template: the password is dropped."""
        return AuthFormState(name=self.name, email=self.email, error=self.error)


@dataclass
class NoteFormState:
    title: str = ""
    content: str = ""
    error: Optional[str] = None

    @classmethod
    def from_note(cls, note: NoteResponse) -> "NoteFormState":
        return cls(title=note.title, content=note.content)


@dataclass
class NoteCard:
    id: str
    title: str
    snippet: str
    created_at: Any


def make_snippet(content: str, length: int = SNIPPET_LENGTH) -> str:
    if len(content) > length:
        return content[:length] + "..."
    return content


@dataclass
class NoteListState:
    """Snapshot of the user's notes as listed on the home page, newest first."""
    notes: List[NoteResponse] = field(default_factory=list)
    snippet_length: int = SNIPPET_LENGTH

    @property
    def cards(self) -> List[NoteCard]:
        return [
            NoteCard(
                id=note.id,
                title=note.title,
                snippet=make_snippet(note.content, self.snippet_length),
                created_at=note.created_at,
            )
            for note in self.notes
        ]

    @property
    def is_empty(self) -> bool:
        return not self.notes

    def generator_context(self) -> str:
        return build_notes_context(note.content for note in self.notes)


@dataclass
class DeleteConfirmState:
    note: Optional[NoteResponse] = None

    @property
    def pending(self) -> bool:
        return self.note is not None


@dataclass
class GeneratorState:
    prompt: str = ""
    result: str = ""
    error: Optional[str] = None

    @property
    def ready(self) -> bool:
        return bool(self.prompt.strip())


def _dump(messages: List[ChatMessage]) -> List[Dict[str, str]]:
    return [message.model_dump() for message in messages]


def _session_size(others: Mapping[str, Any], messages: List[ChatMessage]) -> int:
    # Same encoding as the session middleware
    return len(json.dumps({**others, CHAT_SESSION_KEY: _dump(messages)}))


class ChatTranscript:
    """
    Ordered chat messages persisted in the session cookie.

    Browsers drop cookies larger than 4 KB, and the access token shares the
    same cookie. `save` therefore bounds the serialized session, not just the
    message count:

        1. keep at most CHAT_HISTORY_LIMIT messages
        2. drop the oldest messages while over SESSION_JSON_BUDGET, down to
           the latest exchange
        3. clip the longest remaining message until the session fits
    """

    def __init__(self, messages: Optional[Iterable[ChatMessage]] = None):
        self.messages: List[ChatMessage] = list(messages or [])

    @classmethod
    def load(cls, session: MutableMapping[str, Any]) -> "ChatTranscript":
        raw = session.get(CHAT_SESSION_KEY) or []
        messages = []
        for item in raw:
            if isinstance(item, dict) and "role" in item and "content" in item:
                messages.append(ChatMessage(role=str(item["role"]), content=str(item["content"])))
        return cls(messages)

    def save(self, session: MutableMapping[str, Any]) -> None:
        others = {key: value for key, value in session.items() if key != CHAT_SESSION_KEY}
        messages = self.messages[-CHAT_HISTORY_LIMIT:]

        while len(messages) > 2 and _session_size(others, messages) > SESSION_JSON_BUDGET:
            messages = messages[1:]

        while messages and _session_size(others, messages) > SESSION_JSON_BUDGET:
            overflow = _session_size(others, messages) - SESSION_JSON_BUDGET
            index = max(range(len(messages)), key=lambda i: len(messages[i].content))
            content = messages[index].content
            if len(content) <= len(CLIPPED_SUFFIX):
                messages = messages[1:]
                continue
            keep = max(0, len(content) - overflow - len(CLIPPED_SUFFIX))
            messages[index] = messages[index].model_copy(
                update={"content": content[:keep] + CLIPPED_SUFFIX}
            )

        self.messages = messages
        if messages:
            session[CHAT_SESSION_KEY] = _dump(messages)
        else:
            session.pop(CHAT_SESSION_KEY, None)

    @staticmethod
    def clear(session: MutableMapping[str, Any]) -> None:
        session.pop(CHAT_SESSION_KEY, None)

    def with_user_message(self, content: str) -> List[ChatMessage]:
        """The transcript as it would be sent, including a new user message."""
        return self.messages + [ChatMessage(role="user", content=content)]

    def record_exchange(self, user_content: str, ai_content: str) -> None:
        self.messages.append(ChatMessage(role="user", content=user_content))
        self.messages.append(ChatMessage(role="ai", content=ai_content))

    def record_failure(self, user_content: str) -> None:
        self.record_exchange(user_content, CHAT_FAILURE_REPLY)

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)
