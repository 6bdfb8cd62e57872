"""
NeuroNotes Backend
==================

A note-taking web application: accounts, personal notes, and an AI panel
that chats or generates text from the user's notes.

Layers:
    routes/     HTTP: JSON API handlers and server-rendered pages
    views/      per-page state objects
    services/   business logic (notes, accounts, AI proxy, Gemini client)
    models/     SQLAlchemy ORM tables; schemas/ holds the Pydantic contracts
    database    async engine and per-request sessions
"""

__version__ = "1.0.0"
