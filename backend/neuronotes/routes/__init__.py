"""
NeuroNotes Backend: Routes Package
==================================

Route Inventory:
    - notes.py:   /api/notes CRUD (session required)
    - auth.py:    POST /api/signup, POST /api/auth/login, GET /api/auth/session
    - ai.py:      POST /api/ai/chat, POST /api/ai/generate
    - health.py:  GET /health
    - pages.py:   server-rendered HTML pages

Routes stay thin: parse the request, call a service, shape the response.
"""
