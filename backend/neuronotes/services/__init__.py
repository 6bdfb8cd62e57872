"""
NeuroNotes Backend: Services Layer
==================================

Business logic between the routes and persistence / external APIs.

Service Inventory:
    - NoteService:   owned-note CRUD
    - AuthService:   signup, credential check, token login
    - LLMService:    abstract text-generation provider
    - GeminiService: LLMService backed by Google Gemini
    - AIService:     chat / generate prompts, truncation notices
"""
