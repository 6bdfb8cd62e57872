"""
NeuroNotes Backend: Views Package
=================================

Per-view state objects for the server-rendered pages (see state.py).
"""
