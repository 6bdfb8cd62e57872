"""
NeuroNotes Backend: Middleware Package
======================================

Middleware chain (outermost first):
    [Request ID] → [Rate Limit: AI paths] → [Access Log] → [Session] → [GZip] → [CORS] → routes

Responses unwind in reverse, so the request ID header and the access log
line both see the final status code. The request ID is set before rate
limiting so 429 bodies carry it too.
"""
