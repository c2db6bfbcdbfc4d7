# Middleware package init
"""
QuickNotes Backend — Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID runs first so every log line of the request can carry it
    - Logging captures response status and duration on the way back out
"""
