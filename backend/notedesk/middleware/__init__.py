# Middleware package init
"""
NoteDesk Backend — Middleware Package
=======================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Route Guard] → [GZip] → [CORS] → Route Handler

    1. Request ID first so every later log line carries the correlation ID
    2. Logging sees the final status, including guard redirects
    3. Route Guard resolves the session and redirects page requests
"""
