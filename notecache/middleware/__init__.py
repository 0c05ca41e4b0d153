# Middleware package init
"""
NoteCache - Middleware Package
================================

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

    Request ID runs first so the access log line carries the ID; the ID is
    copied onto the response on the way back out.
"""
