# Services package init
"""
NoteCache - Services Layer
============================

What:  Storage logic sitting between the routes (HTTP) and the cache directory.

Service Inventory:
    - NoteStore: one-file-per-note create/get/update/delete/list

Routes translate HTTP into NoteStore calls and NoteStore exceptions into
status codes (via the handlers in main.py); NoteStore never sees a request.
"""
