"""
NoteCache - Plain-Text Note Server
====================================

What: A small HTTP service that stores named plain-text notes as one file
      per note under a cache directory.

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         NoteStore (Service)         │  ← validation, locking, file I/O
    ├─────────────────────────────────────┤
    │        Cache directory (disk)       │  ← <cache_dir>/<name>.txt
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
