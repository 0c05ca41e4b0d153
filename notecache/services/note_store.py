"""
NoteCache - Note Store Service
================================

What:  Create, read, update, delete and list plain-text notes stored as one
       file per note under the cache directory.
How:   <cache_dir>/<name>.txt, written and read with aiofiles so disk I/O
       does not block the event loop. The directory is the only state; no
       note content is held in memory between calls.
Who:   Held on app.state and injected into the route handlers in
       routes/notes.py. Tests construct one per temporary directory.

Name rules:
    A name must fully match NAME_PATTERN, be at most MAX_NAME_LENGTH characters
    and map to a file name of at most MAX_FILENAME_BYTES bytes.
    That excludes separators, traversal components and dot-files, so the
    file a name maps to always sits directly inside the cache directory.
    _path_for() re-checks this on the resolved path before any I/O.

Locking:
    Every create/update/delete holds a per-name asyncio.Lock across its
    existence check and its write/remove, and get holds it while reading.
    Locks are created on demand and kept in a WeakValueDictionary, so a
    name's lock disappears once no coroutine holds it. Different names never
    contend. Locks are per process.
"""

import asyncio
import logging
import re
import weakref
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Optional, Union

import aiofiles
import aiofiles.os

from notecache.exceptions import (
    InvalidNoteError,
    NoteAlreadyExistsError,
    NoteNotFoundError,
    NoteStorageError,
)
from notecache.schemas.note import Note

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"\w[\w .\-]*")
MAX_NAME_LENGTH = 200
# Filesystems cap a single filename in bytes, not characters
MAX_FILENAME_BYTES = 255

# utf-8 with newline="" keeps content byte-for-byte (no \r\n translation)
_ENCODING = "utf-8"


def validate_name(name: str, suffix: str = ".txt") -> str:
    """
    Check a note name against the allowed character set and length.

    The file name (name plus suffix) must also fit in MAX_FILENAME_BYTES
    once UTF-8 encoded. Returns the name unchanged; raises InvalidNoteError
    otherwise.
    """
    if not name:
        raise InvalidNoteError(field="note_name")
    if (
        len(name) > MAX_NAME_LENGTH
        or len(f"{name}{suffix}".encode(_ENCODING, errors="replace")) > MAX_FILENAME_BYTES
        or not NAME_PATTERN.fullmatch(name)
    ):
        raise InvalidNoteError(
            message="Invalid note name",
            field="note_name",
            context={"name": name},
        )
    return name


def validate_text(text: str) -> str:
    if not text:
        raise InvalidNoteError(message="Error: Text is required", field="note")
    return text


class NoteStore:
    """
    Filesystem-backed note store rooted at one directory.

    Operations:
        create(name, text)  absent → present, fails if present
        get(name)           read whole content, fails if absent
        update(name, text)  present → present (full overwrite), fails if absent
        delete(name)        present → absent, fails if absent
        names()             sorted names of all stored notes
        iter_notes()        lazily yield every note, sorted by name
        list_notes()        iter_notes() materialized into a list
    """

    def __init__(self, root: Union[str, Path], suffix: str = ".txt"):
        self.root = Path(root).resolve()
        self.suffix = suffix
        self.root.mkdir(parents=True, exist_ok=True)
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )
        logger.info("NoteStore initialized with root=%s", self.root)

    # ── Helpers ───────────────────────────────────────────────────────────

    def _path_for(self, name: str) -> Path:
        validate_name(name, self.suffix)
        path = (self.root / f"{name}{self.suffix}").resolve()
        if path.parent != self.root:
            raise InvalidNoteError(
                message="Invalid note name",
                field="note_name",
                context={"name": name, "resolved": str(path)},
            )
        return path

    def _lock_for(self, name: str) -> asyncio.Lock:
        # Single-threaded event loop: get-or-create needs no extra guard
        lock = self._locks.get(name)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[name] = lock
        return lock

    @asynccontextmanager
    async def _locked(self, name: str) -> AsyncIterator[None]:
        lock = self._lock_for(name)
        async with lock:
            yield

    async def _exists(self, path: Path) -> bool:
        return await aiofiles.os.path.isfile(path)

    async def _read(self, path: Path) -> str:
        # Bytes that are not UTF-8 (files placed by hand) decode to U+FFFD
        async with aiofiles.open(
            path, "r", encoding=_ENCODING, errors="replace", newline=""
        ) as f:
            return await f.read()

    # ── Operations ────────────────────────────────────────────────────────

    async def create(self, name: str, text: str) -> None:
        """
        Store a new note.

        Raises:
            InvalidNoteError:        empty name/text or disallowed name
            NoteAlreadyExistsError:  a note with this name is already stored
            NoteStorageError:        the write failed
        """
        if not name or not text:
            raise InvalidNoteError()
        path = self._path_for(name)

        async with self._locked(name):
            if await self._exists(path):
                raise NoteAlreadyExistsError(name)
            try:
                # "x" fails if another process created the file meanwhile
                async with aiofiles.open(path, "x", encoding=_ENCODING, newline="") as f:
                    await f.write(text)
            except FileExistsError:
                raise NoteAlreadyExistsError(name)
            except OSError as e:
                logger.error("Failed to write note %r: %s", name, e)
                raise NoteStorageError(
                    context={"name": name, "path": str(path), "os_error": str(e)}
                ) from e

        logger.info("Note created: %s (%d chars)", name, len(text))

    async def get(self, name: str) -> str:
        """Return the full content of a note, or raise NoteNotFoundError."""
        path = self._path_for(name)
        async with self._locked(name):
            try:
                return await self._read(path)
            except (FileNotFoundError, IsADirectoryError):
                raise NoteNotFoundError(name)
            except OSError as e:
                raise NoteStorageError(
                    context={"name": name, "path": str(path), "os_error": str(e)}
                ) from e

    async def update(self, name: str, text: str) -> None:
        """
        Replace a note's content entirely. Never creates a note.

        The existence check comes first, so an absent note is reported as
        not found even when the replacement text is also empty.
        """
        path = self._path_for(name)

        async with self._locked(name):
            if not await self._exists(path):
                raise NoteNotFoundError(name)
            validate_text(text)
            try:
                async with aiofiles.open(path, "w", encoding=_ENCODING, newline="") as f:
                    await f.write(text)
            except OSError as e:
                logger.error("Failed to update note %r: %s", name, e)
                raise NoteStorageError(
                    context={"name": name, "path": str(path), "os_error": str(e)}
                ) from e

        logger.info("Note updated: %s (%d chars)", name, len(text))

    async def delete(self, name: str) -> None:
        """Remove a note irreversibly; raise NoteNotFoundError if absent."""
        path = self._path_for(name)

        async with self._locked(name):
            if not await self._exists(path):
                raise NoteNotFoundError(name)
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                raise NoteNotFoundError(name)
            except OSError as e:
                logger.error("Failed to delete note %r: %s", name, e)
                raise NoteStorageError(
                    context={"name": name, "path": str(path), "os_error": str(e)}
                ) from e

        logger.info("Note deleted: %s", name)

    async def names(self) -> List[str]:
        """
        Return the names of all stored notes, sorted.

        Only regular files ending in the note suffix count.
        """
        try:
            entries = await aiofiles.os.listdir(self.root)
        except OSError as e:
            raise NoteStorageError(
                context={"path": str(self.root), "os_error": str(e)}
            ) from e

        found = []
        for entry in sorted(entries):
            if not entry.endswith(self.suffix) or entry == self.suffix:
                continue
            if await aiofiles.os.path.isfile(self.root / entry):
                found.append(entry[: -len(self.suffix)])
        return found

    async def iter_notes(self, names: Optional[List[str]] = None) -> AsyncIterator[Note]:
        """
        Yield notes one file read at a time.

        names defaults to names(); passing a list fetched up front lets the
        caller surface listing errors before it starts consuming. A file
        removed before its turn to be read is skipped.
        """
        if names is None:
            names = await self.names()

        for name in names:
            path = self.root / f"{name}{self.suffix}"
            try:
                text = await self._read(path)
            except FileNotFoundError:
                logger.debug("Note vanished during listing: %s", name)
                continue
            except OSError as e:
                raise NoteStorageError(
                    context={"path": str(path), "os_error": str(e)}
                ) from e
            yield Note(name=name, text=text)

    async def list_notes(self) -> List[Note]:
        return [note async for note in self.iter_notes()]
