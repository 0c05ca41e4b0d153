"""
NoteCache - NoteStore Unit Tests
==================================

What:  Tests for the one-file-per-note store (create, get, update, delete,
       list) and its name validation and locking.
How:   Each test runs against its own temporary cache directory.
"""

import asyncio
import gc

import pytest

from notecache.exceptions import (
    InvalidNoteError,
    NoteAlreadyExistsError,
    NoteNotFoundError,
    NoteStorageError,
)
from notecache.services.note_store import NoteStore, validate_name


class TestNoteStoreInit:

    def test_creates_missing_directory_with_parents(self, tmp_path):
        root = tmp_path / "a" / "b" / "cache"
        NoteStore(root)
        assert root.is_dir()

    def test_existing_directory_is_kept(self, tmp_path):
        (tmp_path / "keep.txt").write_text("kept")
        NoteStore(tmp_path)
        assert (tmp_path / "keep.txt").read_text() == "kept"


class TestCreateAndGet:

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        await store.create("todo", "buy milk")
        assert await store.get("todo") == "buy milk"

    @pytest.mark.asyncio
    async def test_file_layout(self, store):
        """A note is stored as <root>/<name>.txt with exactly its text."""
        await store.create("todo", "buy milk")
        assert (store.root / "todo.txt").read_bytes() == b"buy milk"

    @pytest.mark.asyncio
    async def test_content_kept_verbatim(self, store):
        text = "line one\r\nline two\n  trailing spaces  \n\nété ✓"
        await store.create("verbatim", text)
        assert await store.get("verbatim") == text
        assert (store.root / "verbatim.txt").read_bytes() == text.encode("utf-8")

    @pytest.mark.asyncio
    async def test_create_twice_fails_second_time(self, store):
        await store.create("dup", "first")
        with pytest.raises(NoteAlreadyExistsError):
            await store.create("dup", "completely different")
        assert await store.get("dup") == "first"

    @pytest.mark.asyncio
    async def test_create_when_file_appears_after_check(self, store, monkeypatch):
        """Exclusive create still reports already-exists if the check was passed."""
        (store.root / "late.txt").write_text("other writer")

        async def never_exists(path):
            return False

        monkeypatch.setattr(store, "_exists", never_exists)
        with pytest.raises(NoteAlreadyExistsError):
            await store.create("late", "mine")
        assert (store.root / "late.txt").read_text() == "other writer"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,text", [("", "x"), ("name", ""), ("", "")])
    async def test_create_rejects_empty_fields(self, store, name, text):
        with pytest.raises(InvalidNoteError, match="required"):
            await store.create(name, text)
        assert list(store.root.iterdir()) == []

    @pytest.mark.asyncio
    async def test_create_write_failure_is_storage_error(self, store, monkeypatch):
        def broken_open(*args, **kwargs):
            raise PermissionError("read-only filesystem")

        monkeypatch.setattr("notecache.services.note_store.aiofiles.open", broken_open)
        with pytest.raises(NoteStorageError) as exc_info:
            await store.create("todo", "text")
        assert exc_info.value.message == "Internal server error"
        assert "read-only filesystem" in exc_info.value.context["os_error"]

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        with pytest.raises(NoteNotFoundError):
            await store.get("ghost")


class TestUpdate:

    @pytest.mark.asyncio
    async def test_update_overwrites(self, store):
        await store.create("todo", "buy milk and a very long list of other things")
        await store.update("todo", "eggs")
        assert await store.get("todo") == "eggs"

    @pytest.mark.asyncio
    async def test_update_missing_creates_nothing(self, store):
        with pytest.raises(NoteNotFoundError):
            await store.update("never", "text")
        assert not (store.root / "never.txt").exists()

    @pytest.mark.asyncio
    async def test_update_missing_with_empty_text_is_not_found(self, store):
        with pytest.raises(NoteNotFoundError):
            await store.update("never", "")

    @pytest.mark.asyncio
    async def test_update_rejects_empty_text(self, store):
        await store.create("todo", "keep me")
        with pytest.raises(InvalidNoteError, match="Text is required"):
            await store.update("todo", "")
        assert await store.get("todo") == "keep me"


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_then_get(self, store):
        await store.create("todo", "x")
        await store.delete("todo")
        with pytest.raises(NoteNotFoundError):
            await store.get("todo")
        assert not (store.root / "todo.txt").exists()

    @pytest.mark.asyncio
    async def test_delete_twice_fails(self, store):
        await store.create("todo", "x")
        await store.delete("todo")
        with pytest.raises(NoteNotFoundError):
            await store.delete("todo")

    @pytest.mark.asyncio
    async def test_delete_missing(self, store):
        with pytest.raises(NoteNotFoundError):
            await store.delete("ghost")


class TestList:

    @pytest.mark.asyncio
    async def test_empty_store(self, store):
        assert await store.list_notes() == []
        assert await store.names() == []

    @pytest.mark.asyncio
    async def test_lists_all_with_content(self, store):
        await store.create("b", "bee")
        await store.create("a", "ay")
        notes = await store.list_notes()
        assert [(n.name, n.text) for n in notes] == [("a", "ay"), ("b", "bee")]

    @pytest.mark.asyncio
    async def test_delete_removes_from_list(self, store):
        await store.create("A", "first")
        await store.create("B", "second")
        await store.delete("A")
        notes = await store.list_notes()
        assert [(n.name, n.text) for n in notes] == [("B", "second")]

    @pytest.mark.asyncio
    async def test_ignores_other_files_and_directories(self, store):
        await store.create("real", "note")
        (store.root / "readme.md").write_text("not a note")
        (store.root / "folder.txt").mkdir()
        assert await store.names() == ["real"]

    @pytest.mark.asyncio
    async def test_iter_skips_note_deleted_mid_listing(self, store):
        await store.create("a", "1")
        await store.create("b", "2")
        names = await store.names()
        (store.root / "a.txt").unlink()
        notes = [n async for n in store.iter_notes(names)]
        assert [n.name for n in notes] == ["b"]

    @pytest.mark.asyncio
    async def test_non_utf8_file_is_read_with_replacement(self, store):
        await store.create("good", "fine")
        (store.root / "legacy.txt").write_bytes(b"caf\xe9")

        assert await store.get("legacy") == "caf\ufffd"
        notes = await store.list_notes()
        assert [(n.name, n.text) for n in notes] == [
            ("good", "fine"),
            ("legacy", "caf\ufffd"),
        ]

    @pytest.mark.asyncio
    async def test_missing_root_is_storage_error(self, store):
        store.root.rmdir()
        with pytest.raises(NoteStorageError):
            await store.names()


class TestNameValidation:

    @pytest.mark.parametrize("name", [
        "todo",
        "shopping list",
        "2024-01-15",
        "notes.v2",
        "under_score",
        "нотатка",
    ])
    def test_valid_names(self, name):
        assert validate_name(name) == name

    @pytest.mark.parametrize("name", [
        "",
        "../escape",
        "..",
        ".",
        ".hidden",
        "a/b",
        "a\\b",
        "/etc/passwd",
        "trailing\n",
        "nul\x00byte",
        "x" * 201,
        "н" * 150,
    ])
    def test_invalid_names(self, name):
        with pytest.raises(InvalidNoteError):
            validate_name(name)

    @pytest.mark.asyncio
    async def test_traversal_name_writes_nothing_outside_root(self, store):
        with pytest.raises(InvalidNoteError):
            await store.create("../escape", "gotcha")
        assert not (store.root.parent / "escape.txt").exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("op", ["get", "delete"])
    async def test_invalid_name_rejected_by_reads_and_deletes(self, store, op):
        with pytest.raises(InvalidNoteError):
            await getattr(store, op)("../secret")

    @pytest.mark.asyncio
    async def test_invalid_name_rejected_by_update(self, store):
        with pytest.raises(InvalidNoteError):
            await store.update("../secret", "text")


class TestLocking:

    @pytest.mark.asyncio
    async def test_concurrent_creates_single_winner(self, store):
        results = await asyncio.gather(
            *(store.create("race", f"writer {i}") for i in range(10)),
            return_exceptions=True,
        )
        successes = [r for r in results if r is None]
        failures = [r for r in results if isinstance(r, NoteAlreadyExistsError)]
        assert len(successes) == 1
        assert len(failures) == 9
        assert (await store.get("race")).startswith("writer ")

    @pytest.mark.asyncio
    async def test_lock_shared_while_held(self, store):
        lock = store._lock_for("todo")
        assert store._lock_for("todo") is lock
        assert store._lock_for("other") is not lock

    @pytest.mark.asyncio
    async def test_locks_are_released_after_use(self, store):
        await store.create("todo", "x")
        await store.get("todo")
        gc.collect()
        assert "todo" not in store._locks
