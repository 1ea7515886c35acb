"""
SQLite media index adapter tests.

Verifies insert/open-write/query/notify behaviour of the MediaIndexPort
implementation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from src.adapters.clock import FixedClock
from src.adapters.media_index import (
    MEDIA_CONTENT_URI,
    MediaIndexError,
    SQLiteMediaIndex,
    create_media_index,
)

NOW = 1_700_000_000_000


@pytest.fixture
def index(tmp_path: Path) -> SQLiteMediaIndex:
    return SQLiteMediaIndex(tmp_path / "index.db", tmp_path / "blobs", clock=FixedClock(NOW))


def values(**overrides: Any) -> dict[str, Any]:
    base = {
        "title": "photo.jpg",
        "display_name": "album_photo.jpg",
        "mime_type": "image/jpeg",
        "date_taken": NOW,
        "date_modified": NOW,
        "date_added": NOW,
        "orientation": 0,
        "data": "/tmp/photo.jpg",
        "size": 500,
    }
    base.update(overrides)
    return base


class TestInsertAndQuery:
    def test_insert_returns_handle(self, index: SQLiteMediaIndex) -> None:
        handle = index.insert(values())
        assert handle == f"{MEDIA_CONTENT_URI}/1"

    def test_query_by_display_name(self, index: SQLiteMediaIndex) -> None:
        handle = index.insert(values())
        index.insert(values(display_name="album_other.jpg"))

        records = index.query("display_name", "album_photo.jpg")

        assert len(records) == 1
        record = records[0]
        assert record.uri == handle
        assert record.mime_type == "image/jpeg"
        assert record.size == 500
        assert record.date_added == NOW

    def test_query_no_match(self, index: SQLiteMediaIndex) -> None:
        assert index.query("display_name", "missing.jpg") == []

    def test_query_unknown_field(self, index: SQLiteMediaIndex) -> None:
        with pytest.raises(MediaIndexError):
            index.query("display_name; DROP TABLE media", "x")

    def test_insert_unknown_field(self, index: SQLiteMediaIndex) -> None:
        with pytest.raises(MediaIndexError):
            index.insert(values(colour="red"))

    def test_insert_missing_required_column_is_rejected(self, index: SQLiteMediaIndex) -> None:
        incomplete = values()
        del incomplete["mime_type"]
        assert index.insert(incomplete) is None

    def test_list_and_get(self, index: SQLiteMediaIndex) -> None:
        first = index.insert(values())
        index.insert(values(display_name="album_b.jpg"))

        assert [r.display_name for r in index.list()] == ["album_photo.jpg", "album_b.jpg"]
        assert [r.display_name for r in index.list(limit=1, offset=1)] == ["album_b.jpg"]
        record = index.get(first)
        assert record is not None
        assert record.display_name == "album_photo.jpg"


class TestOpenWrite:
    def test_write_and_read_back(self, index: SQLiteMediaIndex) -> None:
        handle = index.insert(values())
        with index.open_write(handle) as out:
            out.write(b"jpeg bytes")

        assert index.read_bytes(handle) == b"jpeg bytes"

    def test_unknown_handle(self, index: SQLiteMediaIndex) -> None:
        with pytest.raises(MediaIndexError):
            index.open_write(f"{MEDIA_CONTENT_URI}/99")

    def test_malformed_handle(self, index: SQLiteMediaIndex) -> None:
        with pytest.raises(MediaIndexError):
            index.open_write("file:///etc/passwd")

    def test_read_before_write(self, index: SQLiteMediaIndex) -> None:
        handle = index.insert(values())
        with pytest.raises(MediaIndexError):
            index.read_bytes(handle)


class TestNotifyScanned:
    def test_handle_notification_is_logged(self, index: SQLiteMediaIndex) -> None:
        handle = index.insert(values())
        index.notify_scanned(handle)

        assert index.scan_log() == [(handle, NOW)]
        assert len(index.list()) == 1

    def test_file_notification_registers_file(self, index: SQLiteMediaIndex, tmp_path: Path) -> None:
        shared = tmp_path / "DCIM" / "Camera" / "album_photo.jpg"
        shared.parent.mkdir(parents=True)
        shared.write_bytes(b"x" * 500)

        index.notify_scanned(shared.resolve().as_uri())

        records = index.query("display_name", "album_photo.jpg")
        assert len(records) == 1
        assert records[0].size == 500
        assert records[0].data == str(shared.resolve())
        assert records[0].mime_type == "image/jpeg"

    def test_rescan_does_not_duplicate(self, index: SQLiteMediaIndex, tmp_path: Path) -> None:
        shared = tmp_path / "clip.mp4"
        shared.write_bytes(b"\x00" * 10)
        uri = shared.resolve().as_uri()

        index.notify_scanned(uri)
        index.notify_scanned(uri)

        assert len(index.list()) == 1
        assert len(index.scan_log()) == 2

    def test_missing_file_notification(self, index: SQLiteMediaIndex, tmp_path: Path) -> None:
        index.notify_scanned((tmp_path / "gone.jpg").as_uri())
        assert index.list() == []


class TestFactory:
    def test_env_var_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MEDIA_INDEX_PATH", str(tmp_path / "idx"))

        index = create_media_index()

        assert Path(index.db_path) == tmp_path / "idx" / "media_index.db"
        assert index.blob_dir == tmp_path / "idx" / "blobs"

    def test_explicit_paths(self, tmp_path: Path) -> None:
        index = create_media_index(tmp_path / "a.db", tmp_path / "b")
        assert index.blob_dir == tmp_path / "b"
        assert index.blob_dir.is_dir()
