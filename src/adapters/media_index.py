"""
SQLite Media Index Adapter.

Implements MediaIndexPort with a sqlite table of media records and a
directory of blob files holding the bytes written through record handles.

Handles look like content://media/external/images/media/<id>.

Scan notifications are logged; a notification for a file:// location also
registers that file, the way a platform media scanner would.
"""

from __future__ import annotations

import builtins
import logging
import mimetypes
import os
import sqlite3
from pathlib import Path
from typing import Any, BinaryIO
from urllib.parse import unquote, urlparse

from src.adapters.clock import SystemClock
from src.components.album_share.models import MediaRecord
from src.components.album_share.ports import ClockPort

logger = logging.getLogger(__name__)

MEDIA_CONTENT_URI = "content://media/external/images/media"

RECORD_FIELDS = (
    "title",
    "display_name",
    "mime_type",
    "date_taken",
    "date_modified",
    "date_added",
    "orientation",
    "data",
    "size",
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS media (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    display_name TEXT NOT NULL,
    mime_type TEXT NOT NULL,
    date_taken INTEGER NOT NULL,
    date_modified INTEGER NOT NULL,
    date_added INTEGER NOT NULL,
    orientation INTEGER NOT NULL DEFAULT 0,
    data TEXT,
    size INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_media_display_name ON media(display_name);
CREATE TABLE IF NOT EXISTS scan_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    location TEXT NOT NULL,
    scanned_at INTEGER NOT NULL
);
"""


class MediaIndexError(Exception):
    """Raised for unknown handles or invalid queries."""


def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _row_to_record(row: dict[str, Any]) -> MediaRecord:
    return MediaRecord(uri=f"{MEDIA_CONTENT_URI}/{row['id']}", **row)


class SQLiteMediaIndex:
    def __init__(
        self,
        db_path: str | Path,
        blob_dir: str | Path,
        *,
        clock: ClockPort | None = None,
    ) -> None:
        self.db_path = str(db_path)
        self.blob_dir = Path(blob_dir)
        self.blob_dir.mkdir(parents=True, exist_ok=True)
        self._clock = clock or SystemClock()
        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    def _init_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def _id_from_handle(self, handle: str) -> int:
        prefix = MEDIA_CONTENT_URI + "/"
        if not handle.startswith(prefix) or not handle[len(prefix):].isdigit():
            raise MediaIndexError(f"Not a media handle: {handle}")
        return int(handle[len(prefix):])

    def _blob_path(self, media_id: int) -> Path:
        return self.blob_dir / f"{media_id}.bin"

    # --- MediaIndexPort ---

    def insert(self, values: dict[str, Any]) -> str | None:
        unknown = set(values) - set(RECORD_FIELDS)
        if unknown:
            raise MediaIndexError(f"Unknown media fields: {sorted(unknown)}")

        columns = [f for f in RECORD_FIELDS if f in values]
        placeholders = ", ".join("?" for _ in columns)
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                f"INSERT INTO media ({', '.join(columns)}) VALUES ({placeholders})",
                tuple(values[c] for c in columns),
            )
            conn.commit()
            media_id = cursor.lastrowid
        except sqlite3.IntegrityError:
            logger.warning("Media index rejected record %s", values.get("display_name"))
            return None
        finally:
            conn.close()

        return f"{MEDIA_CONTENT_URI}/{media_id}"

    def open_write(self, handle: str) -> BinaryIO:
        media_id = self._id_from_handle(handle)
        if self.get(handle) is None:
            raise MediaIndexError(f"No media record for {handle}")
        return open(self._blob_path(media_id), "wb")

    def query(self, field: str, value: Any) -> list[MediaRecord]:
        if field not in RECORD_FIELDS and field != "id":
            raise MediaIndexError(f"Cannot query on field: {field}")

        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT * FROM media WHERE {field} = ? ORDER BY id", (value,)
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_record(r) for r in rows]

    def notify_scanned(self, location: str) -> None:
        now = self._clock.now_millis()
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO scan_log (location, scanned_at) VALUES (?, ?)", (location, now)
            )
            conn.commit()
        finally:
            conn.close()

        logger.info("Scan requested for %s", location)
        parsed = urlparse(location)
        if parsed.scheme == "file":
            self._register_file(Path(unquote(parsed.path)), now)

    # --- Extras ---

    def _register_file(self, path: Path, now: int) -> None:
        if not path.is_file():
            logger.warning("Scanned file does not exist: %s", path)
            return
        if self.query("data", str(path)):
            return
        self.insert(
            {
                "title": path.stem,
                "display_name": path.name,
                "mime_type": mimetypes.guess_type(path.name)[0] or "application/octet-stream",
                "date_taken": now,
                "date_modified": int(os.path.getmtime(path) * 1000),
                "date_added": now,
                "orientation": 0,
                "data": str(path),
                "size": os.path.getsize(path),
            }
        )

    def get(self, handle: str) -> MediaRecord | None:
        records = self.query("id", self._id_from_handle(handle))
        return records[0] if records else None

    def read_bytes(self, handle: str) -> bytes:
        blob = self._blob_path(self._id_from_handle(handle))
        if not blob.exists():
            raise MediaIndexError(f"No content written for {handle}")
        with open(blob, "rb") as f:
            return f.read()

    def list(self, *, limit: int = 50, offset: int = 0) -> builtins.list[MediaRecord]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM media ORDER BY id LIMIT ? OFFSET ?", (limit, offset)
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_record(r) for r in rows]

    def scan_log(self) -> builtins.list[tuple[str, int]]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT location, scanned_at FROM scan_log ORDER BY id"
            ).fetchall()
        finally:
            conn.close()
        return [(r["location"], r["scanned_at"]) for r in rows]


def create_media_index(
    db_path: str | Path | None = None,
    blob_dir: str | Path | None = None,
    *,
    env_var: str = "MEDIA_INDEX_PATH",
    default_dir: str = "./media_index",
    clock: ClockPort | None = None,
) -> SQLiteMediaIndex:
    """
    Factory function to create SQLiteMediaIndex from config.

    Args:
        db_path: Explicit database path (overrides env var)
        blob_dir: Explicit blob directory (defaults next to the database)
        env_var: Environment variable naming the index directory
        default_dir: Directory used when nothing is configured
        clock: Clock for scan timestamps

    Returns:
        Configured SQLiteMediaIndex instance
    """
    if db_path is None:
        base = Path(os.environ.get(env_var, default_dir))
        base.mkdir(parents=True, exist_ok=True)
        db_path = base / "media_index.db"
    if blob_dir is None:
        blob_dir = Path(db_path).parent / "blobs"

    return SQLiteMediaIndex(db_path, blob_dir, clock=clock)
