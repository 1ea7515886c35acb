"""
Album share internals: source validation, duplicate detection and the two
storage strategies.

Invariants:
- Streams are closed on every exit path
- IndexedInsertStrategy inserts the metadata record before any byte is written
- The duplicate check never blocks a transfer on a failing query
"""

from __future__ import annotations

import logging
import mimetypes
import os
from pathlib import Path
from typing import BinaryIO, Protocol

from .models import (
    DirectoryCreateError,
    IndexInsertError,
    ShareSettings,
    SourceMissingError,
    StreamIOError,
    TransferRequest,
    TransferTarget,
)
from .ports import ClockPort, HostContextPort, MediaIndexPort

logger = logging.getLogger(__name__)

DISPLAY_NAME_FIELD = "display_name"


# --- Pure helpers ---


def validate_source(path: str) -> Path:
    """Return the source as a Path. Raises SourceMissingError if it is not a file."""
    source = Path(path)
    if not source.is_file():
        raise SourceMissingError(path)
    return source


def copy_stream(src: BinaryIO, dst: BinaryIO, buffer_size: int) -> int:
    """Copy src to dst in buffer_size chunks. Returns bytes copied."""
    total = 0
    while True:
        chunk = src.read(buffer_size)
        if not chunk:
            break
        dst.write(chunk)
        total += len(chunk)
    return total


def supports_direct_shared_paths(sdk_version: int, settings: ShareSettings) -> bool:
    """True when the platform still lets apps write shared storage paths directly."""
    return sdk_version < settings.scoped_storage_version


def select_capability(sdk_version: int, settings: ShareSettings) -> str:
    """Pick the permission to request for this platform version."""
    if sdk_version < settings.media_permission_version:
        return settings.broad_write_capability
    return settings.scoped_read_capability


def build_target(
    request: TransferRequest,
    source: Path,
    now_millis: int,
    settings: ShareSettings,
) -> TransferTarget:
    """Build the index record for a request."""
    mime_type = settings.mime_type
    if settings.infer_mime_type:
        mime_type = mimetypes.guess_type(source.name)[0] or settings.mime_type

    return TransferTarget(
        title=source.name,
        display_name=request.display_name,
        mime_type=mime_type,
        date_taken=now_millis,
        date_modified=now_millis,
        date_added=now_millis,
        orientation=0,
        data=str(source.absolute()),
        size=os.path.getsize(source),
    )


# --- Duplicate detection ---


class DuplicateChecker:
    """Looks up a display name in the media index."""

    def __init__(self, media_index: MediaIndexPort) -> None:
        self._media_index = media_index

    def exists(self, prefix: str, filename: str) -> bool:
        display_name = prefix + filename
        try:
            records = self._media_index.query(DISPLAY_NAME_FIELD, display_name)
        except Exception:
            # Degrade to "not present": a broken query must not block the transfer
            logger.warning("Duplicate query failed for %s", display_name, exc_info=True)
            return False
        return len(records) > 0


# --- Strategies ---


class TransferStrategy(Protocol):
    def transfer(self, request: TransferRequest, source: Path) -> str:
        """Copy source into shared media. Returns the new location (URI or handle)."""
        ...


class LegacyDirectCopyStrategy:
    """
    Copy bytes straight into a shared-storage directory.

    The new file is announced with a scan notification; the index picks it
    up on its own schedule.
    """

    def __init__(
        self,
        target_dir: Path,
        media_index: MediaIndexPort,
        buffer_size: int,
    ) -> None:
        self.target_dir = target_dir
        self._media_index = media_index
        self._buffer_size = buffer_size

    def _ensure_target_dir(self) -> None:
        try:
            self.target_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.warning("mkdir failed for %s", self.target_dir, exc_info=True)
        if not self.target_dir.is_dir():
            raise DirectoryCreateError(str(self.target_dir))

    def transfer(self, request: TransferRequest, source: Path) -> str:
        self._ensure_target_dir()
        target = self.target_dir / request.display_name

        try:
            with open(source, "rb") as fin, open(target, "wb") as fout:
                copied = copy_stream(fin, fout, self._buffer_size)
                fout.flush()
        except OSError as e:
            raise StreamIOError(f"Copy to {target} failed: {e}", request.source_path) from e

        location = target.resolve().as_uri()
        logger.debug("Copied %d bytes to %s", copied, target)
        self._media_index.notify_scanned(location)
        return location


class IndexedInsertStrategy:
    """Register the record in the media index, then stream bytes into its handle."""

    def __init__(
        self,
        media_index: MediaIndexPort,
        clock: ClockPort,
        settings: ShareSettings,
    ) -> None:
        self._media_index = media_index
        self._clock = clock
        self._settings = settings

    def _insert(self, target: TransferTarget, path: str) -> str:
        try:
            handle = self._media_index.insert(target.to_values())
        except Exception as e:
            raise IndexInsertError(f"Index rejected {target.display_name}: {e}", path) from e
        if handle is None:
            raise IndexInsertError(f"Index returned no handle for {target.display_name}", path)
        return handle

    def transfer(self, request: TransferRequest, source: Path) -> str:
        target = build_target(request, source, self._clock.now_millis(), self._settings)
        handle = self._insert(target, request.source_path)

        try:
            with open(source, "rb") as fin, self._media_index.open_write(handle) as fout:
                copied = copy_stream(fin, fout, self._settings.buffer_size)
        except OSError as e:
            raise StreamIOError(f"Write to {handle} failed: {e}", request.source_path) from e

        logger.debug("Streamed %d bytes into %s", copied, handle)
        self._media_index.notify_scanned(handle)
        return handle


def select_strategy(context: HostContextPort, settings: ShareSettings) -> TransferStrategy:
    """Choose the storage strategy for the host's platform."""
    if supports_direct_shared_paths(context.platform.sdk_version(), settings):
        return LegacyDirectCopyStrategy(
            context.shared_root / settings.legacy_relative_dir,
            context.media_index,
            settings.buffer_size,
        )
    return IndexedInsertStrategy(context.media_index, context.clock, settings)
