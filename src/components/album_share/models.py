"""
Album share component models.

Requests, targets, terminal results, session configuration and the
transfer error taxonomy.

Invariants:
- A TransferRequest is immutable once built and travels explicitly
  through the call chain
- Exactly one TransferResult is produced per request
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

DEFAULT_NAME_PREFIX = "album_"
DEFAULT_MIME_TYPE = "image/jpeg"
DEFAULT_BUFFER_SIZE = 1024


class ContextLifetime(str, Enum):
    """Which host handle a session keeps."""

    BOUND_TO_CALLER = "bound_to_caller"
    APPLICATION_WIDE = "application_wide"


class TransferStatus(Enum):
    """Terminal outcome of a transfer request."""

    SUCCESS = "success"
    DENIED = "denied"
    FAILED = "failed"
    SKIPPED = "skipped"  # Display name already present in the index


class TransferErrorKind(Enum):
    """Why a transfer failed."""

    SOURCE_MISSING = "source_missing"
    PERMISSION_DENIED = "permission_denied"
    DIRECTORY_CREATE_FAILED = "directory_create_failed"
    STREAM_IO_ERROR = "stream_io_error"
    INDEX_INSERT_FAILED = "index_insert_failed"


# --- Errors ---


class ShareError(Exception):
    """Base class for transfer errors. Carries the failure kind."""

    kind: TransferErrorKind = TransferErrorKind.STREAM_IO_ERROR

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class SourceMissingError(ShareError):
    kind = TransferErrorKind.SOURCE_MISSING

    def __init__(self, path: str) -> None:
        super().__init__(f"Source file not found: {path}", path)


class DirectoryCreateError(ShareError):
    kind = TransferErrorKind.DIRECTORY_CREATE_FAILED

    def __init__(self, path: str) -> None:
        super().__init__(f"Could not create shared directory: {path}", path)


class StreamIOError(ShareError):
    kind = TransferErrorKind.STREAM_IO_ERROR


class IndexInsertError(ShareError):
    kind = TransferErrorKind.INDEX_INSERT_FAILED


class InvalidStateError(RuntimeError):
    """Raised to the caller when a session is used after release or reconfigured mid-flight."""


# --- Requests and targets ---


@dataclass(frozen=True)
class SessionConfig:
    """Per-session configuration. Replaced only while no transfer is in flight."""

    name_prefix: str = DEFAULT_NAME_PREFIX
    suppress_duplicates: bool = False
    context_lifetime: ContextLifetime = ContextLifetime.BOUND_TO_CALLER


@dataclass(frozen=True)
class ShareSettings:
    """Strategy and permission settings shared by every session of a host."""

    buffer_size: int = DEFAULT_BUFFER_SIZE
    legacy_relative_dir: str = "DCIM/Camera"
    mime_type: str = DEFAULT_MIME_TYPE
    infer_mime_type: bool = False
    scoped_storage_version: int = 29  # direct shared paths writable below this
    media_permission_version: int = 33  # scoped read capability from this
    broad_write_capability: str = "android.permission.WRITE_EXTERNAL_STORAGE"
    scoped_read_capability: str = "android.permission.READ_MEDIA_IMAGES"


@dataclass(frozen=True)
class TransferRequest:
    """One transfer invocation."""

    source_path: str
    name_prefix: str = DEFAULT_NAME_PREFIX
    suppress_duplicates: bool = False

    @property
    def filename(self) -> str:
        return Path(self.source_path).name

    @property
    def display_name(self) -> str:
        return self.name_prefix + self.filename


@dataclass(frozen=True)
class TransferTarget:
    """Metadata record inserted into the media index."""

    title: str
    display_name: str
    mime_type: str
    date_taken: int
    date_modified: int
    date_added: int
    orientation: int
    data: str
    size: int

    def to_values(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "display_name": self.display_name,
            "mime_type": self.mime_type,
            "date_taken": self.date_taken,
            "date_modified": self.date_modified,
            "date_added": self.date_added,
            "orientation": self.orientation,
            "data": self.data,
            "size": self.size,
        }


@dataclass(frozen=True)
class MediaRecord:
    """A row of the platform media index."""

    id: int
    uri: str
    title: str
    display_name: str
    mime_type: str
    date_taken: int
    date_modified: int
    date_added: int
    orientation: int = 0
    data: str | None = None
    size: int = 0


# --- Results ---


@dataclass(frozen=True)
class TransferResult:
    """Terminal result of a transfer. Build with the classmethods."""

    status: TransferStatus
    path: str
    location: str | None = None
    error_kind: TransferErrorKind | None = None
    error: BaseException | None = field(default=None, compare=False)

    @classmethod
    def success(cls, path: str, location: str | None = None) -> TransferResult:
        return cls(status=TransferStatus.SUCCESS, path=path, location=location)

    @classmethod
    def denied(cls, path: str) -> TransferResult:
        return cls(
            status=TransferStatus.DENIED,
            path=path,
            error_kind=TransferErrorKind.PERMISSION_DENIED,
        )

    @classmethod
    def failed(
        cls,
        path: str,
        kind: TransferErrorKind,
        error: BaseException | None = None,
    ) -> TransferResult:
        return cls(status=TransferStatus.FAILED, path=path, error_kind=kind, error=error)

    @classmethod
    def skipped(cls, path: str) -> TransferResult:
        return cls(status=TransferStatus.SKIPPED, path=path)

    @property
    def ok(self) -> bool:
        return self.status == TransferStatus.SUCCESS
