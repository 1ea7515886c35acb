"""
Album share component port definitions.

The permission subsystem, the platform media index, platform capability
and the host context are external collaborators; the listener is the
interface this component produces for its caller.
"""

from __future__ import annotations

from concurrent.futures import Future
from pathlib import Path
from typing import Any, BinaryIO, Protocol

from .models import MediaRecord


class PermissionPort(Protocol):
    """Runtime permission subsystem."""

    def request_permission(self, capability: str) -> Future[bool]:
        """
        Ask for a capability.

        The returned future resolves exactly once, possibly on a thread the
        caller does not control.
        """
        ...


class MediaIndexPort(Protocol):
    """Platform media index (content catalog)."""

    def insert(self, values: dict[str, Any]) -> str | None:
        """Insert a metadata record. Returns an opaque handle (URI) or None if rejected."""
        ...

    def open_write(self, handle: str) -> BinaryIO:
        """Open a writable stream for the record behind handle."""
        ...

    def query(self, field: str, value: Any) -> list[MediaRecord]:
        """Return records whose field equals value."""
        ...

    def notify_scanned(self, location: str) -> None:
        """Fire-and-forget request to (re)index a file URI or handle."""
        ...


class PlatformPort(Protocol):
    """Platform capability information."""

    def sdk_version(self) -> int:
        """Get the platform API level."""
        ...


class ClockPort(Protocol):
    def now_millis(self) -> int:
        """Current time as epoch milliseconds."""
        ...


class HostContextPort(Protocol):
    """Hosting context a session borrows its collaborators from."""

    @property
    def media_index(self) -> MediaIndexPort: ...

    @property
    def platform(self) -> PlatformPort: ...

    @property
    def shared_root(self) -> Path: ...

    @property
    def clock(self) -> ClockPort: ...

    def application_context(self) -> HostContextPort:
        """Get the longer-lived, application-wide context."""
        ...


class ShareListener(Protocol):
    """Lifecycle callbacks delivered by a session."""

    def on_start(self, path: str) -> None: ...

    def on_denied(self, path: str) -> None: ...

    def on_end(self, error: BaseException | None, path: str) -> None:
        """Transfer finished; error is None on success."""
        ...

    def on_skipped(self, path: str) -> None: ...


class BaseShareListener:
    """No-op listener; override what you need."""

    def on_start(self, path: str) -> None:
        pass

    def on_denied(self, path: str) -> None:
        pass

    def on_end(self, error: BaseException | None, path: str) -> None:
        pass

    def on_skipped(self, path: str) -> None:
        pass
