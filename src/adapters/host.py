"""
Local host context.

Bundles the collaborators a share session borrows. A caller-scoped context
points at the application-wide context it was derived from.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from src.adapters.clock import SystemClock
from src.components.album_share.ports import ClockPort, MediaIndexPort, PlatformPort


@dataclass(frozen=True)
class LocalHostContext:
    media_index: MediaIndexPort
    platform: PlatformPort
    shared_root: Path
    clock: ClockPort = field(default_factory=SystemClock)
    parent: LocalHostContext | None = None

    def application_context(self) -> LocalHostContext:
        return self.parent or self

    def for_caller(self) -> LocalHostContext:
        """Derive a caller-scoped context from this application context."""
        return replace(self, parent=self.application_context())

    @property
    def is_application_wide(self) -> bool:
        return self.parent is None
