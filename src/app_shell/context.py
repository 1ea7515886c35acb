from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from src.adapters.clock import SystemClock
from src.adapters.host import LocalHostContext
from src.adapters.media_index import SQLiteMediaIndex, create_media_index
from src.adapters.permissions import StaticPermissionGrantor
from src.adapters.platform_info import create_platform
from src.app_shell.config import (
    resolve_shared_root,
    session_config_from_rules,
    settings_from_rules,
)
from src.components.album_share import (
    PermissionPort,
    SessionConfig,
    ShareListener,
    ShareSession,
    ShareSettings,
)
from src.rules.models import Rules


@dataclass
class ShareContext:
    host: LocalHostContext
    media_index: SQLiteMediaIndex
    permissions: PermissionPort
    settings: ShareSettings
    session_defaults: SessionConfig
    rules: Rules

    @classmethod
    def create(
        cls,
        rules: Rules,
        *,
        permissions: PermissionPort | None = None,
        sdk_version: int | None = None,
        base_dir: Path | None = None,
    ) -> ShareContext:
        share_rules = rules.album_share
        clock = SystemClock()

        db_path = Path(share_rules.indexed.db_path)
        blob_dir = Path(share_rules.indexed.blob_dir)
        shared_root = resolve_shared_root(share_rules)
        if base_dir is not None:
            db_path = base_dir / db_path
            blob_dir = base_dir / blob_dir
            shared_root = base_dir / shared_root
        db_path.parent.mkdir(parents=True, exist_ok=True)

        media_index = create_media_index(db_path, blob_dir, clock=clock)
        platform = create_platform(
            sdk_version, default=share_rules.platform.sdk_version
        )
        app_host = LocalHostContext(
            media_index=media_index,
            platform=platform,
            shared_root=shared_root,
            clock=clock,
        )

        return cls(
            host=app_host.for_caller(),
            media_index=media_index,
            permissions=permissions or StaticPermissionGrantor(True),
            settings=settings_from_rules(share_rules),
            session_defaults=session_config_from_rules(share_rules),
            rules=rules,
        )

    def new_session(self, listener: ShareListener | None = None) -> ShareSession:
        return ShareSession(
            self.host,
            self.permissions,
            settings=self.settings,
            config=self.session_defaults,
            listener=listener,
        )
