import os
import sys
from pathlib import Path

from src.components.album_share.models import SessionConfig, ShareSettings
from src.rules.models import AlbumShareRules, Rules


def settings_from_rules(rules: AlbumShareRules) -> ShareSettings:
    return ShareSettings(
        buffer_size=rules.transfer.buffer_size,
        legacy_relative_dir=rules.legacy.relative_dir,
        mime_type=rules.indexed.mime_type,
        infer_mime_type=rules.indexed.infer_mime_type,
        scoped_storage_version=rules.platform.scoped_storage_version,
        media_permission_version=rules.platform.media_permission_version,
        broad_write_capability=rules.permissions.broad_write,
        scoped_read_capability=rules.permissions.scoped_read,
    )


def session_config_from_rules(rules: AlbumShareRules) -> SessionConfig:
    return SessionConfig(
        name_prefix=rules.session.name_prefix,
        suppress_duplicates=rules.session.suppress_duplicates,
        context_lifetime=rules.session.context_lifetime,
    )


def resolve_shared_root(rules: AlbumShareRules, env_var: str = "SHARED_STORAGE_ROOT") -> Path:
    return Path(os.environ.get(env_var, rules.legacy.shared_root))


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.
    """
    ops = rules.ops

    # 1. Check Required Env
    missing = [env_var for env_var in ops.required_env if env_var not in os.environ]
    if missing:
        print(
            f"CRITICAL: Missing required environment variables: {', '.join(missing)}",
            file=sys.stderr,
        )
        sys.exit(1)

    # 2. Check the shared root can be written (legacy strategy copies there)
    if ops.shared_root_writable_required:
        shared_root = resolve_shared_root(rules.album_share)
        candidate = shared_root if shared_root.exists() else shared_root.parent
        if not os.access(candidate.resolve(), os.W_OK):
            print(f"CRITICAL: Shared storage root not writable: {shared_root}", file=sys.stderr)
            sys.exit(1)
