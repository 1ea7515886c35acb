"""
Album share component - permission-gated copy of local media into the
platform's shared media store.
"""

from ._impl import (
    DuplicateChecker,
    IndexedInsertStrategy,
    LegacyDirectCopyStrategy,
    TransferStrategy,
    build_target,
    copy_stream,
    select_capability,
    select_strategy,
    supports_direct_shared_paths,
    validate_source,
)
from .component import (
    PermissionGate,
    ShareSession,
    TransferWorker,
    run,
)
from .models import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_MIME_TYPE,
    DEFAULT_NAME_PREFIX,
    ContextLifetime,
    DirectoryCreateError,
    IndexInsertError,
    InvalidStateError,
    MediaRecord,
    SessionConfig,
    ShareError,
    ShareSettings,
    SourceMissingError,
    StreamIOError,
    TransferErrorKind,
    TransferRequest,
    TransferResult,
    TransferStatus,
    TransferTarget,
)
from .ports import (
    BaseShareListener,
    ClockPort,
    HostContextPort,
    MediaIndexPort,
    PermissionPort,
    PlatformPort,
    ShareListener,
)

__all__ = [
    # Entry point
    "run",
    # Orchestration
    "PermissionGate",
    "ShareSession",
    "TransferWorker",
    # Strategies and helpers
    "DuplicateChecker",
    "IndexedInsertStrategy",
    "LegacyDirectCopyStrategy",
    "TransferStrategy",
    "build_target",
    "copy_stream",
    "select_capability",
    "select_strategy",
    "supports_direct_shared_paths",
    "validate_source",
    # Constants
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_MIME_TYPE",
    "DEFAULT_NAME_PREFIX",
    # Models
    "ContextLifetime",
    "MediaRecord",
    "SessionConfig",
    "ShareSettings",
    "TransferErrorKind",
    "TransferRequest",
    "TransferResult",
    "TransferStatus",
    "TransferTarget",
    # Errors
    "DirectoryCreateError",
    "IndexInsertError",
    "InvalidStateError",
    "ShareError",
    "SourceMissingError",
    "StreamIOError",
    # Ports
    "BaseShareListener",
    "ClockPort",
    "HostContextPort",
    "MediaIndexPort",
    "PermissionPort",
    "PlatformPort",
    "ShareListener",
]
