"""
Album share component - permission-gated transfer of a local media file
into the platform's shared media store.

Flow: ShareSession.transfer -> PermissionGate -> TransferWorker (own thread)
-> validate source -> optional duplicate check -> storage strategy ->
terminal result delivered to the listener and the returned future.

Invariants:
- Every transfer call produces exactly one terminal result
- Denial short-circuits before any filesystem or index access
- Transfer errors never escape the worker thread
- A released session rejects further calls with InvalidStateError
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import replace
from functools import partial

from ._impl import DuplicateChecker, select_capability, select_strategy, validate_source
from .models import (
    ContextLifetime,
    InvalidStateError,
    SessionConfig,
    ShareError,
    ShareSettings,
    TransferErrorKind,
    TransferRequest,
    TransferResult,
    TransferStatus,
)
from .ports import HostContextPort, PermissionPort, ShareListener

logger = logging.getLogger(__name__)

_worker_ids = itertools.count(1)


class PermissionGate:
    """Requests one capability and dispatches exactly one continuation."""

    def __init__(self, permissions: PermissionPort) -> None:
        self._permissions = permissions

    def request(
        self,
        capability: str,
        on_granted: Callable[[], None],
        on_denied: Callable[[], None],
    ) -> None:
        future = self._permissions.request_permission(capability)
        future.add_done_callback(partial(self._resolve, capability, on_granted, on_denied))

    def _resolve(
        self,
        capability: str,
        on_granted: Callable[[], None],
        on_denied: Callable[[], None],
        future: Future[bool],
    ) -> None:
        granted = False
        if future.cancelled():
            logger.warning("Permission request for %s was cancelled", capability)
        elif future.exception() is not None:
            logger.warning(
                "Permission request for %s failed: %s", capability, future.exception()
            )
        else:
            granted = bool(future.result())

        if granted:
            on_granted()
        else:
            logger.info("Permission %s denied", capability)
            on_denied()


class TransferWorker:
    """
    Runs one transfer off the calling thread.

    The worker is the failure boundary: every exception raised while
    validating, checking duplicates or copying becomes a FAILED result.
    """

    def __init__(self, context: HostContextPort, settings: ShareSettings) -> None:
        self._context = context
        self._settings = settings

    def execute(self, request: TransferRequest) -> TransferResult:
        path = request.source_path
        try:
            source = validate_source(path)

            if request.suppress_duplicates:
                checker = DuplicateChecker(self._context.media_index)
                if checker.exists(request.name_prefix, request.filename):
                    logger.info("Skipping %s: %s already shared", path, request.display_name)
                    return TransferResult.skipped(path)

            strategy = select_strategy(self._context, self._settings)
            location = strategy.transfer(request, source)
        except ShareError as e:
            logger.warning("Transfer of %s failed (%s): %s", path, e.kind.value, e)
            return TransferResult.failed(path, e.kind, e)
        except Exception as e:
            logger.exception("Unexpected error transferring %s", path)
            return TransferResult.failed(path, TransferErrorKind.STREAM_IO_ERROR, e)

        logger.info("Shared %s as %s", path, location)
        return TransferResult.success(path, location)

    def start(
        self,
        request: TransferRequest,
        on_result: Callable[[TransferResult], None],
    ) -> threading.Thread:
        thread = threading.Thread(
            target=self._run,
            args=(request, on_result),
            name=f"album-share-{next(_worker_ids)}",
            daemon=True,
        )
        thread.start()
        return thread

    def _run(self, request: TransferRequest, on_result: Callable[[TransferResult], None]) -> None:
        on_result(self.execute(request))


class ShareSession:
    """
    Public entry point for sharing files to the album.

    Each transfer call builds its own TransferRequest, so overlapping calls
    are independent. Configuration can only change while nothing is in
    flight.
    """

    def __init__(
        self,
        context: HostContextPort,
        permissions: PermissionPort,
        *,
        settings: ShareSettings | None = None,
        config: SessionConfig | None = None,
        listener: ShareListener | None = None,
    ) -> None:
        self._settings = settings or ShareSettings()
        self._config = config or SessionConfig()
        self._listener = listener
        self._lock = threading.Lock()
        self._in_flight = 0

        if self._config.context_lifetime == ContextLifetime.APPLICATION_WIDE:
            context = context.application_context()
        self._context: HostContextPort | None = context
        self._gate: PermissionGate | None = PermissionGate(permissions)

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def released(self) -> bool:
        return self._context is None

    # --- Configuration ---

    def set_listener(self, listener: ShareListener | None) -> None:
        self._listener = listener

    def set_name_prefix(self, prefix: str) -> None:
        self._reconfigure(name_prefix=prefix)

    def enable_duplicate_suppression(self) -> None:
        self._reconfigure(suppress_duplicates=True)

    def enable_application_context(self) -> None:
        """Swap the caller-bound context for the application-wide one."""
        with self._lock:
            context = self._require_idle()
            self._context = context.application_context()
            self._config = replace(
                self._config, context_lifetime=ContextLifetime.APPLICATION_WIDE
            )

    def _reconfigure(self, **changes: object) -> None:
        with self._lock:
            self._require_idle()
            self._config = replace(self._config, **changes)

    def _require_idle(self) -> HostContextPort:
        if self._context is None:
            raise InvalidStateError("Share session has been released")
        if self._in_flight:
            raise InvalidStateError(
                f"Cannot reconfigure while {self._in_flight} transfer(s) are in flight"
            )
        return self._context

    # --- Transfer ---

    def transfer(self, source_path: str) -> Future[TransferResult]:
        """
        Share one file. Returns immediately.

        The returned future resolves with the same terminal result the
        listener receives.
        """
        with self._lock:
            if self._context is None or self._gate is None:
                raise InvalidStateError("Share session has been released")
            context, gate = self._context, self._gate
            request = TransferRequest(
                source_path=source_path,
                name_prefix=self._config.name_prefix,
                suppress_duplicates=self._config.suppress_duplicates,
            )
            self._in_flight += 1

        result_future: Future[TransferResult] = Future()
        finish = partial(self._finish, result_future)
        worker = TransferWorker(context, self._settings)

        try:
            capability = select_capability(context.platform.sdk_version(), self._settings)
            gate.request(
                capability,
                on_granted=partial(self._on_granted, request, worker, finish),
                on_denied=partial(finish, TransferResult.denied(source_path)),
            )
        except Exception:
            logger.exception("Permission request for %s could not be made", source_path)
            finish(TransferResult.denied(source_path))

        return result_future

    def release(self) -> None:
        """Drop the host context and permission handle. Later calls fail fast."""
        with self._lock:
            self._context = None
            self._gate = None

    def _on_granted(
        self,
        request: TransferRequest,
        worker: TransferWorker,
        finish: Callable[[TransferResult], None],
    ) -> None:
        self._notify("on_start", request.source_path)
        try:
            worker.start(request, finish)
        except RuntimeError as e:
            logger.exception("Could not start transfer worker")
            finish(TransferResult.failed(request.source_path, TransferErrorKind.STREAM_IO_ERROR, e))

    def _finish(self, result_future: Future[TransferResult], result: TransferResult) -> None:
        try:
            self._deliver(result)
        finally:
            with self._lock:
                self._in_flight -= 1
            result_future.set_result(result)

    def _deliver(self, result: TransferResult) -> None:
        if result.status == TransferStatus.DENIED:
            self._notify("on_denied", result.path)
        elif result.status == TransferStatus.SKIPPED:
            self._notify("on_skipped", result.path)
        elif result.status == TransferStatus.SUCCESS:
            self._notify("on_end", None, result.path)
        else:
            error = result.error or ShareError(
                f"Transfer failed: {result.error_kind}", result.path
            )
            self._notify("on_end", error, result.path)

    def _notify(self, event: str, *args: object) -> None:
        listener = self._listener
        if listener is None:
            return
        try:
            getattr(listener, event)(*args)
        except Exception:
            logger.exception("Share listener %s raised", event)


# --- Entry point ---


def run(
    source_path: str,
    context: HostContextPort,
    permissions: PermissionPort,
    *,
    settings: ShareSettings | None = None,
    config: SessionConfig | None = None,
    listener: ShareListener | None = None,
    timeout: float | None = None,
) -> TransferResult:
    """
    Share a single file and wait for the terminal result.

    Convenience wrapper for scripts and the CLI; the session is released
    afterwards.
    """
    session = ShareSession(
        context, permissions, settings=settings, config=config, listener=listener
    )
    try:
        return session.transfer(source_path).result(timeout=timeout)
    finally:
        session.release()
