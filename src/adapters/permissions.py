"""
Permission subsystem adapters.

StaticPermissionGrantor answers from a fixed set of granted capabilities
and delivers the answer on its own thread, like a platform callback.
ConsolePermissionPrompt asks the user on the terminal.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future
from typing import TextIO

logger = logging.getLogger(__name__)


class StaticPermissionGrantor:
    """
    Grants capabilities from a fixed allow-list.

    Args:
        granted: True to grant everything, False to deny everything, or the
                 capabilities to grant
        deliver_async: Resolve futures on a separate thread (default) or inline
    """

    def __init__(
        self,
        granted: bool | Iterable[str] = True,
        *,
        deliver_async: bool = True,
    ) -> None:
        self._granted = granted if isinstance(granted, bool) else frozenset(granted)
        self._deliver_async = deliver_async
        self.requests: list[str] = []

    def is_granted(self, capability: str) -> bool:
        if isinstance(self._granted, bool):
            return self._granted
        return capability in self._granted

    def request_permission(self, capability: str) -> Future[bool]:
        self.requests.append(capability)
        future: Future[bool] = Future()
        granted = self.is_granted(capability)

        if self._deliver_async:
            threading.Thread(
                target=future.set_result,
                args=(granted,),
                name="permission-callback",
                daemon=True,
            ).start()
        else:
            future.set_result(granted)
        return future


class ConsolePermissionPrompt:
    """Asks on the terminal; anything but y/yes is a denial."""

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output: TextIO | None = None,
    ) -> None:
        self._input = input_fn
        self._output = output or sys.stdout

    def request_permission(self, capability: str) -> Future[bool]:
        future: Future[bool] = Future()
        try:
            answer = self._input(f"Allow {capability}? [y/N] ")
        except EOFError:
            answer = ""
        granted = answer.strip().lower() in ("y", "yes")
        if not granted:
            print(f"Permission {capability} denied.", file=self._output)
        logger.debug("Console answer for %s: %s", capability, granted)
        future.set_result(granted)
        return future
