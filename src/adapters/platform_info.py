"""
Platform capability adapter.

Reports the API level the share strategies branch on. The level comes from
configuration or the PLATFORM_SDK_VERSION environment variable.
"""

from __future__ import annotations

import os

DEFAULT_SDK_VERSION = 33


class StaticPlatform:
    def __init__(self, sdk_version: int) -> None:
        self._sdk_version = sdk_version

    def sdk_version(self) -> int:
        return self._sdk_version


def create_platform(
    sdk_version: int | None = None,
    *,
    env_var: str = "PLATFORM_SDK_VERSION",
    default: int = DEFAULT_SDK_VERSION,
) -> StaticPlatform:
    """
    Factory function to create a StaticPlatform.

    Args:
        sdk_version: Explicit API level (overrides env var)
        env_var: Environment variable holding the API level
        default: API level used when nothing is configured

    Raises:
        ValueError: If the environment variable is not an integer
    """
    if sdk_version is None:
        raw = os.environ.get(env_var)
        if raw is None:
            sdk_version = default
        else:
            try:
                sdk_version = int(raw)
            except ValueError as e:
                raise ValueError(f"{env_var} must be an integer, got {raw!r}") from e

    return StaticPlatform(sdk_version)
