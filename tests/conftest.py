import shutil
from pathlib import Path

import pytest

from src.adapters.permissions import StaticPermissionGrantor
from src.app_shell.context import ShareContext
from src.rules.loader import load_rules

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def rules():
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def photo(tmp_path):
    """A 500 byte source photo outside the shared area."""
    src_dir = tmp_path / "camera_roll"
    src_dir.mkdir()
    path = src_dir / "photo.jpg"
    path.write_bytes(bytes(range(250)) * 2)
    return path


@pytest.fixture
def make_ctx(tmp_path, rules, monkeypatch):
    """
    Builds a ShareContext rooted in tmp_path for a given platform version
    and permission answer.
    """
    monkeypatch.delenv("SHARED_STORAGE_ROOT", raising=False)
    monkeypatch.delenv("PLATFORM_SDK_VERSION", raising=False)

    def _make(sdk_version, granted=True):
        base = tmp_path / f"host_{sdk_version}"
        if base.exists():
            shutil.rmtree(base)
        base.mkdir()
        return ShareContext.create(
            rules,
            permissions=StaticPermissionGrantor(granted),
            sdk_version=sdk_version,
            base_dir=base,
        )

    return _make
