"""
Rules loading tests.

Verifies that rules.yaml loads into the pydantic models and that invalid
files fail fast with ValueError.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from src.components.album_share.models import ContextLifetime
from src.rules.loader import load_rules

PROJECT_ROOT = Path(__file__).parent.parent.parent


def write_rules(tmp_path: Path, rules: dict[str, Any]) -> Path:
    path = tmp_path / "rules.yaml"
    with open(path, "w") as f:
        yaml.dump(rules, f)
    return path


def minimal_rules() -> dict[str, Any]:
    return {
        "project": {
            "slug": "album-share",
            "rules_version": "1.0",
            "required_sections": ["project", "album_share"],
        },
        "album_share": {},
    }


class TestRulesLoading:
    def test_load_project_rules_file(self) -> None:
        rules = load_rules(PROJECT_ROOT / "rules.yaml")

        share = rules.album_share
        assert rules.project.slug == "album-share"
        assert share.session.name_prefix == "album_"
        assert share.session.suppress_duplicates is False
        assert share.session.context_lifetime == ContextLifetime.BOUND_TO_CALLER
        assert share.transfer.buffer_size == 1024
        assert share.indexed.mime_type == "image/jpeg"
        assert share.platform.scoped_storage_version == 29
        assert share.platform.media_permission_version == 33

    def test_defaults_fill_missing_sections(self, tmp_path: Path) -> None:
        rules = load_rules(write_rules(tmp_path, minimal_rules()))

        assert rules.album_share.legacy.relative_dir == "DCIM/Camera"
        assert rules.album_share.permissions.broad_write.endswith("WRITE_EXTERNAL_STORAGE")
        assert rules.ops.required_env == []

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("project: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)

    def test_missing_project_section(self, tmp_path: Path) -> None:
        rules = minimal_rules()
        del rules["project"]
        with pytest.raises(ValueError, match="validation failed"):
            load_rules(write_rules(tmp_path, rules))

    def test_buffer_size_must_be_positive(self, tmp_path: Path) -> None:
        rules = minimal_rules()
        rules["album_share"] = {"transfer": {"buffer_size": 0}}
        with pytest.raises(ValueError):
            load_rules(write_rules(tmp_path, rules))

    def test_relative_dir_cannot_escape(self, tmp_path: Path) -> None:
        rules = minimal_rules()
        rules["album_share"] = {"legacy": {"relative_dir": "../outside"}}
        with pytest.raises(ValueError):
            load_rules(write_rules(tmp_path, rules))

    def test_yaml_inside_markdown_fence(self, tmp_path: Path) -> None:
        body = yaml.dump(minimal_rules())
        path = tmp_path / "rules.md"
        path.write_text(f"# Rules\n\n```yaml\n{body}```\n\ntrailing notes\n")

        rules = load_rules(path)
        assert rules.project.slug == "album-share"

    def test_context_lifetime_value(self, tmp_path: Path) -> None:
        rules = minimal_rules()
        rules["album_share"] = {"session": {"context_lifetime": "application_wide"}}
        loaded = load_rules(write_rules(tmp_path, rules))
        assert loaded.album_share.session.context_lifetime == ContextLifetime.APPLICATION_WIDE

    def test_required_section_missing(self, tmp_path: Path) -> None:
        rules = minimal_rules()
        rules["project"]["required_sections"].append("ops")
        with pytest.raises(ValueError, match="missing required sections: \\['ops'\\]"):
            load_rules(write_rules(tmp_path, rules))

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("")
        with pytest.raises(ValueError, match="must hold a mapping"):
            load_rules(path)

    def test_accepts_str_path(self, tmp_path: Path) -> None:
        rules = load_rules(str(write_rules(tmp_path, minimal_rules())))
        assert rules.project.slug == "album-share"
