from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from src.rules.models import Rules

FENCE_OPEN = "```yaml"
FENCE_CLOSE = "```"


def _extract_yaml(content: str) -> str:
    """Return the first ```yaml block of a markdown document, or content unchanged."""
    lines = content.splitlines()
    for start, line in enumerate(lines):
        if line.strip().startswith(FENCE_OPEN):
            break
    else:
        return content

    block = []
    for line in lines[start + 1:]:
        if line.strip().startswith(FENCE_CLOSE):
            break
        block.append(line)
    return "\n".join(block)


def _check_sections(data: dict[str, Any]) -> None:
    required = (data.get("project") or {}).get("required_sections") or []
    missing = [s for s in required if s not in data]
    if missing:
        raise ValueError(f"Rules file is missing required sections: {missing}")


def load_rules(path: str | Path) -> Rules:
    """
    Load and validate the album share rules.
    Raises FileNotFoundError if file missing.
    Raises ValueError if YAML, required sections or schema invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(_extract_yaml(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Rules file {path} must hold a mapping")
    _check_sections(data)

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e
