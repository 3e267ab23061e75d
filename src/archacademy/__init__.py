"""archacademy package."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]


def _source_tree_version() -> str | None:
    """Read [project].version when running from a checkout."""
    for base in Path(__file__).resolve().parents:
        pyproject = base / "pyproject.toml"
        if not pyproject.is_file():
            continue
        with pyproject.open("rb") as handle:
            data = tomllib.load(handle)
        project = data.get("project", {})
        if project.get("name") != "archacademy":
            continue
        value = project.get("version")
        return str(value) if value else None
    return None


def _resolve_version() -> str:
    found = _source_tree_version()
    if found is not None:
        return found
    try:
        return version("archacademy")
    except PackageNotFoundError:
        return "0+unknown"


__version__ = _resolve_version()
