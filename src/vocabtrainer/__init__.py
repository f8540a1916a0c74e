"""vocabtrainer package."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]


def _version_from_pyproject() -> str | None:
    """Read `[project].version` from a checkout's pyproject.toml, if any."""
    for base in Path(__file__).resolve().parents:
        pyproject = base / "pyproject.toml"
        if not pyproject.is_file():
            continue
        with pyproject.open("rb") as handle:
            project = tomllib.load(handle).get("project", {})
        if project.get("name") == "vocabtrainer":
            return str(project.get("version"))
    return None


_checkout_version = _version_from_pyproject()
if _checkout_version is not None:
    __version__ = _checkout_version
else:
    try:
        __version__ = version("vocabtrainer")
    except PackageNotFoundError:
        __version__ = "0+unknown"
