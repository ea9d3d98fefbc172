"""
Project metadata for log records: the service name and version stamped by
JsonFormatter.

Installed distribution metadata is preferred; source checkouts fall back to the
nearest pyproject.toml. Nothing here raises: lookups that fail return `default`.
"""
from functools import lru_cache
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Any
import tomllib

DISTRIBUTION_NAME = "user-service"
_MODULE_DIR = Path(__file__).resolve().parent


def find_pyproject(start: Path, max_up: int = 5) -> Path | None:
    """Walk up from `start` (at most `max_up` directories) to the first pyproject.toml."""
    for directory in [start, *start.parents][:max_up]:
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


@lru_cache(maxsize=8)
def load_pyproject_data(pyproject_path: Path) -> dict:
    with pyproject_path.open("rb") as fh:
        return tomllib.load(fh)


def get_pyproject_value(
    key: str,
    start: str | Path | None = None,
    max_up: int = 5,
    default: Any = None,
) -> Any:
    """
    Look up a dotted `key` such as "project.version" in the nearest pyproject.toml.

    The search starts at `start`, or at this package when omitted.
    """
    start_path = Path(start).resolve() if start is not None else _MODULE_DIR
    pyproject = find_pyproject(start_path, max_up=max_up)
    if pyproject is None:
        return default

    try:
        node: Any = load_pyproject_data(pyproject)
    except (OSError, tomllib.TOMLDecodeError):
        return default

    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def get_project_name(
    start: Path | str | None = None,
    max_up: int = 5,
    default: str | None = None,
) -> str | None:
    return get_pyproject_value("project.name", start=start, max_up=max_up, default=default)


def get_project_version(
    start: Path | str | None = None,
    max_up: int = 5,
    default: str = "unknown",
) -> str:
    """Installed version of `user-service`, else project.version, else `default`."""
    try:
        return importlib_metadata.version(DISTRIBUTION_NAME)
    except importlib_metadata.PackageNotFoundError:
        return get_pyproject_value("project.version", start=start, max_up=max_up, default=default)


__all__ = [
    "find_pyproject",
    "load_pyproject_data",
    "get_pyproject_value",
    "get_project_name",
    "get_project_version",
]
