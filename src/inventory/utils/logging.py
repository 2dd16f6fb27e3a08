"""
Project identity for log records (service name and version).

The installed distribution metadata is authoritative; a source checkout
without `pip install` falls back to the nearest pyproject.toml.
"""

from functools import lru_cache
from importlib import metadata as importlib_metadata
from pathlib import Path
import tomllib

DEFAULT_PROJECT_NAME = "book-inventory"
PYPROJECT_SEARCH_DEPTH = 5


def locate_pyproject(origin: Path, depth: int = PYPROJECT_SEARCH_DEPTH) -> Path | None:
    """Walk up from `origin` (inclusive) looking for pyproject.toml."""
    for folder in [origin, *origin.parents][:depth]:
        if (folder / "pyproject.toml").is_file():
            return folder / "pyproject.toml"
    return None


@lru_cache(maxsize=1)
def _project_table() -> dict:
    path = locate_pyproject(Path(__file__).resolve().parent)
    if path is None:
        return {}
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def get_project_name() -> str:
    return _project_table().get("name") or DEFAULT_PROJECT_NAME


def get_project_version(default: str = "unknown") -> str:
    try:
        return importlib_metadata.version(get_project_name())
    except importlib_metadata.PackageNotFoundError:
        return _project_table().get("version", default)


__all__ = ["locate_pyproject", "get_project_name", "get_project_version"]
