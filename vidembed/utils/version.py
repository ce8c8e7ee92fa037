"""Version Utilities Module."""

from functools import lru_cache
from pathlib import Path

import tomlkit

__all__ = ["get_pyproject_version"]

PYPROJECT_PATH = Path(__file__).resolve().parents[2] / "pyproject.toml"


@lru_cache(maxsize=1)
def get_pyproject_version(toml_file: Path = PYPROJECT_PATH) -> str:
    """Get VidEmbed's version from the pyproject.toml file.

    Args:
        toml_file (Path): Location of the pyproject.toml file

    Returns:
        str: VidEmbed's version, or "unknown" if it can't be determined
    """
    if not toml_file.is_file():
        return "unknown"

    with toml_file.open(encoding="utf-8") as f:
        toml_data = tomlkit.load(f)

    project = toml_data.get("project", {})
    if "version" in project:
        return str(project["version"])

    return "unknown"
