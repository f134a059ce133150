from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "validgen.toml"
PYPROJECT_FILENAME = "pyproject.toml"

DEFAULT_SOURCE = Path("main.go")
DEFAULT_OUTPUT = Path("generated.go")
DEFAULT_PACKAGE = "main"


@dataclass(frozen=True)
class GenerateConfig:
    source: Path = DEFAULT_SOURCE
    output: Path = DEFAULT_OUTPUT
    package: str = DEFAULT_PACKAGE
    debug: bool = False

    def override(self, **values: Any) -> GenerateConfig:
        """Return a copy with every non-None value applied."""
        changes = {k: v for k, v in values.items() if v is not None}
        return replace(self, **changes)


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _read_table(path: Path) -> dict[str, Any] | None:
    import tomllib

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name == PYPROJECT_FILENAME:
        tool = _coerce_dict(data.get("tool"))
        if "validgen" not in tool:
            return None
        return _coerce_dict(tool.get("validgen"))
    return data


def load_config(path: Path) -> GenerateConfig:
    """
    Load generation settings from a ``validgen.toml`` or the
    ``[tool.validgen]`` table of a ``pyproject.toml``.

    Keys follow the command line flags: ``in``, ``out``, ``outpkg``, ``debug``.
    Relative paths resolve against the config file's directory.
    """
    table = _read_table(path)
    if table is None:
        raise ValueError(f"{path} has no [tool.validgen] table")

    base = path.parent
    config = GenerateConfig()

    source = table.get("in")
    if source is not None:
        if not isinstance(source, str) or not source.strip():
            raise ValueError("'in' must be a non-empty string")
        config = config.override(source=base / source.strip())

    output = table.get("out")
    if output is not None:
        if not isinstance(output, str) or not output.strip():
            raise ValueError("'out' must be a non-empty string")
        config = config.override(output=base / output.strip())

    package = table.get("outpkg")
    if package is not None:
        if not isinstance(package, str) or not package.strip():
            raise ValueError("'outpkg' must be a non-empty string")
        config = config.override(package=package.strip())

    debug = table.get("debug")
    if debug is not None:
        if not isinstance(debug, bool):
            raise ValueError("'debug' must be a boolean")
        config = config.override(debug=debug)

    return config


def find_config(start: Path) -> Path | None:
    """Find the nearest config file by walking up from ``start``."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = p / PYPROJECT_FILENAME
        if pyproject.is_file() and _read_table(pyproject) is not None:
            return pyproject
    return None
