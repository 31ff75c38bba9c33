from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

from metagen.runtime.build_mode import DEFAULT_MODE, BuildMode, parse_mode
from metagen.runtime.env_policy import env_mode, env_root, mode_override, root_override

DEFAULT_CONFIG_NAME = "metagen.toml"
DEFAULT_BUILD_ROOT = Path(".autogen")

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def metagen_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("metagen", {})
    return section if isinstance(section, dict) else {}


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


@dataclass(frozen=True)
class BuildSettings:
    mode: BuildMode
    root: Path
    sort_by_code: bool = False

    @property
    def commands_dir(self) -> Path:
        return self.root / "commands"


def resolve_settings(
    project_root: Path | None = None, config_path: Path | None = None
) -> BuildSettings:
    """Merge overrides, environment, metagen.toml and defaults, in that order."""
    base = project_root if project_root is not None else Path.cwd()
    section = metagen_defaults(root=base, config_path=config_path)

    mode = mode_override() or env_mode()
    if mode is None:
        raw_mode = section.get("mode")
        mode = parse_mode(raw_mode) if raw_mode is not None else DEFAULT_MODE

    build_root = root_override() or env_root()
    if build_root is None:
        raw_root = section.get("root")
        build_root = Path(raw_root) if isinstance(raw_root, str) and raw_root else DEFAULT_BUILD_ROOT
    if not build_root.is_absolute():
        build_root = base / build_root

    return BuildSettings(
        mode=mode,
        root=build_root,
        sort_by_code=_as_bool(section.get("sort_by_code", False)),
    )


def current_mode(project_root: Path | None = None) -> BuildMode:
    return resolve_settings(project_root).mode
