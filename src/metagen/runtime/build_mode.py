from __future__ import annotations

from enum import StrEnum

from metagen.exceptions import ConfigError


class BuildMode(StrEnum):
    INTERFACE_CAPTURE = "interface-capture"
    COMMAND_COLLECTION = "command-collection"
    REGISTRY_GENERATION = "registry-generation"


_MODE_ALIASES: dict[str, BuildMode] = {
    "init": BuildMode.INTERFACE_CAPTURE,
    "interface": BuildMode.INTERFACE_CAPTURE,
    "collect": BuildMode.COMMAND_COLLECTION,
    "generate": BuildMode.REGISTRY_GENERATION,
}

DEFAULT_MODE = BuildMode.REGISTRY_GENERATION


def parse_mode(value: object) -> BuildMode:
    """Accept a BuildMode, its canonical text, or a short alias."""
    if isinstance(value, BuildMode):
        return value
    if not isinstance(value, str):
        raise ConfigError(f"build mode must be a string, got {type(value).__name__}")
    text = value.strip().lower().replace("_", "-")
    if text in _MODE_ALIASES:
        return _MODE_ALIASES[text]
    try:
        return BuildMode(text)
    except ValueError:
        choices = sorted([mode.value for mode in BuildMode] + list(_MODE_ALIASES))
        raise ConfigError(
            f"unknown build mode {value!r}; expected one of {', '.join(choices)}"
        ) from None
