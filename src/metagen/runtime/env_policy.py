from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
import os
from pathlib import Path
from typing import Iterator

from metagen.runtime.build_mode import BuildMode, parse_mode

MODE_ENV_KEY = "METAGEN_MODE"
ROOT_ENV_KEY = "METAGEN_ROOT"

_MODE_OVERRIDE: ContextVar[BuildMode | None] = ContextVar(
    "metagen_mode_override",
    default=None,
)
_ROOT_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "metagen_root_override",
    default=None,
)


def env_text(name: str, *, default: str = "") -> str:
    return os.getenv(name, default).strip()


def env_mode() -> BuildMode | None:
    text = env_text(MODE_ENV_KEY)
    if not text:
        return None
    return parse_mode(text)


def env_root() -> Path | None:
    text = env_text(ROOT_ENV_KEY)
    return Path(text) if text else None


def mode_override() -> BuildMode | None:
    return _MODE_OVERRIDE.get()


def root_override() -> Path | None:
    return _ROOT_OVERRIDE.get()


def set_mode_override(mode: BuildMode | str | None) -> Token[BuildMode | None]:
    return _MODE_OVERRIDE.set(None if mode is None else parse_mode(mode))


def reset_mode_override(token: Token[BuildMode | None]) -> None:
    _MODE_OVERRIDE.reset(token)


def set_root_override(root: Path | None) -> Token[Path | None]:
    return _ROOT_OVERRIDE.set(None if root is None else Path(root))


def reset_root_override(token: Token[Path | None]) -> None:
    _ROOT_OVERRIDE.reset(token)


@contextmanager
def mode_scope(mode: BuildMode | str) -> Iterator[BuildMode]:
    token = set_mode_override(mode)
    try:
        yield parse_mode(mode)
    finally:
        reset_mode_override(token)


@contextmanager
def root_scope(root: Path) -> Iterator[Path]:
    token = set_root_override(root)
    try:
        yield Path(root)
    finally:
        reset_root_override(token)
