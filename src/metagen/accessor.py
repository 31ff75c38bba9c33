"""Delegation for single-field wrapper types.

``@delegate`` on a dataclass with exactly one field forwards attribute reads
to that field and exposes it as ``inner``; ``writable=True`` also allows
replacing it through ``inner``.
"""

from __future__ import annotations

import dataclasses
from typing import Callable, TypeVar, overload

T = TypeVar("T", bound=type)


def _single_field(cls: type) -> str:
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__name__} must be a dataclass to delegate to its field")
    fields = dataclasses.fields(cls)
    if len(fields) != 1:
        raise TypeError(
            f"{cls.__name__} must have exactly one field to delegate, found {len(fields)}"
        )
    return fields[0].name


def _apply(cls: T, writable: bool) -> T:
    field_name = _single_field(cls)

    def _get(self):
        return getattr(self, field_name)

    def _set(self, value) -> None:
        setattr(self, field_name, value)

    def __getattr__(self, name: str):
        # Only reached when normal lookup fails.
        if name == field_name or name.startswith("__"):
            raise AttributeError(name)
        return getattr(getattr(self, field_name), name)

    cls.inner = property(_get, _set if writable else None)
    cls.__getattr__ = __getattr__
    return cls


@overload
def delegate(cls: T, *, writable: bool = ...) -> T: ...


@overload
def delegate(cls: None = ..., *, writable: bool = ...) -> Callable[[T], T]: ...


def delegate(cls=None, *, writable=False):
    if cls is None:
        return lambda target: _apply(target, writable)
    return _apply(cls, writable)
