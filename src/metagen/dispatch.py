"""Runtime bases for generated marker types and dispatch unions."""

from __future__ import annotations

from typing import Any, ClassVar


class Marker:
    """A zero-state command marker; all instances of one type are equal."""

    __slots__ = ()

    code: ClassVar[int]

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


_MISSING: Any = object()


class TaggedUnion:
    """Closed sum over ``variants``; exactly one marker is active."""

    variants: ClassVar[tuple[type[Marker], ...]] = ()

    def __init__(self, value: Marker = _MISSING) -> None:
        if value is _MISSING:
            value = self.default_variant()
        if not isinstance(value, self.variants):
            raise TypeError(
                f"{type(self).__name__} has no variant for {type(value).__name__}"
            )
        self._value = value

    @staticmethod
    def default_variant() -> Marker:
        raise NotImplementedError

    @classmethod
    def default(cls) -> TaggedUnion:
        return cls()

    @classmethod
    def from_code(cls, code: int) -> TaggedUnion:
        for variant in cls.variants:
            if variant.code == code:
                return cls(variant())
        raise LookupError(f"{cls.__name__} has no variant with code {code:#04x}")

    @property
    def value(self) -> Marker:
        return self._value

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash((type(self), self._value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"
