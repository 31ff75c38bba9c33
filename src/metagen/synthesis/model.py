from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

import libcst as cst

from metagen.store import RAW_FIELD
from metagen.synthesis.naming import is_valid_identifier, snake, upper_camel, upper_snake

MAX_CODE = 0xFF
# Names every generated registry binds besides its own markers and constants.
RUNTIME_NAMES = ("Marker", "TaggedUnion")


@dataclass(frozen=True)
class InterfaceRecord:
    source_text: str

    def to_document(self) -> dict[str, object]:
        return {RAW_FIELD: self.source_text}


@dataclass(frozen=True)
class CommandFragment:
    name: str
    code: int
    source_text: str

    @property
    def key_name(self) -> str:
        return snake(self.name)

    @property
    def marker_name(self) -> str:
        return upper_camel(self.name)

    @property
    def constant_name(self) -> str:
        return upper_snake(self.name)

    def to_document(self) -> dict[str, object]:
        return {"name": self.name, "code": self.code, RAW_FIELD: self.source_text}

    @classmethod
    def from_document(cls, document: Mapping[str, object]) -> CommandFragment:
        """Build a fragment from a decoded store document.

        Raises ValueError describing the first missing or ill-typed field.
        """
        name = document.get("name")
        code = document.get("code")
        raw = document.get(RAW_FIELD)
        if not isinstance(name, str) or not name:
            raise ValueError("`name` must be a non-empty string")
        if type(code) is not int or not 0 <= code <= MAX_CODE:
            raise ValueError(f"`code` must be an integer in 0..{MAX_CODE}, got {code!r}")
        if not isinstance(raw, str):
            raise ValueError(f"`{RAW_FIELD}` must be a string")
        return cls(name=name, code=code, source_text=raw)


def generated_name_problem(name: str) -> str | None:
    """Describe why ``name`` cannot be turned into registry names, if it can't."""
    marker, constant = upper_camel(name), upper_snake(name)
    for derived in (marker, constant):
        if not is_valid_identifier(derived):
            return f"command name {name!r} does not yield a valid identifier ({derived!r})"
        if derived in RUNTIME_NAMES:
            return f"command name {name!r} would rebind {derived!r}"
    if marker == constant:
        return f"command name {name!r} yields {marker!r} for both marker and constant"
    return None


@dataclass(frozen=True)
class RegistryUnit:
    """The synthesized declarations for one dispatch type, emitted together."""

    dispatch_type_name: str
    interface_name: str
    method_name: str
    variants: tuple[str, ...]
    constants: Mapping[str, int]
    statements: tuple[cst.BaseStatement, ...] = field(repr=False)

    @property
    def module(self) -> cst.Module:
        return cst.Module(body=list(self.statements))

    @property
    def code(self) -> str:
        return self.module.code
