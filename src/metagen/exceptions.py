"""Error taxonomy for the metagen capture and generation phases."""

from __future__ import annotations

from pathlib import Path


class MetagenError(RuntimeError):
    """Base class for every failure surfaced by a metagen phase."""


class ConfigError(MetagenError):
    pass


class StoreError(MetagenError):
    """A fragment or the interface record could not be read or written."""

    def __init__(self, message: str, *, path: Path | None = None):
        super().__init__(message)
        self.path = path


class MissingInterfaceError(MetagenError):
    """Command capture ran before interface capture."""

    def __init__(self, message: str = "") -> None:
        super().__init__(
            message
            or "no interface signature found. run the interface-capture phase "
            "once before running command-collection."
        )


class InterfaceMismatchError(MetagenError):
    """A command's canonical signature differs from the captured interface."""

    def __init__(self, expected: str, found: str, *, name: str = ""):
        subject = f" for command {name!r}" if name else ""
        super().__init__(
            f"inconsistent interface signature{subject}. "
            f"expect `{expected}`, found `{found}`."
        )
        self.expected = expected
        self.found = found
        self.name = name


class FragmentDecodeError(MetagenError):
    """A stored fragment could not be decoded during registry generation."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"failed to decode fragment {path}: {reason}")
        self.path = path
        self.reason = reason


class MalformedArgsError(MetagenError):
    pass


class MalformedDeclarationError(MetagenError):
    pass
