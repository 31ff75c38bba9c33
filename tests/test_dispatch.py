from __future__ import annotations

import pytest

from metagen.dispatch import Marker, TaggedUnion


class Nope(Marker):
    code = 0


class Echo(Marker):
    code = 1


class Stray(Marker):
    code = 9


class Command(TaggedUnion):
    variants = (Nope, Echo)

    @staticmethod
    def default_variant() -> Marker:
        return Nope()


def test_markers_are_zero_state_values() -> None:
    assert Nope() == Nope()
    assert Nope() != Echo()
    assert hash(Nope()) == hash(Nope())
    assert repr(Echo()) == "Echo()"


def test_union_defaults_to_default_variant() -> None:
    assert Command().value == Nope()
    assert Command() == Command(Nope())
    assert Command.default() == Command()
    assert Command(Echo()) != Command()
    assert repr(Command()) == "Command(Nope())"
    assert hash(Command(Echo())) == hash(Command(Echo()))


def test_union_is_closed() -> None:
    with pytest.raises(TypeError):
        Command(Stray())


def test_from_code_looks_up_variant() -> None:
    assert Command.from_code(1) == Command(Echo())
    with pytest.raises(LookupError):
        Command.from_code(9)


def test_base_union_has_no_default() -> None:
    with pytest.raises(NotImplementedError):
        TaggedUnion()
