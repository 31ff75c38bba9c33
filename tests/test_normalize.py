from __future__ import annotations

import pytest

from metagen.capture.normalize import (
    canonical_text,
    declaration_of,
    normalize_signature,
    parse_declaration,
    render,
    signatures_equal,
    with_receiver,
)
from metagen.exceptions import MalformedDeclarationError


def sample_command(machine, count: int = 3) -> str:
    return str(count)


def test_canonical_form_erases_names_decorators_and_body(decl) -> None:
    func = decl(
        '''
        @abstractmethod
        def execute(self, vm: VirtualMachine, args: list[int]) -> Result:
            """Run one instruction."""
            return vm.run(args)
        '''
    )
    canonical = canonical_text(normalize_signature(func))
    assert canonical == "def _(_, _: VirtualMachine, _: list[int]) -> Result:\n    ..."


def test_normalization_is_idempotent(decl) -> None:
    func = decl(
        """
        async def run(self, vm: VM, /, flag: bool = False, *rest: int, key: str, **extra) -> None:
            pass
        """
    )
    once = normalize_signature(func)
    twice = normalize_signature(once)
    assert canonical_text(once) == canonical_text(twice)


def test_parameter_names_do_not_affect_shape(decl) -> None:
    left = decl("def execute(self, vm: VM, args: list[int]) -> Result: ...")
    right = decl("def other(this, machine: VM, values: list[int]) -> Result: ...")
    assert signatures_equal(normalize_signature(left), normalize_signature(right))


def test_formatting_and_comments_do_not_affect_shape(decl) -> None:
    left = decl(
        """
        def f(x:int,   y : str="a",  # trailing comment
        ) -> None:
            return None
        """
    )
    right = decl('def g(a: int, b: str = "a") -> None: ...')
    assert canonical_text(normalize_signature(left)) == canonical_text(
        normalize_signature(right)
    )


@pytest.mark.parametrize(
    "other",
    [
        "def f(vm: VM) -> Result: ...",
        "def f(vm: VM, args: list[int], extra: int) -> Result: ...",
        "def f(args: list[int], vm: VM) -> Result: ...",
        "def f(vm: VM, args: list[str]) -> Result: ...",
        "def f(vm: VM, args: list[int]) -> None: ...",
        "async def f(vm: VM, args: list[int]) -> Result: ...",
        "def f(vm: VM, *, args: list[int]) -> Result: ...",
    ],
)
def test_shape_differences_are_detected(decl, other: str) -> None:
    base = decl("def f(vm: VM, args: list[int]) -> Result: ...")
    assert not signatures_equal(normalize_signature(base), normalize_signature(decl(other)))


def test_receiver_injection_prepends_self(decl) -> None:
    func = decl("def execute_nope(vm: VM) -> Result:\n    return Ok()\n")
    rendered = render(with_receiver(func))
    assert rendered.startswith("def execute_nope(self, vm: VM) -> Result:")
    assert "return Ok()" in rendered


def test_receiver_injection_matches_method_shape(decl) -> None:
    method = decl("def execute(self, vm: VM) -> Result: ...")
    free = decl("def execute_nope(machine: VM) -> Result: ...")
    assert canonical_text(normalize_signature(free, inject_receiver=True)) == canonical_text(
        normalize_signature(method)
    )


def test_receiver_injection_respects_positional_only_group(decl) -> None:
    func = decl("def f(x, /, y): ...")
    canonical = canonical_text(normalize_signature(func, inject_receiver=True))
    assert canonical == "def _(_, _, /, _):\n    ..."


def test_defaults_are_part_of_the_shape(decl) -> None:
    left = decl("def f(x: int = 1): ...")
    right = decl("def f(x: int = 2): ...")
    assert not signatures_equal(normalize_signature(left), normalize_signature(right))


@pytest.mark.parametrize(
    "source",
    [
        "x = 1\n",
        "def f(): ...\ndef g(): ...\n",
        "class C:\n    pass\n",
        "def broken(:\n",
    ],
)
def test_parse_declaration_rejects_non_functions(source: str) -> None:
    with pytest.raises(MalformedDeclarationError):
        parse_declaration(source)


def test_declaration_of_reads_live_function_source() -> None:
    func = declaration_of(sample_command)
    assert func.name.value == "sample_command"
    assert canonical_text(normalize_signature(func)) == (
        "def _(_, _: int=3) -> str:\n    ..."
    )


def test_declaration_of_rejects_objects_without_source() -> None:
    with pytest.raises(MalformedDeclarationError):
        declaration_of(len)
