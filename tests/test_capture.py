from __future__ import annotations

from pathlib import Path

import pytest

from metagen.capture.phases import (
    capture_command,
    capture_interface,
    load_interface_signature,
    parse_command_args,
)
from metagen.exceptions import (
    InterfaceMismatchError,
    MalformedArgsError,
    MissingInterfaceError,
    StoreError,
)
from metagen.store import FragmentStore, command_key
from metagen.synthesis.naming import snake

INTERFACE = """
    def execute(self, vm: VirtualMachine, args: list[int]) -> Result:
        ...
"""

NOPE = """
    @command(0, "Nope")
    def execute_nope(machine: VirtualMachine, values: list[int]) -> Result:
        # nothing to do
        return Ok({"quoted": "braces"})
"""


def test_capture_interface_returns_input_and_records_signature(decl, store) -> None:
    declaration = decl(INTERFACE)
    assert capture_interface(declaration, store=store) is declaration
    assert load_interface_signature(store) == (
        "def _(_, _: VirtualMachine, _: list[int]) -> Result:\n    ..."
    )


def test_capture_interface_overwrites_previous_record(decl, store) -> None:
    capture_interface(decl("def execute(self) -> None: ..."), store=store)
    capture_interface(decl(INTERFACE), store=store)
    assert "VirtualMachine" in load_interface_signature(store)


def test_capture_command_persists_original_with_receiver(decl, store) -> None:
    capture_interface(decl(INTERFACE), store=store)
    func = decl(NOPE)
    assert capture_command(0, "Nope", func, store=store) is func

    document = store.get("commands/nope")
    assert document["name"] == "Nope"
    assert document["code"] == 0
    raw = str(document["raw"])
    assert raw.startswith(
        "def execute_nope(self, machine: VirtualMachine, values: list[int]) -> Result:"
    )
    assert "# nothing to do" in raw
    assert 'return Ok({"quoted": "braces"})' in raw
    assert "@command" not in raw


def test_capture_command_requires_interface(decl, store) -> None:
    with pytest.raises(MissingInterfaceError) as excinfo:
        capture_command(0, "Nope", decl(NOPE), store=store)
    assert "interface-capture" in str(excinfo.value)
    assert not store.exists("commands/nope")


def test_interface_record_without_raw_counts_as_missing(decl, store) -> None:
    store.put("interface", {})
    with pytest.raises(MissingInterfaceError):
        capture_command(0, "Nope", decl(NOPE), store=store)


def test_corrupt_interface_record_is_a_store_error(decl, store) -> None:
    path = store.path_for("interface")
    path.parent.mkdir(parents=True)
    path.write_text("{", encoding="utf-8")
    with pytest.raises(StoreError):
        capture_command(0, "Nope", decl(NOPE), store=store)


def test_mismatched_command_is_rejected_with_both_forms(decl, store) -> None:
    capture_interface(decl(INTERFACE), store=store)
    func = decl("def execute_bad(vm: VirtualMachine, args: list[str]) -> Result: ...")
    with pytest.raises(InterfaceMismatchError) as excinfo:
        capture_command(2, "Bad", func, store=store)
    assert excinfo.value.expected.endswith("_: list[int]) -> Result:\n    ...")
    assert "list[str]" in excinfo.value.found
    assert "Bad" in str(excinfo.value)
    assert not store.exists("commands/bad")


def test_names_differing_by_case_overwrite_each_other(decl, store) -> None:
    capture_interface(decl(INTERFACE), store=store)
    first = decl("def echo_a(vm: VirtualMachine, args: list[int]) -> Result:\n    return 1\n")
    second = decl("def echo_b(vm: VirtualMachine, args: list[int]) -> Result:\n    return 2\n")
    capture_command(1, "Echo", first, store=store)
    capture_command(7, "echo", second, store=store)

    documents = store.list("commands")
    assert len(documents) == 1
    assert documents[0]["name"] == "echo"
    assert documents[0]["code"] == 7
    assert "return 2" in str(documents[0]["raw"])


@pytest.mark.parametrize(
    "args",
    [
        (256, "Nope"),
        (-1, "Nope"),
        (True, "Nope"),
        ("1", "Nope"),
        (1, ""),
        (1, 3),
        (1, "123"),
        (1, "None"),
        (1, "Marker"),
        (1, "tagged union"),
        (1, "X"),
        (1,),
        (1, "Nope", "extra"),
    ],
)
def test_malformed_command_args(args: tuple[object, ...]) -> None:
    with pytest.raises(MalformedArgsError):
        parse_command_args(*args)


def test_capture_command_validates_args_before_io(decl, tmp_path: Path) -> None:
    store = FragmentStore(tmp_path / "never-created")
    with pytest.raises(MalformedArgsError):
        capture_command(300, "Nope", decl(NOPE), store=store)
    assert not store.root.exists()


def test_non_ascii_command_names_keep_their_letters() -> None:
    args = parse_command_args(3, "Écho")
    assert args.name == "Écho"
    assert command_key(snake(args.name)) == "commands/écho"
