"""Registry synthesis from the captured command fragments.

For every fragment the generator emits a code constant, a zero-state marker
class implementing the interface with the captured body, and finally one
closed dispatch class whose variants are exactly the discovered markers.
The dispatch class defaults to the ``Nope`` marker; when no such fragment
exists nothing is fabricated and default construction fails with
``NameError`` when it runs.
"""

from __future__ import annotations

from collections import Counter
import linecache
import logging
from pathlib import Path
from typing import Iterable, MutableMapping

import libcst as cst

from metagen.capture.normalize import parse_declaration
from metagen.exceptions import (
    FragmentDecodeError,
    MalformedArgsError,
    MalformedDeclarationError,
    StoreError,
)
from metagen.store import FragmentStore
from metagen.synthesis.model import (
    RUNTIME_NAMES,
    CommandFragment,
    RegistryUnit,
    generated_name_problem,
)
from metagen.synthesis.naming import is_valid_identifier

logger = logging.getLogger(__name__)

DEFAULT_METHOD_NAME = "execute"
DEFAULT_VARIANT = "Nope"
RUNTIME_IMPORT = f"from metagen.dispatch import {', '.join(RUNTIME_NAMES)}\n"


def load_fragments(
    fragment_directory: Path, *, reserved: Iterable[str] = ()
) -> list[tuple[Path, CommandFragment]]:
    """Decode every fragment below ``fragment_directory`` or fail as a whole.

    Fragments whose generated names would rebind one of ``reserved`` are
    rejected like undecodable ones.
    """
    store = FragmentStore(fragment_directory)
    taken = frozenset(reserved)
    fragments: list[tuple[Path, CommandFragment]] = []
    for path in store.iter_paths(""):
        try:
            document = store.read(path)
        except StoreError as exc:
            raise FragmentDecodeError(path, str(exc)) from exc
        try:
            fragment = CommandFragment.from_document(document)
        except ValueError as exc:
            raise FragmentDecodeError(path, str(exc)) from exc
        problem = generated_name_problem(fragment.name)
        if problem is None:
            for derived in (fragment.marker_name, fragment.constant_name):
                if derived in taken:
                    problem = f"name {fragment.name!r} would rebind {derived!r}"
        if problem is not None:
            raise FragmentDecodeError(path, problem)
        fragments.append((path, fragment))
    return fragments


def _marker_class(
    path: Path, fragment: CommandFragment, interface_name: str, method_name: str
) -> cst.ClassDef:
    try:
        func = parse_declaration(fragment.source_text)
    except MalformedDeclarationError as exc:
        raise FragmentDecodeError(path, str(exc)) from exc
    method = func.with_changes(
        name=cst.Name(method_name),
        decorators=(),
        leading_lines=[cst.EmptyLine()],
    )
    return cst.ClassDef(
        name=cst.Name(fragment.marker_name),
        bases=[
            cst.Arg(cst.Name("Marker")),
            cst.Arg(cst.parse_expression(interface_name)),
        ],
        body=cst.IndentedBlock(
            body=[cst.parse_statement(f"code = {fragment.constant_name}\n"), method]
        ),
        leading_lines=[cst.EmptyLine(), cst.EmptyLine()],
    )


def _dispatch_class(
    dispatch_type_name: str, interface_name: str, method_name: str, variants: list[str]
) -> cst.BaseStatement:
    if variants:
        pattern = " | ".join(f"{name}()" for name in variants)
        delegate = (
            "        match self.value:\n"
            f"            case {pattern} as variant:\n"
            f"                return variant.{method_name}(*args, **kwargs)\n"
        )
    else:
        delegate = ""
    members = ", ".join(variants) + ("," if len(variants) == 1 else "")
    source = (
        f"class {dispatch_type_name}(TaggedUnion, {interface_name}):\n"
        f"    variants = ({members})\n"
        "\n"
        f"    def {method_name}(self, *args, **kwargs):\n"
        f"{delegate}"
        "        raise TypeError(f\"no variant is active on {self!r}\")\n"
        "\n"
        "    @staticmethod\n"
        "    def default_variant():\n"
        f"        return {DEFAULT_VARIANT}()\n"
    )
    return cst.parse_statement(source).with_changes(
        leading_lines=[cst.EmptyLine(), cst.EmptyLine()]
    )


def _check_names(*names: str) -> None:
    for name in names:
        if not all(is_valid_identifier(part) for part in name.split(".")):
            raise MalformedArgsError(f"{name!r} is not a valid Python name")


def _warn_duplicates(fragments: list[tuple[Path, CommandFragment]]) -> None:
    markers = Counter(fragment.marker_name for _path, fragment in fragments)
    codes = Counter(fragment.code for _path, fragment in fragments)
    for name, count in markers.items():
        if count > 1:
            logger.warning("%d fragments produce marker %s; the last one wins", count, name)
    for code, count in codes.items():
        if count > 1:
            logger.warning("%d fragments share command code %#04x", count, code)


def generate_registry(
    dispatch_type_name: str,
    interface_name: str,
    fragment_directory: Path,
    *,
    method_name: str = DEFAULT_METHOD_NAME,
    sort_by_code: bool = False,
) -> RegistryUnit:
    """Synthesize the dispatch type for every fragment in ``fragment_directory``.

    Variants follow the directory walk order unless ``sort_by_code`` is set.
    Any undecodable fragment raises FragmentDecodeError and nothing is
    returned.
    """
    _check_names(interface_name)
    if not is_valid_identifier(dispatch_type_name) or not is_valid_identifier(method_name):
        raise MalformedArgsError(
            f"invalid dispatch type {dispatch_type_name!r} or method {method_name!r}"
        )
    reserved = (*RUNTIME_NAMES, interface_name.split(".")[0], dispatch_type_name)
    fragments = load_fragments(Path(fragment_directory), reserved=reserved)
    if sort_by_code:
        fragments.sort(key=lambda item: (item[1].code, item[1].marker_name))
    _warn_duplicates(fragments)

    statements: list[cst.BaseStatement] = [cst.parse_statement(RUNTIME_IMPORT)]
    constants: dict[str, int] = {}
    variants: list[str] = []
    for path, fragment in fragments:
        constant = cst.parse_statement(f"{fragment.constant_name} = {fragment.code}\n")
        statements.append(constant.with_changes(leading_lines=[cst.EmptyLine()]))
        statements.append(_marker_class(path, fragment, interface_name, method_name))
        constants[fragment.constant_name] = fragment.code
        if fragment.marker_name not in variants:
            variants.append(fragment.marker_name)
    statements.append(
        _dispatch_class(dispatch_type_name, interface_name, method_name, variants)
    )
    if DEFAULT_VARIANT not in variants:
        logger.warning(
            "no %s fragment found; %s has no default variant",
            DEFAULT_VARIANT,
            dispatch_type_name,
        )
    logger.info(
        "generated %s with %d variant(s) from %s",
        dispatch_type_name,
        len(variants),
        fragment_directory,
    )
    return RegistryUnit(
        dispatch_type_name=dispatch_type_name,
        interface_name=interface_name,
        method_name=method_name,
        variants=tuple(variants),
        constants=constants,
        statements=tuple(statements),
    )


def render_registry(
    unit: RegistryUnit, *, interface_module: str | None = None, prelude: str = ""
) -> str:
    """Render ``unit`` as a standalone module."""
    parts = ["# Generated by metagen. Do not edit.\n"]
    if prelude:
        parts.append(prelude if prelude.endswith("\n") else prelude + "\n")
    if interface_module:
        root_name = unit.interface_name.split(".")[0]
        parts.append(f"from {interface_module} import {root_name}\n")
    parts.append(unit.code)
    return "".join(parts)


def expand_registry(unit: RegistryUnit, namespace: MutableMapping[str, object]) -> type:
    """Execute ``unit`` inside ``namespace`` and return the dispatch class."""
    source = unit.code
    filename = f"<metagen registry {unit.dispatch_type_name}>"
    linecache.cache[filename] = (len(source), None, source.splitlines(True), filename)
    exec(compile(source, filename, "exec"), namespace)
    generated = namespace.get(unit.dispatch_type_name)
    if not isinstance(generated, type):
        raise MalformedArgsError(
            f"{unit.dispatch_type_name!r} is not a class after expansion: {generated!r}"
        )
    return generated
