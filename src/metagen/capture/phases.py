from __future__ import annotations

from dataclasses import dataclass
import logging

import libcst as cst

from metagen.config import resolve_settings
from metagen.exceptions import (
    InterfaceMismatchError,
    MalformedArgsError,
    MissingInterfaceError,
    StoreError,
)
from metagen.capture.normalize import (
    canonical_text,
    normalize_signature,
    render,
    with_receiver,
)
from metagen.store import INTERFACE_KEY, RAW_FIELD, FragmentStore, command_key
from metagen.synthesis.model import (
    MAX_CODE,
    CommandFragment,
    InterfaceRecord,
    generated_name_problem,
)

logger = logging.getLogger(__name__)

_USAGE = "expect `command(<code: int 0..255>, <name: str>)`"


@dataclass(frozen=True)
class CommandArgs:
    code: int
    name: str


def parse_command_args(*args: object) -> CommandArgs:
    if len(args) != 2:
        raise MalformedArgsError(f"{_USAGE}, got {len(args)} argument(s)")
    code, name = args
    if type(code) is not int or not 0 <= code <= MAX_CODE:
        raise MalformedArgsError(f"{_USAGE}, got code {code!r}")
    if not isinstance(name, str) or not name.strip():
        raise MalformedArgsError(f"{_USAGE}, got name {name!r}")
    problem = generated_name_problem(name)
    if problem is not None:
        raise MalformedArgsError(problem)
    return CommandArgs(code=code, name=name)


def default_store() -> FragmentStore:
    return FragmentStore(resolve_settings().root)


def capture_interface(
    declaration: cst.FunctionDef, *, store: FragmentStore | None = None
) -> cst.FunctionDef:
    """Record the canonical interface signature and return ``declaration``.

    Any previously captured interface is overwritten.
    """
    store = store or default_store()
    canonical = canonical_text(normalize_signature(declaration))
    path = store.put(INTERFACE_KEY, InterfaceRecord(canonical).to_document())
    logger.info("captured interface signature into %s", path)
    logger.debug("canonical interface: %s", canonical)
    return declaration


def load_interface_signature(store: FragmentStore) -> str:
    if not store.exists(INTERFACE_KEY):
        raise MissingInterfaceError()
    raw = store.get(INTERFACE_KEY).get(RAW_FIELD)
    if not isinstance(raw, str) or not raw:
        raise MissingInterfaceError()
    return raw


def capture_command(
    code: int,
    name: str,
    function: cst.FunctionDef,
    *,
    store: FragmentStore | None = None,
) -> cst.FunctionDef:
    """Check ``function`` against the captured interface and persist it.

    The stored text is the original declaration with a ``self`` receiver
    injected and decorators removed; the body is kept verbatim.
    """
    args = parse_command_args(code, name)
    store = store or default_store()

    found = canonical_text(normalize_signature(function, inject_receiver=True))
    expected = load_interface_signature(store)
    if found != expected:
        raise InterfaceMismatchError(expected, found, name=args.name)

    persisted = with_receiver(function).with_changes(decorators=(), leading_lines=())
    fragment = CommandFragment(
        name=args.name, code=args.code, source_text=render(persisted)
    )
    key = command_key(fragment.key_name)
    _warn_on_replacement(store, key, fragment)
    path = store.put(key, fragment.to_document())
    logger.info("captured command %r (code %d) into %s", fragment.name, fragment.code, path)
    return function


def _warn_on_replacement(store: FragmentStore, key: str, fragment: CommandFragment) -> None:
    if not store.exists(key):
        return
    try:
        previous = store.get(key)
    except StoreError as exc:
        logger.warning("replacing unreadable fragment %s: %s", key, exc)
        return
    if previous.get("name") != fragment.name or previous.get("code") != fragment.code:
        logger.warning(
            "fragment %s held %r (code %r); replaced by %r (code %r)",
            key,
            previous.get("name"),
            previous.get("code"),
            fragment.name,
            fragment.code,
        )
