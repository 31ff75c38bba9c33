"""Decorators that hook the capture and generation phases into imports.

Each decorator acts only under its own build mode and otherwise returns its
argument untouched, so annotated code imports and runs normally.
"""

from __future__ import annotations

import sys
from typing import Callable, TypeVar

from metagen.capture.normalize import declaration_of
from metagen.capture.phases import capture_command, capture_interface, parse_command_args
from metagen.config import current_mode, resolve_settings
from metagen.runtime.build_mode import BuildMode
from metagen.synthesis.registry import DEFAULT_METHOD_NAME, expand_registry, generate_registry

FuncT = TypeVar("FuncT", bound=Callable[..., object])


def command_interface(func: FuncT) -> FuncT:
    if current_mode() is BuildMode.INTERFACE_CAPTURE:
        capture_interface(declaration_of(func))
    return func


def command(*args: object) -> Callable[[FuncT], FuncT]:
    """Mark a free function as the body of command ``(code, name)``.

    Arguments are validated when the decorator is built, in every mode.
    """
    parsed = parse_command_args(*args)

    def decorator(func: FuncT) -> FuncT:
        if current_mode() is BuildMode.COMMAND_COLLECTION:
            capture_command(parsed.code, parsed.name, declaration_of(func))
        return func

    return decorator


def dispatch_type(
    interface: type, *, method_name: str = DEFAULT_METHOD_NAME
) -> Callable[[type], type]:
    def decorator(cls: type) -> type:
        settings = resolve_settings()
        if settings.mode is not BuildMode.REGISTRY_GENERATION:
            return cls
        unit = generate_registry(
            cls.__name__,
            interface.__name__,
            settings.commands_dir,
            method_name=method_name,
            sort_by_code=settings.sort_by_code,
        )
        generated = expand_registry(unit, vars(sys.modules[cls.__module__]))
        if cls.__doc__:
            generated.__doc__ = cls.__doc__
        return generated

    return decorator
