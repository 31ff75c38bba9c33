"""metagen package root."""

from metagen.exceptions import (
    ConfigError,
    FragmentDecodeError,
    InterfaceMismatchError,
    MalformedArgsError,
    MalformedDeclarationError,
    MetagenError,
    MissingInterfaceError,
    StoreError,
)
from metagen.runtime.build_mode import BuildMode
from metagen.runtime.env_policy import mode_scope, root_scope
from metagen.store import FragmentStore
from metagen.dispatch import Marker, TaggedUnion
from metagen.capture import capture_command, capture_interface
from metagen.synthesis import generate_registry
from metagen.capture.decorators import command, command_interface, dispatch_type
from metagen.accessor import delegate

__all__ = [
    "__version__",
    "BuildMode",
    "ConfigError",
    "FragmentDecodeError",
    "FragmentStore",
    "InterfaceMismatchError",
    "MalformedArgsError",
    "MalformedDeclarationError",
    "Marker",
    "MetagenError",
    "MissingInterfaceError",
    "StoreError",
    "TaggedUnion",
    "capture_command",
    "capture_interface",
    "command",
    "command_interface",
    "delegate",
    "dispatch_type",
    "generate_registry",
    "mode_scope",
    "root_scope",
]

__version__ = "0.1.0"
