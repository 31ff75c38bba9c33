from metagen.synthesis.naming import snake, split_words, upper_camel, upper_snake
from metagen.synthesis.model import CommandFragment, InterfaceRecord, RegistryUnit
from metagen.synthesis.registry import (
    DEFAULT_METHOD_NAME,
    DEFAULT_VARIANT,
    expand_registry,
    generate_registry,
    load_fragments,
    render_registry,
)

__all__ = [
    "snake",
    "split_words",
    "upper_camel",
    "upper_snake",
    "CommandFragment",
    "InterfaceRecord",
    "RegistryUnit",
    "DEFAULT_METHOD_NAME",
    "DEFAULT_VARIANT",
    "expand_registry",
    "generate_registry",
    "load_fragments",
    "render_registry",
]
