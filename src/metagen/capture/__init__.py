from metagen.capture.normalize import (
    PLACEHOLDER,
    RECEIVER,
    SignatureEraser,
    canonical_text,
    declaration_of,
    normalize_signature,
    parse_declaration,
    render,
    signatures_equal,
    with_receiver,
)
from metagen.capture.phases import (
    CommandArgs,
    capture_command,
    capture_interface,
    load_interface_signature,
    parse_command_args,
)

__all__ = [
    "PLACEHOLDER",
    "RECEIVER",
    "SignatureEraser",
    "canonical_text",
    "declaration_of",
    "normalize_signature",
    "parse_declaration",
    "render",
    "signatures_equal",
    "with_receiver",
    "CommandArgs",
    "capture_command",
    "capture_interface",
    "load_interface_signature",
    "parse_command_args",
]
