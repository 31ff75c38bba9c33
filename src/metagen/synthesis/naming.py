from __future__ import annotations

import keyword
import re

_SEPARATOR_RE = re.compile(r"[\W_]+")


def _is_boundary(previous: str, current: str, following: str) -> bool:
    if current.isupper() and (previous.islower() or previous.isdigit()):
        return True
    return previous.isupper() and current.isupper() and following.islower()


def _split_case(chunk: str) -> list[str]:
    parts: list[str] = []
    start = 0
    for index in range(1, len(chunk)):
        following = chunk[index + 1] if index + 1 < len(chunk) else ""
        if _is_boundary(chunk[index - 1], chunk[index], following):
            parts.append(chunk[start:index])
            start = index
    parts.append(chunk[start:])
    return parts


def split_words(value: str) -> list[str]:
    """Split a display name on separators and case boundaries.

    ``"EchoText"``, ``"echo text"`` and ``"echo_text"`` all yield
    ``["Echo", "Text"]`` or ``["echo", "text"]``. Letters outside ASCII are
    word characters, so ``"ÉchoÜber"`` yields ``["Écho", "Über"]``.
    """
    words: list[str] = []
    for chunk in _SEPARATOR_RE.split(value):
        if not chunk:
            continue
        words.extend(part for part in _split_case(chunk) if part)
    return words


def upper_camel(value: str) -> str:
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(value))


def snake(value: str) -> str:
    return "_".join(word.lower() for word in split_words(value))


def upper_snake(value: str) -> str:
    return "_".join(word.upper() for word in split_words(value))


def is_valid_identifier(value: str) -> bool:
    return value.isidentifier() and not keyword.iskeyword(value)
