from __future__ import annotations

from metagen.synthesis.naming import (
    is_valid_identifier,
    snake,
    split_words,
    upper_camel,
    upper_snake,
)


def test_split_words_handles_separators_and_case_boundaries() -> None:
    assert split_words("EchoText") == ["Echo", "Text"]
    assert split_words("echo text") == ["echo", "text"]
    assert split_words("echo_text") == ["echo", "text"]
    assert split_words("HTTPGet") == ["HTTP", "Get"]


def test_case_conversions() -> None:
    assert upper_camel("Nope") == "Nope"
    assert upper_camel("echo text") == "EchoText"
    assert upper_camel("HTTPGet") == "HttpGet"
    assert snake("EchoText") == "echo_text"
    assert upper_snake("EchoText") == "ECHO_TEXT"
    assert upper_snake("Nope") == "NOPE"


def test_display_names_differing_in_case_share_a_key() -> None:
    assert snake("Echo") == snake("echo") == "echo"


def test_identifier_check_rejects_keywords_and_digits() -> None:
    assert is_valid_identifier("Nope")
    assert not is_valid_identifier("None")
    assert not is_valid_identifier("123")
    assert not is_valid_identifier("")


def test_non_ascii_letters_are_kept() -> None:
    assert split_words("ÉchoÜber") == ["Écho", "Über"]
    assert upper_camel("Écho") == "Écho"
    assert snake("Écho") == "écho"
    assert upper_snake("Écho") == "ÉCHO"
    assert snake("Écho") != snake("Cho")
