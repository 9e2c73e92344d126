"""Tests for the extraction fallback ladder."""

import pytest

from shopping_assistant.response_parser import ExtractionResult, parse_extraction


def test_bare_array_becomes_terms_without_reply():
    result = parse_extraction('["milk","bread"]', "quiero leche")

    assert result == ExtractionResult(("milk", "bread"), None)


def test_fenced_object_reads_reply_and_terms():
    raw = '```json\n{"assistant_reply":"hi","search_terms":["eggs"]}\n```'

    result = parse_extraction(raw, "eggs please")

    assert result.search_terms == ("eggs",)
    assert result.assistant_reply == "hi"


def test_prose_falls_back_to_message():
    result = parse_extraction("not json at all", "eggs please")

    assert result == ExtractionResult(("eggs please",), None)


def test_json_embedded_in_prose_is_recovered():
    raw = 'Claro, aquí tienes: ["carne", "carbon", "chorizo"] ¡buen asado!'

    result = parse_extraction(raw, "quiero hacer un asado")

    assert result.search_terms == ("carne", "carbon", "chorizo")
    assert result.assistant_reply is None


def test_embedded_object_wins_when_it_opens_first():
    raw = 'Respuesta: {"assistant_reply": "Listo", "search_terms": ["yerba", "azucar"]} fin'

    result = parse_extraction(raw, "mate")

    assert result.search_terms == ("yerba", "azucar")
    assert result.assistant_reply == "Listo"


def test_object_without_terms_uses_message_and_empty_reply():
    result = parse_extraction('{"assistant_reply": "Hola"}', "pan lactal")

    assert result.search_terms == ("pan lactal",)
    assert result.assistant_reply == "Hola"


def test_object_without_reply_defaults_to_empty_string():
    result = parse_extraction('{"search_terms": ["arroz"]}', "arroz")

    assert result.assistant_reply == ""


def test_empty_array_uses_message():
    assert parse_extraction("[]", "fideos").search_terms == ("fideos",)


def test_blank_and_non_string_entries_are_dropped():
    result = parse_extraction('["  ", null, {"x": 1}, " leche ", 7]', "x")

    assert result.search_terms == ("leche", "7")


def test_duplicates_are_kept():
    assert parse_extraction('["pan", "pan"]', "x").search_terms == ("pan", "pan")


def test_scalar_json_is_not_a_result():
    assert parse_extraction('"leche"', "leche entera").search_terms == ("leche entera",)


@pytest.mark.parametrize(
    "raw",
    [None, "", "   ", "```", "[", "{]", '{"search_terms": "leche"}', "]["],
)
def test_never_raises_and_never_returns_empty_terms(raw):
    result = parse_extraction(raw, "mensaje original")

    assert result.search_terms
    assert all(term for term in result.search_terms)


def test_parse_is_deterministic():
    raw = 'text {"search_terms": ["a", "b"]} text'

    assert parse_extraction(raw, "m") == parse_extraction(raw, "m")
