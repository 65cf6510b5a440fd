import pytest

from json_schema_compiler.utils import snake_to_pascal_case, split_words, to_snake_case, to_upper_snake_case


@pytest.mark.parametrize(
    "text, expected",
    [
        ("first_name", "FirstName"),
        ("FIRST_NAME", "FirstName"),
        ("actionTemplate", "ActionTemplate"),
        ("first 3 rows", "First3Rows"),
        ("ABC", "Abc"),
        ("zip-code", "ZipCode"),
        ("a.b", "AB"),
        ("", ""),
    ],
)
def test_snake_to_pascal_case(text, expected):
    assert snake_to_pascal_case(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("firstName", "first_name"),
        ("HTTPServer", "http_server"),
        ("zip-code", "zip_code"),
        ("Already_snake", "already_snake"),
    ],
)
def test_to_snake_case(text, expected):
    assert to_snake_case(text) == expected


def test_to_upper_snake_case():
    assert to_upper_snake_case("in-progress") == "IN_PROGRESS"
    assert to_upper_snake_case("camelCase value") == "CAMEL_CASE_VALUE"


def test_split_words_drops_punctuation():
    assert split_words("$ref: #/a~b") == ["ref", "a", "b"]
