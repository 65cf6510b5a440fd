"""
Utility functions for case conversion.
"""

import re

# Splits text into words, keeping acronyms ("HTTPServer" -> "HTTP", "Server")
_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots) to spaces."""
    return re.sub(r"[_\-.]", " ", text)


def split_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries.

    Characters that are not ASCII letters or digits never reach the result.
    """
    return _WORD_PATTERN.findall(_normalize_separators(text))


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "FIRST_NAME" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "first 3 rows" -> "First3Rows"
        "ABC" -> "Abc"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    return "".join(word.capitalize() for word in split_words(text))


def to_snake_case(text: str) -> str:
    """Convert camelCase, PascalCase or kebab-case text to snake_case.

    Examples:
        "firstName" -> "first_name"
        "HTTPServer" -> "http_server"
        "zip-code" -> "zip_code"
    """
    return "_".join(word.lower() for word in split_words(text))


def to_upper_snake_case(text: str) -> str:
    """Convert text to UPPER_SNAKE_CASE (used for enum members)."""
    return "_".join(word.upper() for word in split_words(text))
