"""
Naming policy for generated identifiers.

Turns schema titles, definition keys and property key paths into valid,
unique Python identifiers. One policy instance is scoped to one compilation
so identifiers never collide across the documents compiled together.
"""

from __future__ import annotations

import keyword
import logging
from typing import Any

from ...errors import SchemaError
from ...utils import snake_to_pascal_case, to_snake_case, to_upper_snake_case

logger = logging.getLogger(__name__)

# Names the generated module defines or imports itself
RESERVED_TYPE_NAMES = ("Any", "Callable", "DecodeError", "Enum", "dataclass", "field")

# Method names generated on every type, and names the class body itself uses
RESERVED_MEMBER_NAMES = ("from_json", "to_json", "field", "list", "dict")


class NamingPolicy:
    """Assigns unique type and member identifiers.

    The first schema to propose a sanitized name keeps it unchanged; later
    proposals of the same name get a numeric suffix in claim order, so the
    same input always yields the same names.
    """

    def __init__(self):
        self._taken: set[str] = set(RESERVED_TYPE_NAMES)
        self._by_position: dict[str, str] = {}

    def sanitize(self, candidate: str) -> str:
        """Convert a candidate to an exported (PascalCase) Python identifier."""
        name = snake_to_pascal_case(candidate)
        if name and name[0].isdigit():
            name = f"T{name}"
        if keyword.iskeyword(name):
            name = f"{name}Type"
        return name

    def claim(self, candidate: str, position: str) -> str:
        """
        Claim a unique type name.

        Args:
            candidate: Title, definition key or key path proposed for the type
            position: Where the proposing schema lives (used for idempotence
                and error messages)

        Returns:
            The unique identifier assigned to this position

        Raises:
            SchemaError: If no identifier can be derived from the candidate
        """
        if position in self._by_position:
            return self._by_position[position]

        base = self.sanitize(candidate)
        if not base:
            raise SchemaError(f"cannot derive a type name from {candidate!r} for {position}")

        name = base
        suffix = 2
        while name in self._taken:
            name = f"{base}{suffix}"
            suffix += 1

        if name != base:
            logger.debug("Type name %s is taken, using %s for %s", base, name, position)
        self._taken.add(name)
        self._by_position[position] = name
        return name

    def member_name(self, candidate: str, taken: set[str]) -> str:
        """
        Derive a snake_case attribute name unique within one type.

        Args:
            candidate: The JSON property key (or variant label)
            taken: Names already used in the same type; updated in place

        Returns:
            A valid, unused attribute identifier
        """
        base = to_snake_case(candidate) or "field"
        if base[0].isdigit():
            base = f"field_{base}"
        if keyword.iskeyword(base) or base in RESERVED_MEMBER_NAMES:
            base = f"{base}_"
        return self._unique_member(base, taken, "_")

    def enum_member_name(self, value: Any, taken: set[str]) -> str:
        """
        Derive an UPPER_SNAKE enum member name from a literal value.

        Examples:
            "in-progress" -> "IN_PROGRESS"
            None -> "NULL"
            -1 -> "VALUE_MINUS_1"
            "" -> "EMPTY"
        """
        if value is None:
            base = "NULL"
        elif isinstance(value, bool):
            base = "TRUE" if value else "FALSE"
        elif isinstance(value, (int, float)):
            text = str(value).replace("-", "minus ").replace(".", " point ")
            base = to_upper_snake_case(f"value {text}")
        else:
            base = to_upper_snake_case(str(value)) or "EMPTY"
            if base[0].isdigit():
                base = f"VALUE_{base}"
        return self._unique_member(base, taken, "_")

    def _unique_member(self, base: str, taken: set[str], separator: str) -> str:
        name = base
        suffix = 2
        while name in taken:
            name = f"{base}{separator}{suffix}"
            suffix += 1
        taken.add(name)
        return name
