"""
Post-processing formatters for generated code.
"""

from __future__ import annotations

from .base import Formatter
from .black_formatter import BlackFormatter
from .ruff_formatter import RuffFormatter

FORMATTERS: dict[str, type[Formatter]] = {
    "ruff": RuffFormatter,
    "black": BlackFormatter,
}


def get_formatter(name: str) -> Formatter:
    """Create the formatter registered under name."""
    if name not in FORMATTERS:
        raise ValueError(f"Unknown formatter {name!r}, expected one of {', '.join(FORMATTERS)}")
    return FORMATTERS[name]()


__all__ = [
    "BlackFormatter",
    "Formatter",
    "RuffFormatter",
    "get_formatter",
]
