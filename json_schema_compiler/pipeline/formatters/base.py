"""
Formatter interface used by the module renderer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..config import FormatterConfig


class Formatter(ABC):
    """Rewrites a rendered module in a tool's canonical style."""

    @abstractmethod
    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Return code in the tool's style.

        Args:
            code: The generated module source
            config: Line length and target version to format for

        Returns:
            Formatted code, or code unchanged when the tool rejects it
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the tool can be run in this environment."""
