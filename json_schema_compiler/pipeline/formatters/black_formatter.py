"""
Black formatter for generated modules.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class BlackFormatter(Formatter):
    """Runs black in-process; black is only imported when formatting is requested."""

    def is_available(self) -> bool:
        return importlib.util.find_spec("black") is not None

    def format(self, code: str, config: FormatterConfig) -> str:
        if not self.is_available():
            return code

        black = importlib.import_module("black")
        # Unknown targets let black infer the version from the code
        target = getattr(black.TargetVersion, config.target_version.upper(), None)
        mode = black.Mode(
            target_versions={target} if target is not None else set(),
            line_length=config.line_length,
        )
        try:
            return black.format_str(code, mode=mode)
        except black.InvalidInput as e:
            logger.warning("black rejected the generated module: %s", e)
            return code
