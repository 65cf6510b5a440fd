"""
Ruff formatter for generated modules.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class RuffFormatter(Formatter):
    """Pipes the module through `ruff format` on stdin and reads the result back."""

    # Seconds before a hanging ruff process is abandoned
    TIMEOUT = 30

    def is_available(self) -> bool:
        return shutil.which("ruff") is not None

    def format(self, code: str, config: FormatterConfig) -> str:
        if not self.is_available():
            return code

        command = [
            "ruff",
            "format",
            "--line-length",
            str(config.line_length),
            "--target-version",
            config.target_version,
            "--stdin-filename",
            "generated.py",
        ]
        try:
            completed = subprocess.run(command, input=code, capture_output=True, text=True, timeout=self.TIMEOUT)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("ruff could not be run on the generated module: %s", e)
            return code

        if completed.returncode != 0:
            logger.warning("ruff rejected the generated module: %s", completed.stderr.strip())
            return code
        return completed.stdout
