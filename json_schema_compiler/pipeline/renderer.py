"""
Module renderer.

Wraps emitted declarations and imports in a complete source file through the
jinja2 module template, checks that the result parses, and optionally runs a
formatter over it.
"""

from __future__ import annotations

import ast
import logging
from pathlib import Path

import jinja2

from ..errors import FormattingError
from .analyzer.ir_nodes import ImportDef
from .config import CompilerConfig
from .formatters import get_formatter

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates" / "python"


class ModuleRenderer:
    """Renders the generated Python module."""

    def __init__(self, config: CompilerConfig):
        self.config = config
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(TEMPLATES_DIR),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.module_template = self.jinja_env.get_template("module.py.jinja2")

    def render(self, declarations: list[ast.stmt], imports: list[ImportDef]) -> str:
        """
        Render a complete module.

        Args:
            declarations: Class definitions in declaration order
            imports: Imports required by the declarations and the runtime

        Returns:
            Module source, ending with a newline

        Raises:
            FormattingError: If the rendered text is not valid Python or the
                configured formatter is unknown
        """
        code = self.module_template.render(
            package_name=self.config.package_name,
            imports=imports,
            declarations=[ast.unparse(d) for d in declarations],
        )

        if self.config.output.validate_before_write:
            self.validate(code)

        if self.config.formatter.enabled:
            code = self._format(code)

        if not code.endswith("\n"):
            code += "\n"
        return code

    def validate(self, code: str) -> None:
        """Check that code parses as Python."""
        try:
            ast.parse(code)
        except SyntaxError as e:
            raise FormattingError(f"generated module is not valid Python: {e}") from e

    def _format(self, code: str) -> str:
        try:
            formatter = get_formatter(self.config.formatter.name)
        except ValueError as e:
            raise FormattingError(str(e)) from e
        if not formatter.is_available():
            logger.warning("Formatter %s is not available, output left unformatted", self.config.formatter.name)
            return code
        logger.debug("Formatting output with %s", self.config.formatter.name)
        return formatter.format(code, self.config.formatter)
