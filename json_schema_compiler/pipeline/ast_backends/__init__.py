"""
AST backends that turn the type graph into target-language syntax trees.
"""

from __future__ import annotations

from .base import AstBackend, EmittedModule
from .python_ast_backend import PythonAstBackend

__all__ = [
    "AstBackend",
    "EmittedModule",
    "PythonAstBackend",
]
