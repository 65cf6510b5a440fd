"""
Base class for AST-based code generation backends.

Defines the interface that the language-specific AST backend implements.
"""

from __future__ import annotations

import ast
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..analyzer.ir_nodes import ImportDef, TypeDescriptor, TypeGraph


@dataclass
class EmittedModule:
    """Declarations of one compilation plus the imports they require."""

    declarations: list[ast.stmt] = field(default_factory=list)
    imports: list[ImportDef] = field(default_factory=list)


class AstBackend(ABC):
    """Abstract base class for AST-based code generation backends."""

    # Type mapping from JSON primitive types to language types
    TYPE_MAP: dict[str, str] = {}

    @abstractmethod
    def emit(self, type_graph: TypeGraph) -> EmittedModule:
        """
        Generate declarations from the type graph.

        Args:
            type_graph: The ordered type graph

        Returns:
            Declarations in type graph order and the imports they need
        """

    @abstractmethod
    def translate_type(self, descriptor: TypeDescriptor) -> ast.expr:
        """
        Translate a type descriptor to a language-specific type annotation.

        Args:
            descriptor: The type descriptor

        Returns:
            Annotation expression
        """
