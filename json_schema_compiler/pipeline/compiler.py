"""
Schema compiler orchestrating the pipeline phases.

Documents -> SchemaParser -> SchemaResolver -> TypeGraphBuilder ->
PythonAstBackend -> ModuleRenderer.
"""

from __future__ import annotations

import ast
import keyword
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..errors import ArgumentError
from .analyzer.ir_nodes import ImportDef, TypeGraph
from .analyzer.naming import NamingPolicy
from .analyzer.reference_resolver import SchemaResolver
from .analyzer.type_graph_builder import TypeGraphBuilder
from .ast_backends.python_ast_backend import PythonAstBackend
from .config import CompilerConfig
from .renderer import ModuleRenderer
from .schema_ast.nodes import SchemaDocument
from .schema_ast.parser import SchemaParser

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """Output of one compilation, before rendering."""

    declarations: list[ast.stmt] = field(default_factory=list)
    imports: list[ImportDef] = field(default_factory=list)
    type_graph: TypeGraph = field(default_factory=TypeGraph)


def check_package_name(name: str) -> None:
    """Raise ArgumentError unless name can be a Python package name."""
    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
        raise ArgumentError(f"invalid package name {name!r}")


class SchemaCompiler:
    """
    Compiles JSON Schema documents into Python declarations.

    Every call to compile() starts from scratch: names are unique across the
    documents of one call, and nothing is shared between calls.
    """

    def __init__(self, config: CompilerConfig | None = None):
        """
        Initialize the compiler.

        Args:
            config: Compilation options (defaults to CompilerConfig())

        Raises:
            ArgumentError: If the configured package name is not an identifier
        """
        self.config = config or CompilerConfig()
        check_package_name(self.config.package_name)

    def compile(self, documents: list[SchemaDocument]) -> CompileResult:
        """
        Compile documents into declarations and imports.

        Args:
            documents: Decoded schema documents, in input order

        Returns:
            CompileResult with declarations in dependency order

        Raises:
            ArgumentError: If no documents are given
            SchemaError: If a schema cannot be compiled
        """
        if not documents:
            raise ArgumentError("no JSON Schema files listed")

        # Phase 1: Parse documents into the schema AST
        arena = SchemaParser().parse(documents)

        # Phase 2: Resolve $ref and allOf
        graph = SchemaResolver(arena).resolve()

        # Phase 3: Build the type graph
        type_graph = TypeGraphBuilder(graph, NamingPolicy()).build()

        # Phase 4: Emit Python AST
        emitted = PythonAstBackend().emit(type_graph)

        logger.debug("Compiled %d documents into %d declarations", len(documents), len(emitted.declarations))
        return CompileResult(declarations=emitted.declarations, imports=emitted.imports, type_graph=type_graph)

    def generate(self, documents: list[SchemaDocument]) -> str:
        """
        Compile documents and render the complete module.

        Returns:
            Module source text

        Raises:
            CompilerError: On any compilation or rendering failure
        """
        result = self.compile(documents)
        return ModuleRenderer(self.config).render(result.declarations, result.imports)


def compile_schemas(schemas: Mapping[str, Any], config: CompilerConfig | None = None) -> str:
    """
    Convenience function generating a module from decoded schemas.

    Args:
        schemas: Document address (e.g. "person.json") -> decoded schema
        config: Compilation options

    Returns:
        Module source text
    """
    documents = [SchemaDocument(uri=uri, schema=schema) for uri, schema in schemas.items()]
    return SchemaCompiler(config).generate(documents)
