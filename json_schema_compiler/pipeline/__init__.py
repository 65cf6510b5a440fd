"""
Pipeline - AST-based JSON Schema to Python compiler.

This module provides a multi-phase architecture for compiling JSON schemas
into Python declarations:

1. Phase 1 (Parser): Parse JSON Schema documents into the Schema AST
2. Phase 2 (Resolver): Resolve $ref and allOf into a shared schema graph
3. Phase 3 (Builder): Synthesize, name and order the types
4. Phase 4 (AST Backend): Generate Python AST from the type graph
5. Phase 5 (Renderer): Wrap declarations in a module, optionally format it
6. Phase 6 (Writer): Write the module only when its content changed
"""

from __future__ import annotations

from .compiler import CompileResult, SchemaCompiler, check_package_name, compile_schemas
from .config import CompilerConfig, FormatterConfig, OutputConfig
from .renderer import ModuleRenderer
from .schema_ast.nodes import SchemaDocument
from .writer import AtomicWriter, write_if_different

__all__ = [
    "AtomicWriter",
    "CompileResult",
    "CompilerConfig",
    "FormatterConfig",
    "ModuleRenderer",
    "OutputConfig",
    "SchemaCompiler",
    "SchemaDocument",
    "check_package_name",
    "compile_schemas",
    "write_if_different",
]
