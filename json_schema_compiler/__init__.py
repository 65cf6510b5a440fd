"""
json_schema_compiler - compile JSON Schema documents into Python dataclasses.
"""

from .errors import (
    ArgumentError,
    CompilerError,
    DecodeError,
    FileAccessError,
    FormattingError,
    SchemaError,
)
from .loader import load_documents
from .pipeline import CompileResult, CompilerConfig, SchemaCompiler, compile_schemas

__version__ = "1.0.0"

__all__ = [
    "ArgumentError",
    "CompileResult",
    "CompilerConfig",
    "CompilerError",
    "DecodeError",
    "FileAccessError",
    "FormattingError",
    "SchemaCompiler",
    "SchemaError",
    "compile_schemas",
    "load_documents",
]
