"""
Error taxonomy for the compiler.

Every user-facing failure is a CompilerError subclass. The CLI turns any of
them into a single diagnostic line and exit code 2.
"""

from __future__ import annotations


class CompilerError(Exception):
    """Base class for errors reported to the user."""


class ArgumentError(CompilerError):
    """Raised for invalid invocations (no inputs, bad package name)."""


class FileAccessError(CompilerError):
    """Raised when an input cannot be read or the output cannot be written."""


class DecodeError(CompilerError):
    """Raised when an input document is not well-formed JSON."""


class SchemaError(CompilerError):
    """Raised when a schema cannot be compiled.

    This can happen when:
    - A $ref points at nothing
    - allOf members assert incompatible types
    - Keywords contradict each other (e.g. items on a non-array)
    - No identifier can be derived for a type
    """


class FormattingError(CompilerError):
    """Raised when the rendered module is not valid Python source."""


class EmitterInvariantError(RuntimeError):
    """Raised when the emitter is handed declarations out of order.

    Ordering is the type graph builder's job, so this signals a bug in the
    compiler, not a problem with the input.
    """
