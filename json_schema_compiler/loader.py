"""
Loading of JSON Schema documents from files or standard input.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from .errors import DecodeError, FileAccessError
from .pipeline.schema_ast.nodes import SchemaDocument

logger = logging.getLogger(__name__)

STDIN_PATH = "-"


def parse_document(uri: str, text: str) -> SchemaDocument:
    """Decode one document, raising DecodeError if it is not JSON."""
    try:
        schema = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"{uri} is not valid JSON: {e.msg} at line {e.lineno} column {e.colno}") from e
    return SchemaDocument(uri=uri, schema=schema)


def load_documents(paths: list[str], stdin: TextIO | None = None) -> list[SchemaDocument]:
    """
    Read and decode schema documents.

    Args:
        paths: File paths, in order; "-" reads standard input
        stdin: Stream used for "-" (defaults to sys.stdin)

    Returns:
        One SchemaDocument per path, addressed by the path as given

    Raises:
        FileAccessError: If a file cannot be read
        DecodeError: If a file is not well-formed JSON
    """
    documents = []
    for path in paths:
        if path == STDIN_PATH:
            text = (stdin or sys.stdin).read()
        else:
            try:
                text = Path(path).read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                raise DecodeError(f"{path} is not UTF-8 text") from e
            except OSError as e:
                raise FileAccessError(f"cannot read {path}: {e.strerror or e}") from e
        logger.debug("Loaded %s (%d characters)", path, len(text))
        documents.append(parse_document(path, text))
    return documents
