"""
Schema AST - parsed, unresolved JSON Schema nodes.
"""

from __future__ import annotations

from .nodes import (
    AllOfNode,
    AnyNode,
    ArrayNode,
    EnumNode,
    NodeId,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaArena,
    SchemaDocument,
    SchemaNode,
    UnionNode,
)
from .parser import SchemaParser

__all__ = [
    "AllOfNode",
    "AnyNode",
    "ArrayNode",
    "EnumNode",
    "NodeId",
    "ObjectNode",
    "PrimitiveNode",
    "RefNode",
    "SchemaArena",
    "SchemaDocument",
    "SchemaNode",
    "SchemaParser",
    "UnionNode",
]
