"""
AST (Abstract Syntax Tree) node definitions for JSON Schema.

These nodes represent the parsed structure of a JSON Schema before any
reference resolution. Nodes are immutable and live in a SchemaArena; they
point at each other through integer node ids so that shared and cyclic
structure is explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

NodeId = int


@dataclass(frozen=True, eq=False)
class SchemaNode:
    """Base class for all AST nodes."""

    node_id: NodeId = -1

    # Index of the document this node was parsed from
    document: int = 0

    # JSON pointer of the node inside its document (for error messages)
    pointer: str = "#"

    # Keywords present on the raw schema object
    keywords: frozenset[str] = frozenset()

    title: str | None = None

    # Definition key or document name, used when there is no title
    name_hint: str | None = None


@dataclass(frozen=True, eq=False)
class RefNode(SchemaNode):
    """Represents a $ref (unresolved reference)."""

    ref: str = ""


@dataclass(frozen=True, eq=False)
class AllOfNode(SchemaNode):
    """Represents allOf composition; sibling keywords become an extra member."""

    members: tuple[NodeId, ...] = ()


@dataclass(frozen=True, eq=False)
class EnumNode(SchemaNode):
    """Represents an enum of JSON literals."""

    values: tuple[Any, ...] = ()
    declared_types: tuple[str, ...] = ()


@dataclass(frozen=True, eq=False)
class UnionNode(SchemaNode):
    """Represents a oneOf, anyOf or multi-valued type union."""

    variants: tuple[NodeId, ...] = ()
    combinator: str = "oneOf"  # "oneOf", "anyOf" or "type"


@dataclass(frozen=True, eq=False)
class ObjectNode(SchemaNode):
    """Represents an object type, with or without properties."""

    properties: tuple[tuple[str, NodeId], ...] = ()
    required: tuple[str, ...] = ()

    # Node id of the additionalProperties schema, or its boolean value, or None
    additional: NodeId | bool | None = None


@dataclass(frozen=True, eq=False)
class ArrayNode(SchemaNode):
    """Represents an array type."""

    items: NodeId | None = None


@dataclass(frozen=True, eq=False)
class PrimitiveNode(SchemaNode):
    """Represents a primitive type (string, integer, number, boolean, null)."""

    type_name: str = ""


@dataclass(frozen=True, eq=False)
class AnyNode(SchemaNode):
    """Represents a schema with no constraining keywords."""


@dataclass
class SchemaDocument:
    """A decoded schema document and the address it was loaded from."""

    uri: str
    schema: Any

    @property
    def id(self) -> str | None:
        """The document's $id, if it declares one."""
        if isinstance(self.schema, dict) and isinstance(self.schema.get("$id"), str):
            return self.schema["$id"]
        return None


@dataclass
class SchemaArena:
    """Owns every parsed node of one compilation."""

    documents: list[SchemaDocument] = field(default_factory=list)
    nodes: list[SchemaNode] = field(default_factory=list)

    # Root node id of each document, in document order
    roots: list[NodeId] = field(default_factory=list)

    # Definition node ids of each document, in document order
    definitions: list[list[NodeId]] = field(default_factory=list)

    # (document index, pointer parts) -> node id of every addressable node
    by_pointer: dict[tuple[int, tuple[str, ...]], NodeId] = field(default_factory=dict)

    def __getitem__(self, node_id: NodeId) -> SchemaNode:
        return self.nodes[node_id]

    def location(self, node: SchemaNode) -> str:
        """Human readable location: '<document uri><pointer>'."""
        return f"{self.documents[node.document].uri}{node.pointer}"
