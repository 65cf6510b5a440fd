"""
Reference resolver for $ref and allOf resolution.

Turns the parsed SchemaArena into a ResolvedGraph. Every $ref is replaced by
the identity of its target, so two references to the same definition share
one ResolvedSchema. allOf compositions are flattened into a single merged
schema. Structural cycles are kept and their back-edges tagged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import unquote

from jsonpointer import JsonPointer, JsonPointerException

from ...errors import SchemaError
from ..schema_ast.nodes import (
    AllOfNode,
    AnyNode,
    ArrayNode,
    EnumNode,
    NodeId,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaArena,
    SchemaNode,
    UnionNode,
)

logger = logging.getLogger(__name__)

SchemaId = int


class SchemaKind(Enum):
    """Shape of a resolved schema."""

    OBJECT = "object"
    ARRAY = "array"
    PRIMITIVE = "primitive"
    ENUM = "enum"
    UNION = "union"
    ANY = "any"


_KIND_BY_NODE: dict[type[SchemaNode], SchemaKind] = {
    ObjectNode: SchemaKind.OBJECT,
    ArrayNode: SchemaKind.ARRAY,
    PrimitiveNode: SchemaKind.PRIMITIVE,
    EnumNode: SchemaKind.ENUM,
    UnionNode: SchemaKind.UNION,
    AnyNode: SchemaKind.ANY,
}


@dataclass(eq=False)
class ResolvedSchema:
    """A schema after $ref dereferencing and allOf merging.

    Identity (schema_id) is the deduplication key for type synthesis.
    """

    schema_id: SchemaId
    kind: SchemaKind
    location: str = ""
    keywords: frozenset[str] = frozenset()
    title: str | None = None
    name_hint: str | None = None

    # OBJECT
    properties: list[tuple[str, SchemaId]] = field(default_factory=list)
    required: list[str] = field(default_factory=list)
    additional: SchemaId | bool | None = None

    # ARRAY
    items: SchemaId | None = None

    # PRIMITIVE
    type_name: str | None = None

    # ENUM
    enum_values: list[Any] = field(default_factory=list)
    declared_types: tuple[str, ...] = ()

    # UNION
    variants: list[SchemaId] = field(default_factory=list)
    combinator: str = ""

    def children(self) -> list[SchemaId]:
        """Schema ids this schema refers to, in declaration order."""
        result = [schema_id for _, schema_id in self.properties]
        if self.additional is not None and not isinstance(self.additional, bool):
            result.append(self.additional)
        if self.items is not None:
            result.append(self.items)
        result.extend(self.variants)
        return result

    def asserted_type(self) -> str | None:
        """The JSON type this schema insists on, if any."""
        if self.kind is SchemaKind.OBJECT:
            return "object"
        if self.kind is SchemaKind.ARRAY:
            return "array"
        if self.kind is SchemaKind.PRIMITIVE:
            return self.type_name
        if self.kind is SchemaKind.ENUM and len(self.declared_types) == 1:
            return self.declared_types[0]
        return None


@dataclass
class ResolvedGraph:
    """All resolved schemas of one compilation."""

    schemas: list[ResolvedSchema] = field(default_factory=list)

    # Root schema id of each document, in document order
    roots: list[SchemaId] = field(default_factory=list)

    # Definition schema ids of each document, in document order
    definitions: list[list[SchemaId]] = field(default_factory=list)

    # (from, to) pairs of edges that close a cycle
    back_edges: set[tuple[SchemaId, SchemaId]] = field(default_factory=set)

    def __getitem__(self, schema_id: SchemaId) -> ResolvedSchema:
        return self.schemas[schema_id]

    def entry_points(self) -> list[SchemaId]:
        """Roots and definitions in traversal order, without duplicates."""
        ordered: dict[SchemaId, None] = {}
        for root, definitions in zip(self.roots, self.definitions):
            ordered[root] = None
            for schema_id in definitions:
                ordered[schema_id] = None
        return list(ordered)

    def is_back_edge(self, source: SchemaId, target: SchemaId) -> bool:
        return (source, target) in self.back_edges


def _compatible(first: str | None, second: str | None) -> bool:
    """Whether two asserted types can hold at the same time."""
    if first is None or second is None or first == second:
        return True
    return {first, second} == {"integer", "number"}


class SchemaResolver:
    """Resolves $ref and allOf into a shared, cycle-aware schema graph."""

    def __init__(self, arena: SchemaArena):
        """
        Initialize the resolver.

        Args:
            arena: The parsed schema arena
        """
        self.arena = arena
        self.graph = ResolvedGraph()
        self._memo: dict[NodeId, SchemaId] = {}

        # Schemas allocated but not yet filled in
        self._pending: set[SchemaId] = set()

        # Ref nodes currently being followed (detects $ref-only cycles)
        self._following: set[NodeId] = set()

    def resolve(self) -> ResolvedGraph:
        """
        Resolve every document of the arena.

        Returns:
            ResolvedGraph with shared identities and tagged back-edges
        """
        for root, definitions in zip(self.arena.roots, self.arena.definitions):
            self.graph.roots.append(self._resolve(root))
            self.graph.definitions.append([self._resolve(node_id) for node_id in definitions])

        self._tag_back_edges()
        logger.debug(
            "Resolved %d nodes into %d schemas (%d back-edges)",
            len(self.arena.nodes),
            len(self.graph.schemas),
            len(self.graph.back_edges),
        )
        return self.graph

    def _resolve(self, node_id: NodeId) -> SchemaId:
        """Resolve a node to the identity of its ResolvedSchema."""
        if node_id in self._memo:
            return self._memo[node_id]

        node = self.arena[node_id]
        if isinstance(node, RefNode):
            return self._resolve_ref(node)
        if isinstance(node, AllOfNode):
            return self._resolve_allof(node)

        schema = self._allocate(node, _KIND_BY_NODE[type(node)])
        self._pending.add(schema.schema_id)

        if isinstance(node, ObjectNode):
            schema.properties = [(key, self._resolve(child)) for key, child in node.properties]
            schema.required = list(node.required)
            if isinstance(node.additional, bool) or node.additional is None:
                schema.additional = node.additional
            else:
                schema.additional = self._resolve(node.additional)
        elif isinstance(node, ArrayNode):
            schema.items = None if node.items is None else self._resolve(node.items)
        elif isinstance(node, PrimitiveNode):
            schema.type_name = node.type_name
        elif isinstance(node, EnumNode):
            schema.enum_values = list(node.values)
            schema.declared_types = node.declared_types
        elif isinstance(node, UnionNode):
            schema.variants = [self._resolve(child) for child in node.variants]
            schema.combinator = node.combinator

        self._pending.discard(schema.schema_id)
        return schema.schema_id

    def _allocate(self, node: SchemaNode, kind: SchemaKind) -> ResolvedSchema:
        """Create an empty ResolvedSchema for a node and memoize it."""
        schema = ResolvedSchema(
            schema_id=len(self.graph.schemas),
            kind=kind,
            location=self.arena.location(node),
            keywords=node.keywords,
            title=node.title,
            name_hint=node.name_hint,
        )
        self.graph.schemas.append(schema)
        self._memo[node.node_id] = schema.schema_id
        return schema

    def _resolve_ref(self, node: RefNode) -> SchemaId:
        """Follow a $ref to its target's identity."""
        if node.node_id in self._following:
            raise SchemaError(f"$ref cycle without any schema structure through '{node.ref}' at {self.arena.location(node)}")

        target = self._lookup(node)
        self._following.add(node.node_id)
        try:
            schema_id = self._resolve(target)
        finally:
            self._following.discard(node.node_id)

        self._memo[node.node_id] = schema_id
        return schema_id

    def _lookup(self, node: RefNode) -> NodeId:
        """Find the node a $ref points at."""
        uri, _, fragment = node.ref.partition("#")
        document = self._find_document(uri, node) if uri else node.document

        try:
            parts = tuple(JsonPointer(unquote(fragment)).parts) if fragment else ()
        except JsonPointerException as e:
            raise SchemaError(f"invalid JSON pointer in $ref '{node.ref}' at {self.arena.location(node)}: {e}") from e

        target = self.arena.by_pointer.get((document, parts))
        if target is None:
            raise SchemaError(f"unresolved $ref '{node.ref}' at {self.arena.location(node)}")
        return target

    def _find_document(self, uri: str, node: RefNode) -> int:
        """Find the document addressed by the URI part of a $ref."""
        documents = self.arena.documents
        for index, document in enumerate(documents):
            if uri in (document.uri, document.id):
                return index

        basename = PurePosixPath(uri).name
        for index, document in enumerate(documents):
            candidates = [document.uri, document.id or ""]
            if any(PurePosixPath(c.replace("\\", "/")).name == basename for c in candidates if c):
                return index

        raise SchemaError(f"unresolved $ref '{node.ref}' at {self.arena.location(node)}: no document '{uri}'")

    def _resolve_allof(self, node: AllOfNode) -> SchemaId:
        """Flatten an allOf into one merged schema."""
        if len(node.members) == 1:
            # Nothing to merge: the allOf is an alias of its member, which may
            # be an enclosing schema still being resolved
            member_id = self._resolve(node.members[0])
            self._memo[node.node_id] = member_id
            logger.debug("allOf at %s aliases %s", self.arena.location(node), self.graph[member_id].location)
            return member_id

        merged = self._allocate(node, SchemaKind.ANY)
        merged.keywords = frozenset()
        self._pending.add(merged.schema_id)

        members = [self.graph[self._resolve(member)] for member in node.members]
        for member in members:
            if member.schema_id in self._pending:
                raise SchemaError(f"allOf at {merged.location} composes {member.location}, which contains it")

        self._merge(merged, members)
        self._pending.discard(merged.schema_id)
        return merged.schema_id

    def _merge(self, merged: ResolvedSchema, members: list[ResolvedSchema]) -> None:
        """Combine allOf members into the merged schema."""
        location = merged.location
        asserted: str | None = None
        for member in members:
            if member.kind is SchemaKind.UNION:
                raise SchemaError(f"allOf at {location} cannot compose the union at {member.location}")
            member_type = member.asserted_type()
            if not _compatible(asserted, member_type):
                raise SchemaError(f"allOf at {location} combines incompatible types '{asserted}' and '{member_type}'")
            if member_type is not None and asserted != "integer":
                asserted = member_type
            merged.keywords |= member.keywords

        enums = [m for m in members if m.kind is SchemaKind.ENUM]
        if enums:
            if len(enums) > 1 or any(m.kind in (SchemaKind.OBJECT, SchemaKind.ARRAY) for m in members):
                raise SchemaError(f"allOf at {location} can only combine one enum with plain type constraints")
            merged.kind = SchemaKind.ENUM
            merged.enum_values = list(enums[0].enum_values)
            merged.declared_types = (asserted,) if asserted else enums[0].declared_types
        elif asserted == "object":
            merged.kind = SchemaKind.OBJECT
            self._merge_objects(merged, [m for m in members if m.kind is SchemaKind.OBJECT])
        elif asserted == "array":
            merged.kind = SchemaKind.ARRAY
            items = {m.items for m in members if m.kind is SchemaKind.ARRAY and m.items is not None}
            if len(items) > 1:
                raise SchemaError(f"allOf at {location} combines arrays with different items")
            merged.items = items.pop() if items else None
        elif asserted is not None:
            merged.kind = SchemaKind.PRIMITIVE
            merged.type_name = asserted

    def _merge_objects(self, merged: ResolvedSchema, members: list[ResolvedSchema]) -> None:
        """Union properties and required sets of object members."""
        properties: dict[str, SchemaId] = {}
        required: dict[str, None] = {}
        for member in members:
            for key, schema_id in member.properties:
                existing = properties.setdefault(key, schema_id)
                if existing != schema_id:
                    first, second = self.graph[existing].asserted_type(), self.graph[schema_id].asserted_type()
                    if not _compatible(first, second):
                        raise SchemaError(
                            f"allOf at {merged.location} defines property '{key}' as both '{first}' and '{second}'"
                        )
            required.update(dict.fromkeys(member.required))

            if member.additional is False:
                merged.additional = False
            elif merged.additional is None and member.additional is not None:
                merged.additional = member.additional

        merged.properties = list(properties.items())
        merged.required = list(required)

    def _tag_back_edges(self) -> None:
        """Depth-first walk marking edges into schemas still on the stack."""
        on_stack: set[SchemaId] = set()
        done: set[SchemaId] = set()

        for start in self.graph.entry_points():
            if start in done:
                continue
            on_stack.add(start)
            stack = [(start, iter(self.graph[start].children()))]
            while stack:
                source, children = stack[-1]
                child = next(children, None)
                if child is None:
                    stack.pop()
                    on_stack.discard(source)
                    done.add(source)
                elif child in on_stack:
                    self.graph.back_edges.add((source, child))
                elif child not in done:
                    on_stack.add(child)
                    stack.append((child, iter(self.graph[child].children())))
