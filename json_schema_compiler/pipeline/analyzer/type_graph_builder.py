"""
Type graph builder that transforms resolved schemas into IR.

Phase 3 of the pipeline: synthesize one TypeDescriptor per resolved schema
identity, name the declared ones, break cycles and order the declarations so
every type is declared before its direct uses.
"""

from __future__ import annotations

import logging
from typing import Any

from ...errors import SchemaError
from .ir_nodes import (
    EnumMember,
    EnumType,
    Field,
    MapType,
    NamedReference,
    OpenType,
    OptionalType,
    PrimitiveType,
    SliceType,
    StructType,
    SumType,
    TypeDescriptor,
    TypeGraph,
    Variant,
    iter_references,
)
from .naming import NamingPolicy
from .reference_resolver import ResolvedGraph, ResolvedSchema, SchemaId, SchemaKind

logger = logging.getLogger(__name__)


def json_type_of(value: Any) -> str:
    """JSON type name of a decoded literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


class TypeGraphBuilder:
    """Builds the TypeGraph of one compilation."""

    def __init__(self, graph: ResolvedGraph, naming: NamingPolicy):
        """
        Initialize the builder.

        Args:
            graph: The resolved schema graph
            naming: Naming policy shared by every document of the compilation
        """
        self.graph = graph
        self.naming = naming
        self.type_graph = TypeGraph()

        # Identities whose descriptor is being synthesized
        self._in_progress: set[SchemaId] = set()

        # Declared identities in the order their names were claimed
        self._discovered: list[SchemaId] = []

    def build(self) -> TypeGraph:
        """
        Synthesize the types of every document.

        Returns:
            TypeGraph with named declarations in dependency order
        """
        for schema_id in self.graph.entry_points():
            schema = self.graph[schema_id]
            descriptor = self._use(schema_id, self._own_name(schema) or "schema")
            if not self._is_declarable(schema):
                logger.debug("%s is a %s and is inlined at its uses", schema.location, descriptor.kind.value)

        self._order_declarations()
        logger.debug("Built %d declarations", len(self.type_graph.order))
        return self.type_graph

    # Use sites

    def _use(self, schema_id: SchemaId, candidate: str) -> TypeDescriptor:
        """
        Get the descriptor to place where a schema is used.

        Args:
            schema_id: The schema being used
            candidate: Name to fall back on when the schema has neither a
                title nor a definition key

        Returns:
            A NamedReference for declared types, the type itself otherwise
        """
        schema = self.graph[schema_id]

        if schema_id in self.type_graph.descriptors:
            return self._reference(schema_id, indirect=False)

        if schema_id in self._in_progress:
            if schema_id in self.type_graph.names:
                return self._reference(schema_id, indirect=True)
            logger.warning("%s contains itself without a named type in between; typed as Any", schema.location)
            return OpenType()

        self._in_progress.add(schema_id)
        try:
            collapsed = self._collapse(schema)
            if collapsed is not None:
                # A union with one non-null branch is that branch, made optional by the null
                branch, nullable = collapsed
                descriptor = self._use(branch, self._own_name(schema) or candidate)
                if nullable and not isinstance(descriptor, OptionalType):
                    descriptor = OptionalType(inner=descriptor)
            else:
                descriptor = self._synthesize(schema, candidate)
        finally:
            self._in_progress.discard(schema_id)
        self.type_graph.descriptors[schema_id] = descriptor
        return self._reference(schema_id, indirect=False)

    def _reference(self, schema_id: SchemaId, indirect: bool) -> TypeDescriptor:
        """Descriptor for a use of an already known identity."""
        if schema_id not in self.type_graph.names:
            return self.type_graph.descriptors[schema_id]

        reference = NamedReference(
            name=self.type_graph.names[schema_id],
            schema_id=schema_id,
            indirect=indirect,
        )
        if self._nullable_branches(self.graph[schema_id])[1]:
            return OptionalType(inner=reference)
        return reference

    def _collapse(self, schema: ResolvedSchema) -> tuple[SchemaId, bool] | None:
        """Single non-null branch of a union and whether null was allowed."""
        if schema.kind is not SchemaKind.UNION:
            return None
        branches, nullable = self._nullable_branches(schema)
        if len(branches) != 1:
            return None
        return branches[0], nullable

    def _nullable_branches(self, schema: ResolvedSchema) -> tuple[list[SchemaId], bool]:
        """Non-null union branches, and whether a null branch was dropped."""
        if schema.kind is not SchemaKind.UNION:
            return [], False
        branches = [v for v in schema.variants if not self._is_null(self.graph[v])]
        return branches, len(branches) < len(schema.variants)

    def _is_null(self, schema: ResolvedSchema) -> bool:
        return schema.kind is SchemaKind.PRIMITIVE and schema.type_name == "null"

    def _is_declarable(self, schema: ResolvedSchema) -> bool:
        """Whether the schema becomes a named declaration."""
        if schema.kind is SchemaKind.OBJECT:
            return self._is_struct(schema)
        if schema.kind is SchemaKind.UNION:
            return len(self._nullable_branches(schema)[0]) > 1
        return schema.kind is SchemaKind.ENUM

    def _is_struct(self, schema: ResolvedSchema) -> bool:
        return (
            bool(schema.properties)
            or bool(schema.required)
            or "properties" in schema.keywords
            or schema.additional is False
        )

    def _own_name(self, schema: ResolvedSchema) -> str | None:
        return schema.title or schema.name_hint

    # Synthesis

    def _synthesize(self, schema: ResolvedSchema, candidate: str) -> TypeDescriptor:
        """Create the descriptor of a schema identity."""
        self._check_keywords(schema)
        base_name = self._own_name(schema) or candidate

        if self._is_declarable(schema):
            name = self.naming.claim(base_name, f"{schema.location} ({schema.kind.value})")
            self.type_graph.names[schema.schema_id] = name
            self._discovered.append(schema.schema_id)
            logger.debug("Declaring %s for %s", name, schema.location)

            if schema.kind is SchemaKind.OBJECT:
                return self._build_struct(schema, name)
            if schema.kind is SchemaKind.ENUM:
                return self._build_enum(schema, name)
            return self._build_sum(schema, name)

        if schema.kind is SchemaKind.OBJECT:
            if isinstance(schema.additional, int) and not isinstance(schema.additional, bool):
                return MapType(value=self._use(schema.additional, f"{base_name} value"))
            return MapType(value=OpenType())

        if schema.kind is SchemaKind.ARRAY:
            if schema.items is None:
                return SliceType(item=OpenType())
            return SliceType(item=self._use(schema.items, f"{base_name} item"))

        if schema.kind is SchemaKind.PRIMITIVE:
            return PrimitiveType(json_type=schema.type_name)

        if schema.kind is SchemaKind.UNION:
            # Only null branches
            return PrimitiveType(json_type="null")

        return OpenType()

    def _check_keywords(self, schema: ResolvedSchema) -> None:
        """Reject keywords that contradict the declared type."""
        if "type" not in schema.keywords or schema.kind in (SchemaKind.UNION, SchemaKind.ANY):
            return
        if "items" in schema.keywords and schema.kind is not SchemaKind.ARRAY:
            raise SchemaError(f"'items' is only allowed on arrays at {schema.location}")
        if "properties" in schema.keywords and schema.kind is not SchemaKind.OBJECT:
            raise SchemaError(f"'properties' is only allowed on objects at {schema.location}")

    def _build_struct(self, schema: ResolvedSchema, name: str) -> StructType:
        """Build a struct with one field per property, in document order."""
        struct = StructType(name=name, allow_extra=schema.additional is not False)
        taken: set[str] = set()
        required = set(schema.required)

        for key, child in schema.properties:
            descriptor = self._use(child, f"{name} {key}")
            is_required = key in required
            target = descriptor.inner if isinstance(descriptor, OptionalType) else descriptor
            indirect = isinstance(target, NamedReference) and target.indirect

            # Non-required collections decode as empty instead; back-edges always allow null
            if (not is_required and not isinstance(descriptor, (SliceType, MapType))) or indirect:
                if not isinstance(descriptor, OptionalType):
                    descriptor = OptionalType(inner=descriptor)

            struct.fields.append(
                Field(
                    name=self.naming.member_name(key, taken),
                    json_key=key,
                    type=descriptor,
                    required=is_required,
                )
            )

        # Required keys without a property schema accept any value
        known = {key for key, _ in schema.properties}
        for key in schema.required:
            if key not in known:
                struct.fields.append(
                    Field(name=self.naming.member_name(key, taken), json_key=key, type=OpenType(), required=True)
                )
        return struct

    def _build_enum(self, schema: ResolvedSchema, name: str) -> EnumType:
        """Build an enum, keeping the JSON type of every literal."""
        enum = EnumType(name=name)
        taken: set[str] = set()
        seen: list[Any] = []

        for value in schema.enum_values:
            value_type = json_type_of(value)
            if value_type in ("array", "object"):
                raise SchemaError(f"enum value {value!r} at {schema.location} is not a scalar")
            if schema.declared_types and not self._type_allows(schema.declared_types, value_type):
                raise SchemaError(
                    f"enum value {value!r} at {schema.location} does not match type {'/'.join(schema.declared_types)}"
                )

            duplicate = next((s for s in seen if s == value), _MISSING)
            if duplicate is not _MISSING:
                if type(duplicate) is type(value):
                    logger.debug("Dropping duplicate enum value %r at %s", value, schema.location)
                    continue
                raise SchemaError(f"enum values {duplicate!r} and {value!r} at {schema.location} are indistinguishable")
            seen.append(value)

            enum.members.append(EnumMember(name=self.naming.enum_member_name(value, taken), value=value))
        return enum

    def _type_allows(self, declared: tuple[str, ...], value_type: str) -> bool:
        return value_type in declared or (value_type == "integer" and "number" in declared)

    def _build_sum(self, schema: ResolvedSchema, name: str) -> SumType:
        """Build a sum type with one variant per non-null branch."""
        sum_type = SumType(name=name)
        taken: set[str] = set()
        branches, _ = self._nullable_branches(schema)

        for index, branch in enumerate(branches, start=1):
            descriptor = self._use(branch, f"{name} option {index}")
            if isinstance(descriptor, OptionalType):
                descriptor = descriptor.inner
            sum_type.variants.append(
                Variant(name=self.naming.member_name(self._variant_label(descriptor), taken), type=descriptor)
            )
        return sum_type

    def _variant_label(self, descriptor: TypeDescriptor) -> str:
        if isinstance(descriptor, NamedReference):
            return descriptor.name
        if isinstance(descriptor, PrimitiveType):
            return descriptor.json_type
        if isinstance(descriptor, SliceType):
            return "array"
        if isinstance(descriptor, MapType):
            return "object"
        return "value"

    # Ordering

    def _order_declarations(self) -> None:
        """Depth-first post-order over direct references."""
        for schema_id in self._discovered:
            dependencies: dict[SchemaId, None] = {}
            for reference in iter_references(self.type_graph.descriptors[schema_id]):
                if not reference.indirect:
                    dependencies[reference.schema_id] = None
            self.type_graph.dependencies[schema_id] = list(dependencies)

        visited: set[SchemaId] = set()

        def visit(schema_id: SchemaId) -> None:
            if schema_id in visited:
                return
            visited.add(schema_id)
            for dependency in self.type_graph.dependencies[schema_id]:
                visit(dependency)
            self.type_graph.order.append(schema_id)

        for schema_id in self._discovered:
            visit(schema_id)


_MISSING = object()
