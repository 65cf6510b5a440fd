"""
JSON Schema parser that builds an AST.

Phase 1 of the pipeline: parse decoded JSON Schema documents into immutable
SchemaNodes without resolving references. Every subschema that a $ref could
address is registered in the arena under its JSON pointer.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any

from jsonpointer import JsonPointer

from ...errors import SchemaError
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

logger = logging.getLogger(__name__)

# Keywords that do not constrain the shape of a value
ANNOTATION_KEYWORDS = {
    "$schema",
    "$id",
    "$comment",
    "title",
    "description",
    "default",
    "examples",
    "definitions",
    "$defs",
    "format",
    "readOnly",
    "writeOnly",
    "deprecated",
}

DEFINITION_KEYWORDS = ("definitions", "$defs")

# Keywords that only apply to one JSON type
SHAPE_KEYWORDS = {
    "object": {"properties", "required", "additionalProperties"},
    "array": {"items"},
}


def document_name(uri: str) -> str:
    """Derive a naming hint from a document address ("person.schema.json" -> "person")."""
    if uri in ("", "-"):
        return "schema"
    name = PurePosixPath(uri.replace("\\", "/")).name
    return name.split(".", 1)[0] or "schema"


def format_pointer(parts: tuple[str, ...]) -> str:
    """Render pointer parts as a URI fragment ("#/definitions/a~1b")."""
    return "#" + JsonPointer.from_parts(list(parts)).path


class SchemaParser:
    """Parses JSON Schema documents into a SchemaArena."""

    # Primitive type names
    PRIMITIVE_TYPES = {"string", "integer", "number", "boolean", "null"}

    def __init__(self):
        self.arena = SchemaArena()
        self._document = 0

    def parse(self, documents: list[SchemaDocument]) -> SchemaArena:
        """
        Parse every document into one arena.

        Args:
            documents: Decoded schema documents, in input order

        Returns:
            SchemaArena holding all nodes, roots and definitions
        """
        for index, document in enumerate(documents):
            self._document = index
            self.arena.documents.append(document)
            root_id = self._parse_schema(document.schema, (), name_hint=document_name(document.uri))
            self.arena.roots.append(root_id)

            definitions = []
            if isinstance(document.schema, dict):
                for keyword in DEFINITION_KEYWORDS:
                    for key in document.schema.get(keyword) or {}:
                        definitions.append(self.arena.by_pointer[(index, (keyword, key))])
            self.arena.definitions.append(definitions)
            logger.debug("Parsed %s: %d definitions", document.uri, len(definitions))

        return self.arena

    def _add(self, node_type: type[SchemaNode], parts: tuple[str, ...], register: bool, **kwargs: Any) -> NodeId:
        """Append a node to the arena and optionally register its pointer."""
        node_id = len(self.arena.nodes)
        node = node_type(
            node_id=node_id,
            document=self._document,
            pointer=format_pointer(parts),
            **kwargs,
        )
        self.arena.nodes.append(node)
        if register:
            self.arena.by_pointer[(self._document, parts)] = node_id
        return node_id

    def _error(self, parts: tuple[str, ...], message: str) -> SchemaError:
        uri = self.arena.documents[self._document].uri
        return SchemaError(f"{message} at {uri}{format_pointer(parts)}")

    def _parse_schema(
        self,
        schema: Any,
        parts: tuple[str, ...],
        name_hint: str | None = None,
        register: bool = True,
    ) -> NodeId:
        """
        Parse a schema node recursively.

        Args:
            schema: The raw schema (object or boolean)
            parts: JSON pointer parts of the schema in its document
            name_hint: Definition key or document name
            register: Whether the node is addressable by $ref

        Returns:
            Node id of the parsed node
        """
        if schema is True:
            return self._add(AnyNode, parts, register, name_hint=name_hint)
        if schema is False:
            raise self._error(parts, "the schema false matches no value and cannot be typed")
        if not isinstance(schema, dict):
            raise self._error(parts, f"expected a schema object, got {schema!r}")

        # Definitions are parsed first so they are addressable even if unused
        for keyword in DEFINITION_KEYWORDS:
            definitions = schema.get(keyword)
            if definitions is None:
                continue
            if not isinstance(definitions, dict):
                raise self._error(parts + (keyword,), f"'{keyword}' must be an object")
            for key, definition in definitions.items():
                self._parse_schema(definition, parts + (keyword, key), name_hint=key)

        title = schema.get("title") if isinstance(schema.get("title"), str) else None
        common: dict[str, Any] = {
            "keywords": frozenset(schema),
            "title": title,
            "name_hint": name_hint,
        }

        # Handle $ref (siblings are ignored, as in draft-07)
        if "$ref" in schema:
            ref = schema["$ref"]
            if not isinstance(ref, str):
                raise self._error(parts, "'$ref' must be a string")
            return self._add(RefNode, parts, register, ref=ref, **common)

        # Handle allOf
        if "allOf" in schema:
            return self._parse_allof_node(schema, parts, register, common)

        # Handle enum and const (a const is a single-valued enum)
        if "enum" in schema or "const" in schema:
            values = schema["enum"] if "enum" in schema else [schema["const"]]
            if not isinstance(values, list) or not values:
                raise self._error(parts, "'enum' must be a non-empty array")
            return self._add(
                EnumNode,
                parts,
                register,
                values=tuple(values),
                declared_types=self._declared_types(schema, parts),
                **common,
            )

        # Handle oneOf/anyOf
        if "oneOf" in schema and "anyOf" in schema:
            raise self._error(parts, "'oneOf' and 'anyOf' cannot be combined")
        for combinator in ("oneOf", "anyOf"):
            if combinator in schema:
                branches = schema[combinator]
                if not isinstance(branches, list) or not branches:
                    raise self._error(parts, f"'{combinator}' must be a non-empty array")
                variants = tuple(
                    self._parse_schema(branch, parts + (combinator, str(i))) for i, branch in enumerate(branches)
                )
                return self._add(UnionNode, parts, register, variants=variants, combinator=combinator, **common)

        # Handle "type": [...] with several entries as a union of single-typed copies
        declared = self._declared_types(schema, parts)
        if len(declared) > 1:
            variants = tuple(
                self._parse_schema(self._narrow(schema, type_name), parts, register=False) for type_name in declared
            )
            return self._add(UnionNode, parts, register, variants=variants, combinator="type", **common)

        type_name = declared[0] if declared else None
        return self._parse_type_node(schema, parts, register, common, type_name)

    def _parse_allof_node(
        self,
        schema: dict[str, Any],
        parts: tuple[str, ...],
        register: bool,
        common: dict[str, Any],
    ) -> NodeId:
        """Parse allOf; constraining sibling keywords form an extra member."""
        branches = schema["allOf"]
        if not isinstance(branches, list) or not branches:
            raise self._error(parts, "'allOf' must be a non-empty array")
        members = [self._parse_schema(branch, parts + ("allOf", str(i))) for i, branch in enumerate(branches)]

        siblings = {k: v for k, v in schema.items() if k != "allOf" and k not in ANNOTATION_KEYWORDS}
        if siblings:
            members.append(self._parse_schema(siblings, parts, register=False))

        return self._add(AllOfNode, parts, register, members=tuple(members), **common)

    def _parse_type_node(
        self,
        schema: dict[str, Any],
        parts: tuple[str, ...],
        register: bool,
        common: dict[str, Any],
        type_name: str | None,
    ) -> NodeId:
        """Parse a node whose shape is decided by a single (or implied) type."""
        is_object = type_name == "object" or (
            type_name is None and ("properties" in schema or "additionalProperties" in schema or "required" in schema)
        )
        if is_object:
            return self._parse_object_node(schema, parts, register, common)

        if type_name == "array" or (type_name is None and "items" in schema):
            items = schema.get("items")
            if isinstance(items, list):
                raise self._error(parts, "tuple-form 'items' is not supported")
            item_id = None if items is None else self._parse_schema(items, parts + ("items",))
            return self._add(ArrayNode, parts, register, items=item_id, **common)

        if type_name in self.PRIMITIVE_TYPES:
            return self._add(PrimitiveNode, parts, register, type_name=type_name, **common)

        # Fallback: no constraining keywords
        return self._add(AnyNode, parts, register, **common)

    def _parse_object_node(
        self,
        schema: dict[str, Any],
        parts: tuple[str, ...],
        register: bool,
        common: dict[str, Any],
    ) -> NodeId:
        """Parse an object node with its properties."""
        raw_properties = schema.get("properties") or {}
        if not isinstance(raw_properties, dict):
            raise self._error(parts, "'properties' must be an object")
        properties = tuple(
            (key, self._parse_schema(value, parts + ("properties", key))) for key, value in raw_properties.items()
        )

        required = schema.get("required") or []
        if not isinstance(required, list) or not all(isinstance(r, str) for r in required):
            raise self._error(parts, "'required' must be an array of strings")

        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            additional = self._parse_schema(additional, parts + ("additionalProperties",))
        elif additional is not None and not isinstance(additional, bool):
            raise self._error(parts, "'additionalProperties' must be a schema or a boolean")

        return self._add(
            ObjectNode,
            parts,
            register,
            properties=properties,
            required=tuple(dict.fromkeys(required)),
            additional=additional,
            **common,
        )

    def _narrow(self, schema: dict[str, Any], type_name: str) -> dict[str, Any]:
        """Copy of a multi-typed schema restricted to one type's keywords."""
        foreign = set().union(*(kw for name, kw in SHAPE_KEYWORDS.items() if name != type_name))
        body = {
            k: v for k, v in schema.items() if k not in foreign and k not in DEFINITION_KEYWORDS and k != "title"
        }
        body["type"] = type_name
        return body

    def _declared_types(self, schema: dict[str, Any], parts: tuple[str, ...]) -> tuple[str, ...]:
        """Normalize the "type" keyword to a tuple of type names."""
        declared = schema.get("type")
        if declared is None:
            return ()
        if isinstance(declared, str):
            declared = [declared]
        if not isinstance(declared, list) or not declared:
            raise self._error(parts, "'type' must be a string or a non-empty array")
        for type_name in declared:
            if type_name not in self.PRIMITIVE_TYPES | {"object", "array"}:
                raise self._error(parts, f"unknown type {type_name!r}")
        return tuple(dict.fromkeys(declared))
