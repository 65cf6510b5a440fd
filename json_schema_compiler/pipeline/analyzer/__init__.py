"""
Analyzer module.

Contains reference resolution, naming, and type graph building.
"""

from __future__ import annotations

from .ir_nodes import (
    EnumMember,
    EnumType,
    Field,
    ImportDef,
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
    TypeKind,
    Variant,
)
from .naming import NamingPolicy
from .reference_resolver import ResolvedGraph, ResolvedSchema, SchemaKind, SchemaResolver
from .type_graph_builder import TypeGraphBuilder

__all__ = [
    "EnumMember",
    "EnumType",
    "Field",
    "ImportDef",
    "MapType",
    "NamedReference",
    "NamingPolicy",
    "OpenType",
    "OptionalType",
    "PrimitiveType",
    "ResolvedGraph",
    "ResolvedSchema",
    "SchemaKind",
    "SchemaResolver",
    "SliceType",
    "StructType",
    "SumType",
    "TypeDescriptor",
    "TypeGraph",
    "TypeGraphBuilder",
    "TypeKind",
    "Variant",
]
