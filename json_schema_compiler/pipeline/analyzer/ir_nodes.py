"""
IR (Intermediate Representation) node definitions.

These nodes describe the synthesized static types, ready for code
generation. All references are resolved and names are assigned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .reference_resolver import SchemaId


class TypeKind(Enum):
    """Kind of type in the IR."""

    STRUCT = "struct"  # A generated dataclass
    SLICE = "slice"  # list[T]
    MAP = "map"  # dict[str, T]
    OPTIONAL = "optional"  # T | None
    ENUM = "enum"  # A generated Enum
    SUM = "sum"  # A generated one-of wrapper
    PRIMITIVE = "primitive"  # str, int, float, bool, None
    OPEN = "open"  # Any
    REFERENCE = "reference"  # Reference to a declared type


@dataclass
class TypeDescriptor:
    """Base class of synthesized types."""

    kind: TypeKind = TypeKind.OPEN


@dataclass
class PrimitiveType(TypeDescriptor):
    """A JSON primitive ("string", "integer", "number", "boolean", "null")."""

    kind: TypeKind = TypeKind.PRIMITIVE
    json_type: str = "string"


@dataclass
class OpenType(TypeDescriptor):
    """Accepts any well-formed JSON value."""

    kind: TypeKind = TypeKind.OPEN


@dataclass
class SliceType(TypeDescriptor):
    kind: TypeKind = TypeKind.SLICE
    item: TypeDescriptor = field(default_factory=OpenType)


@dataclass
class MapType(TypeDescriptor):
    kind: TypeKind = TypeKind.MAP
    value: TypeDescriptor = field(default_factory=OpenType)


@dataclass
class OptionalType(TypeDescriptor):
    kind: TypeKind = TypeKind.OPTIONAL
    inner: TypeDescriptor = field(default_factory=OpenType)


@dataclass
class NamedReference(TypeDescriptor):
    """Use of a declared type.

    indirect is set on the edge that closes a cycle; the target may not be
    declared yet at the point of use.
    """

    kind: TypeKind = TypeKind.REFERENCE
    name: str = ""
    schema_id: SchemaId = -1
    indirect: bool = False


@dataclass
class Field:
    """A field of a struct."""

    name: str = ""  # Python attribute name
    json_key: str = ""  # Original JSON property name
    type: TypeDescriptor = field(default_factory=OpenType)
    required: bool = False


@dataclass
class StructType(TypeDescriptor):
    kind: TypeKind = TypeKind.STRUCT
    name: str = ""
    fields: list[Field] = field(default_factory=list)

    # False when additionalProperties is false: unknown keys fail decoding
    allow_extra: bool = True


@dataclass
class EnumMember:
    name: str = ""
    value: Any = None


@dataclass
class EnumType(TypeDescriptor):
    kind: TypeKind = TypeKind.ENUM
    name: str = ""
    members: list[EnumMember] = field(default_factory=list)


@dataclass
class Variant:
    """One alternative of a sum type."""

    name: str = ""  # Attribute holding the variant when populated
    type: TypeDescriptor = field(default_factory=OpenType)


@dataclass
class SumType(TypeDescriptor):
    kind: TypeKind = TypeKind.SUM
    name: str = ""
    variants: list[Variant] = field(default_factory=list)


@dataclass(frozen=True)
class ImportDef:
    """An import definition."""

    module: str = ""  # Module to import from
    names: tuple[str, ...] = ()  # Names to import


@dataclass
class TypeGraph:
    """The complete, ordered collection of types of one compilation."""

    # One descriptor per resolved schema identity
    descriptors: dict[SchemaId, TypeDescriptor] = field(default_factory=dict)

    # Declared identities -> their names
    names: dict[SchemaId, str] = field(default_factory=dict)

    # Declared identity -> declared identities it references directly
    dependencies: dict[SchemaId, list[SchemaId]] = field(default_factory=dict)

    # Declared identities, dependencies first
    order: list[SchemaId] = field(default_factory=list)

    def declarations(self) -> list[TypeDescriptor]:
        """Declared descriptors in declaration order."""
        return [self.descriptors[schema_id] for schema_id in self.order]


def iter_references(descriptor: TypeDescriptor):
    """Yield every NamedReference reachable without crossing a declaration."""
    if isinstance(descriptor, NamedReference):
        yield descriptor
    elif isinstance(descriptor, SliceType):
        yield from iter_references(descriptor.item)
    elif isinstance(descriptor, MapType):
        yield from iter_references(descriptor.value)
    elif isinstance(descriptor, OptionalType):
        yield from iter_references(descriptor.inner)
    elif isinstance(descriptor, StructType):
        for f in descriptor.fields:
            yield from iter_references(f.type)
    elif isinstance(descriptor, SumType):
        for variant in descriptor.variants:
            yield from iter_references(variant.type)
