import logging

import pytest

from json_schema_compiler.errors import SchemaError
from json_schema_compiler.pipeline.analyzer import (
    EnumType,
    MapType,
    NamedReference,
    NamingPolicy,
    OpenType,
    OptionalType,
    PrimitiveType,
    SchemaResolver,
    SliceType,
    StructType,
    SumType,
    TypeGraphBuilder,
)
from json_schema_compiler.pipeline.schema_ast import SchemaDocument, SchemaParser


def build(*schemas, uris=None):
    uris = uris or [f"doc{i}.json" for i in range(len(schemas))]
    documents = [SchemaDocument(uri=uri, schema=schema) for uri, schema in zip(uris, schemas)]
    graph = SchemaResolver(SchemaParser().parse(documents)).resolve()
    return TypeGraphBuilder(graph, NamingPolicy()).build()


def declared(type_graph):
    return {d.name: d for d in type_graph.declarations()}


def fields(struct):
    return {f.json_key: f for f in struct.fields}


PERSON = {
    "title": "Person",
    "type": "object",
    "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
    "required": ["name"],
}


def test_person_struct():
    type_graph = build(PERSON)
    person = declared(type_graph)["Person"]
    assert isinstance(person, StructType)
    name, age = person.fields
    assert (name.name, name.required, name.type) == ("name", True, PrimitiveType(json_type="string"))
    assert (age.name, age.required) == ("age", False)
    assert age.type == OptionalType(inner=PrimitiveType(json_type="integer"))


def test_optional_collections_are_not_wrapped():
    type_graph = build(
        {
            "title": "Bag",
            "type": "object",
            "properties": {
                "tags": {"type": "array", "items": {"type": "string"}},
                "counts": {"type": "object", "additionalProperties": {"type": "integer"}},
                "extra": {"type": "object"},
            },
        }
    )
    bag = fields(declared(type_graph)["Bag"])
    assert bag["tags"].type == SliceType(item=PrimitiveType(json_type="string"))
    assert bag["counts"].type == MapType(value=PrimitiveType(json_type="integer"))
    assert bag["extra"].type == MapType(value=OpenType())


def test_nested_names_follow_key_path():
    type_graph = build(
        {
            "title": "Person",
            "type": "object",
            "properties": {
                "address": {"type": "object", "properties": {"city": {"type": "string"}}},
                "pets": {"type": "array", "items": {"type": "object", "properties": {"kind": {"enum": ["cat", "dog"]}}}},
            },
        }
    )
    assert list(declared(type_graph)) == ["PersonAddress", "PersonPetsItemKind", "PersonPetsItem", "Person"]


def test_definition_key_names_type():
    type_graph = build({"$ref": "#/definitions/user_account", "definitions": {"user_account": {"type": "object", "properties": {}}}})
    assert list(declared(type_graph)) == ["UserAccount"]


def test_shared_definition_declared_once():
    type_graph = build(
        {
            "title": "Line",
            "type": "object",
            "properties": {"start": {"$ref": "#/definitions/Point"}, "end": {"$ref": "#/definitions/Point"}},
            "definitions": {"Point": {"type": "object", "properties": {"x": {"type": "number"}}}},
        }
    )
    assert list(declared(type_graph)) == ["Point", "Line"]
    line = fields(declared(type_graph)["Line"])
    assert line["start"].type == line["end"].type


def test_name_collisions_across_documents():
    item = {"title": "Item", "type": "object", "properties": {"id": {"type": "integer"}}}
    type_graph = build(item, dict(item), uris=["a.json", "b.json"])
    assert sorted(declared(type_graph)) == ["Item", "Item2"]


def test_recursive_struct():
    type_graph = build(
        {
            "title": "Node",
            "type": "object",
            "properties": {"value": {"type": "integer"}, "children": {"type": "array", "items": {"$ref": "#"}}, "parent": {"$ref": "#"}},
            "required": ["value", "parent"],
        }
    )
    node = fields(declared(type_graph)["Node"])
    reference = node["parent"].type.inner
    assert isinstance(reference, NamedReference) and reference.indirect
    assert node["parent"].required
    assert node["children"].type.item.indirect
    assert type_graph.dependencies[type_graph.order[0]] == []


def test_mutual_recursion_orders_direct_dependencies():
    type_graph = build(
        {
            "$ref": "#/definitions/A",
            "definitions": {
                "A": {"type": "object", "properties": {"b": {"$ref": "#/definitions/B"}}},
                "B": {"type": "object", "properties": {"a": {"$ref": "#/definitions/A"}}},
            },
        }
    )
    assert list(declared(type_graph)) == ["B", "A"]
    b = fields(declared(type_graph)["B"])
    assert b["a"].type.inner.indirect


def test_array_cycle_degrades_to_open(caplog):
    with caplog.at_level(logging.WARNING):
        type_graph = build({"$ref": "#/definitions/List", "definitions": {"List": {"type": "array", "items": {"$ref": "#/definitions/List"}}}})
    assert type_graph.order == []
    assert "contains itself" in caplog.text
    assert SliceType(item=OpenType()) in type_graph.descriptors.values()


def test_nullable_union_collapses_to_optional():
    type_graph = build(
        {
            "title": "Box",
            "type": "object",
            "properties": {
                "label": {"type": ["string", "null"]},
                "size": {"oneOf": [{"type": "null"}, {"type": "integer"}]},
            },
            "required": ["label"],
        }
    )
    box = fields(declared(type_graph)["Box"])
    assert box["label"].required
    assert box["label"].type == OptionalType(inner=PrimitiveType(json_type="string"))
    assert box["size"].type == OptionalType(inner=PrimitiveType(json_type="integer"))


def test_sum_type_variants():
    type_graph = build(
        {
            "title": "Shape",
            "oneOf": [
                {"type": "null"},
                {"title": "Circle", "type": "object", "properties": {"radius": {"type": "number"}}},
                {"type": "string"},
                {"type": "array", "items": {"type": "number"}},
            ],
        }
    )
    shape = declared(type_graph)["Shape"]
    assert isinstance(shape, SumType)
    assert [v.name for v in shape.variants] == ["circle", "string", "array"]
    assert list(declared(type_graph)) == ["Circle", "Shape"]


def test_multi_type_struct_and_sum_get_distinct_names():
    type_graph = build({"title": "Value", "type": ["object", "string"], "properties": {"a": {"type": "string"}}})
    assert list(declared(type_graph)) == ["ValueOption1", "Value"]


def test_enum_keeps_literal_types():
    type_graph = build({"title": "Level", "enum": ["low", 2, 2.5, None, False, "low"]})
    level = declared(type_graph)["Level"]
    assert isinstance(level, EnumType)
    assert [(m.name, m.value) for m in level.members] == [
        ("LOW", "low"),
        ("VALUE_2", 2),
        ("VALUE_2_POINT_5", 2.5),
        ("NULL", None),
        ("FALSE", False),
    ]


def test_map_root_is_inlined():
    type_graph = build({"type": "object", "additionalProperties": {"type": "string"}})
    assert type_graph.order == []


@pytest.mark.parametrize(
    "schema, message",
    [
        ({"type": "string", "items": {}}, "'items' is only allowed on arrays"),
        ({"type": "array", "properties": {"a": {}}}, "'properties' is only allowed on objects"),
        ({"type": "string", "enum": ["a", 1]}, "does not match type string"),
        ({"enum": [[1, 2]]}, "is not a scalar"),
        ({"enum": [1, True]}, "indistinguishable"),
        ({"enum": [1, 1.0]}, "indistinguishable"),
    ],
)
def test_contradictions(schema, message):
    with pytest.raises(SchemaError, match=message):
        build(schema)


def test_required_keys_alone_make_a_struct():
    type_graph = build(
        {
            "title": "Outer",
            "type": "object",
            "properties": {"inner": {"type": "object", "required": ["id"]}},
        }
    )
    inner = declared(type_graph)["OuterInner"]
    assert fields(inner)["id"].type == OpenType()
    assert fields(inner)["id"].required
    assert fields(declared(type_graph)["Outer"])["inner"].type == OptionalType(
        inner=NamedReference(name="OuterInner", schema_id=type_graph.order[0])
    )


def test_annotated_self_reference_through_allof():
    type_graph = build(
        {
            "definitions": {
                "Node": {
                    "type": "object",
                    "properties": {"next": {"allOf": [{"$ref": "#/definitions/Node"}], "description": "next node"}},
                }
            }
        }
    )
    assert list(declared(type_graph)) == ["Node"]
    reference = fields(declared(type_graph)["Node"])["next"].type.inner
    assert isinstance(reference, NamedReference) and reference.indirect
