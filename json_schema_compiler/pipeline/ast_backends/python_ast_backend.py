"""
Python AST-based code generation backend.

Generates Python dataclasses and enums, with their JSON decoders and
encoders, from the type graph using the built-in ast module.
"""

from __future__ import annotations

import ast
import collections
import logging

from ...errors import EmitterInvariantError
from ..analyzer.ir_nodes import (
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
    iter_references,
)
from .base import AstBackend, EmittedModule

logger = logging.getLogger(__name__)


def _name(identifier: str) -> ast.Name:
    return ast.Name(id=identifier, ctx=ast.Load())


def _store(identifier: str) -> ast.Name:
    return ast.Name(id=identifier, ctx=ast.Store())


def _call(func: ast.expr, *args: ast.expr) -> ast.Call:
    return ast.Call(func=func, args=list(args), keywords=[])


def _self_attr(attribute: str) -> ast.Attribute:
    return ast.Attribute(value=_name("self"), attr=attribute, ctx=ast.Load())


def _arguments(*names: str, defaults: list[ast.expr] | None = None) -> ast.arguments:
    return ast.arguments(
        posonlyargs=[],
        args=[ast.arg(arg=n, annotation=None) for n in names],
        vararg=None,
        kwonlyargs=[],
        kw_defaults=[],
        kwarg=None,
        defaults=defaults or [],
    )


class PythonAstBackend(AstBackend):
    """Python code generation backend using AST."""

    TYPE_MAP = {
        "string": "str",
        "integer": "int",
        "number": "float",
        "boolean": "bool",
        "null": "None",
    }

    # Runtime helper decoding each JSON primitive
    DECODERS = {
        "string": "_decode_string",
        "integer": "_decode_integer",
        "number": "_decode_number",
        "boolean": "_decode_boolean",
        "null": "_decode_null",
    }

    def __init__(self):
        self.python_imports: set[tuple[str, str]] = set()
        self._emitted: set[int] = set()

    def emit(self, type_graph: TypeGraph) -> EmittedModule:
        """Generate one class per declared type, in type graph order."""
        # The runtime helpers need these in every module
        self.python_imports = {
            ("__future__", "annotations"),
            ("collections.abc", "Callable"),
            ("typing", "Any"),
        }
        self._emitted = set()

        declarations: list[ast.stmt] = []
        for schema_id in type_graph.order:
            descriptor = type_graph.descriptors[schema_id]
            self._check_dependencies(descriptor)

            class_node = self._generate_class(descriptor)
            ast.fix_missing_locations(class_node)
            declarations.append(class_node)
            self._emitted.add(schema_id)

        logger.debug("Emitted %d declarations", len(declarations))
        return EmittedModule(declarations=declarations, imports=self._generate_imports())

    def _check_dependencies(self, descriptor: TypeDescriptor) -> None:
        for reference in iter_references(descriptor):
            if not reference.indirect and reference.schema_id not in self._emitted:
                raise EmitterInvariantError(f"{descriptor.name} uses {reference.name} before it is declared")

    def _generate_imports(self) -> list[ImportDef]:
        """Group the collected imports by module, sorted."""
        import_groups: dict[str, set[str]] = collections.defaultdict(set)
        for module, name in self.python_imports:
            import_groups[module].add(name)
        return [ImportDef(module=m, names=tuple(sorted(import_groups[m]))) for m in sorted(import_groups)]

    def _generate_class(self, descriptor: TypeDescriptor) -> ast.ClassDef:
        if isinstance(descriptor, StructType):
            return self._generate_struct_class(descriptor)
        if isinstance(descriptor, EnumType):
            return self._generate_enum_class(descriptor)
        if isinstance(descriptor, SumType):
            return self._generate_sum_class(descriptor)
        raise EmitterInvariantError(f"{descriptor.kind.value} types are not declared")

    # Structs

    def _generate_struct_class(self, struct: StructType) -> ast.ClassDef:
        """Generate a dataclass with from_json and to_json."""
        body: list[ast.stmt] = [self._generate_field(f) for f in struct.fields]
        body.append(self._generate_struct_from_json(struct))
        body.append(self._generate_struct_to_json(struct))
        return self._dataclass(struct.name, body)

    def _generate_field(self, field: Field) -> ast.AnnAssign:
        """Generate a field definition as annotated assignment."""
        value = None
        if not field.required:
            if isinstance(field.type, SliceType):
                self.python_imports.add(("dataclasses", "field"))
                value = self._parse_expr("field(default_factory=list)")
            elif isinstance(field.type, MapType):
                self.python_imports.add(("dataclasses", "field"))
                value = self._parse_expr("field(default_factory=dict)")
            else:
                value = ast.Constant(value=None)

        return ast.AnnAssign(
            target=_store(field.name),
            annotation=self.translate_type(field.type),
            value=value,
            simple=1,
        )

    def _generate_struct_from_json(self, struct: StructType) -> ast.FunctionDef:
        """
        Generate the decoding classmethod.

        Shape of the result:

            data = _decode_object(data, path, ("name",), ("name", "age"))
            return cls(name=_decode_string(data["name"], path + ".name"), ...)
        """
        required = [f.json_key for f in struct.fields if f.required]
        check_args: list[ast.expr] = [_name("data"), _name("path"), self._constant_tuple(required)]
        if not struct.allow_extra:
            check_args.append(self._constant_tuple([f.json_key for f in struct.fields]))

        keywords = [ast.keyword(arg=f.name, value=self._decode_field(f)) for f in struct.fields]
        body: list[ast.stmt] = [
            ast.Assign(targets=[_store("data")], value=_call(_name("_decode_object"), *check_args)),
            ast.Return(value=ast.Call(func=_name("cls"), args=[], keywords=keywords)),
        ]
        return self._from_json_method(struct.name, body)

    def _decode_field(self, field: Field) -> ast.expr:
        value = ast.Subscript(value=_name("data"), slice=ast.Constant(value=field.json_key), ctx=ast.Load())
        path = ast.BinOp(left=_name("path"), op=ast.Add(), right=ast.Constant(value=f".{field.json_key}"))
        decoded = self._decode_call(field.type, value, path)
        if field.required:
            return decoded

        if isinstance(field.type, SliceType):
            absent: ast.expr = ast.List(elts=[], ctx=ast.Load())
        elif isinstance(field.type, MapType):
            absent = ast.Dict(keys=[], values=[])
        else:
            absent = ast.Constant(value=None)
        present = ast.Compare(left=ast.Constant(value=field.json_key), ops=[ast.In()], comparators=[_name("data")])
        return ast.IfExp(test=present, body=decoded, orelse=absent)

    def _generate_struct_to_json(self, struct: StructType) -> ast.FunctionDef:
        """Generate the encoding method; empty optional fields are left out."""
        body: list[ast.stmt] = [
            ast.AnnAssign(
                target=_store("result"),
                annotation=self._parse_expr("dict[str, Any]"),
                value=ast.Dict(keys=[], values=[]),
                simple=1,
            )
        ]

        for field in struct.fields:
            attribute = _self_attr(field.name)
            target = ast.Subscript(value=_name("result"), slice=ast.Constant(value=field.json_key), ctx=ast.Store())

            if field.required:
                body.append(ast.Assign(targets=[target], value=self._encode(field.type, attribute)))
            elif isinstance(field.type, OptionalType):
                assign = ast.Assign(targets=[target], value=self._encode(field.type.inner, attribute))
                is_set = ast.Compare(left=attribute, ops=[ast.IsNot()], comparators=[ast.Constant(value=None)])
                body.append(ast.If(test=is_set, body=[assign], orelse=[]))
            else:
                assign = ast.Assign(targets=[target], value=self._encode(field.type, attribute))
                body.append(ast.If(test=attribute, body=[assign], orelse=[]))

        body.append(ast.Return(value=_name("result")))
        return self._to_json_method(body, self._parse_expr("dict[str, Any]"))

    # Enums

    def _generate_enum_class(self, enum: EnumType) -> ast.ClassDef:
        """Generate an Enum whose values are the exact JSON literals."""
        self.python_imports.add(("enum", "Enum"))

        body: list[ast.stmt] = []
        for member in enum.members:
            body.append(ast.Assign(targets=[_store(member.name)], value=ast.Constant(value=member.value)))

        decode = _call(_name("_decode_enum"), _name("cls"), _name("data"), _name("path"))
        body.append(self._from_json_method(enum.name, [ast.Return(value=decode)]))

        value = ast.Attribute(value=_name("self"), attr="value", ctx=ast.Load())
        body.append(self._to_json_method([ast.Return(value=value)], _name("Any")))

        return ast.ClassDef(
            name=enum.name,
            bases=[_name("Enum")],
            keywords=[],
            body=body,
            decorator_list=[],
        )

    # Sum types

    def _generate_sum_class(self, sum_type: SumType) -> ast.ClassDef:
        """
        Generate a dataclass with one optional slot per variant.

        Decoding commits to the first variant, in declared order, that
        decodes; encoding requires exactly one populated slot.
        """
        body: list[ast.stmt] = []
        for variant in sum_type.variants:
            body.append(
                ast.AnnAssign(
                    target=_store(variant.name),
                    annotation=self.translate_type(OptionalType(inner=variant.type)),
                    value=ast.Constant(value=None),
                    simple=1,
                )
            )

        candidates = ast.List(
            elts=[
                ast.Tuple(elts=[ast.Constant(value=v.name), self._decoder(v.type)], ctx=ast.Load())
                for v in sum_type.variants
            ],
            ctx=ast.Load(),
        )
        decode = _call(_name("_decode_variant"), _name("data"), _name("path"), ast.Constant(value=sum_type.name), candidates)
        unpack = ast.Tuple(elts=[_store("name"), _store("value")], ctx=ast.Store())
        populate = ast.Call(
            func=_name("cls"),
            args=[],
            keywords=[ast.keyword(arg=None, value=ast.Dict(keys=[_name("name")], values=[_name("value")]))],
        )
        body.append(
            self._from_json_method(
                sum_type.name,
                [ast.Assign(targets=[unpack], value=decode), ast.Return(value=populate)],
            )
        )

        names = self._constant_tuple([v.name for v in sum_type.variants])
        encode: list[ast.stmt] = [
            ast.Assign(
                targets=[_store("name")],
                value=_call(_name("_encode_variant"), _name("self"), ast.Constant(value=sum_type.name), names),
            )
        ]
        *leading, last = sum_type.variants
        for variant in leading:
            matches = ast.Compare(left=_name("name"), ops=[ast.Eq()], comparators=[ast.Constant(value=variant.name)])
            result = ast.Return(value=self._encode(variant.type, _self_attr(variant.name)))
            encode.append(ast.If(test=matches, body=[result], orelse=[]))
        encode.append(ast.Return(value=self._encode(last.type, _self_attr(last.name))))
        body.append(self._to_json_method(encode, _name("Any")))

        return self._dataclass(sum_type.name, body)

    # Decoding and encoding expressions

    def _decoder(self, descriptor: TypeDescriptor) -> ast.expr:
        """Expression of a callable (value, path) decoding the descriptor."""
        if isinstance(descriptor, PrimitiveType):
            return _name(self.DECODERS[descriptor.json_type])
        if isinstance(descriptor, NamedReference):
            return ast.Attribute(value=_name(descriptor.name), attr="from_json", ctx=ast.Load())
        if isinstance(descriptor, (OptionalType, SliceType, MapType)):
            return ast.Lambda(
                args=_arguments("value", "path"),
                body=self._decode_call(descriptor, _name("value"), _name("path")),
            )
        return _name("_decode_any")

    def _decode_call(self, descriptor: TypeDescriptor, value: ast.expr, path: ast.expr) -> ast.expr:
        """Expression decoding value, reporting errors at path."""
        if isinstance(descriptor, OptionalType):
            return _call(_name("_decode_optional"), value, path, self._decoder(descriptor.inner))
        if isinstance(descriptor, SliceType):
            return _call(_name("_decode_list"), value, path, self._decoder(descriptor.item))
        if isinstance(descriptor, MapType):
            return _call(_name("_decode_map"), value, path, self._decoder(descriptor.value))
        return _call(self._decoder(descriptor), value, path)

    def _needs_encoding(self, descriptor: TypeDescriptor) -> bool:
        """Whether values of the descriptor differ from their JSON form."""
        if isinstance(descriptor, NamedReference):
            return True
        if isinstance(descriptor, OptionalType):
            return self._needs_encoding(descriptor.inner)
        if isinstance(descriptor, SliceType):
            return self._needs_encoding(descriptor.item)
        if isinstance(descriptor, MapType):
            return self._needs_encoding(descriptor.value)
        return False

    def _encode(self, descriptor: TypeDescriptor, value: ast.expr, depth: int = 0) -> ast.expr:
        """Expression converting value to its JSON form."""
        if isinstance(descriptor, NamedReference):
            return _call(ast.Attribute(value=value, attr="to_json", ctx=ast.Load()))

        if isinstance(descriptor, OptionalType):
            if not self._needs_encoding(descriptor.inner):
                return value
            is_none = ast.Compare(left=value, ops=[ast.Is()], comparators=[ast.Constant(value=None)])
            return ast.IfExp(test=is_none, body=ast.Constant(value=None), orelse=self._encode(descriptor.inner, value, depth))

        if isinstance(descriptor, SliceType):
            if not self._needs_encoding(descriptor.item):
                return _call(_name("list"), value)
            item = f"item{depth}"
            return ast.ListComp(
                elt=self._encode(descriptor.item, _name(item), depth + 1),
                generators=[ast.comprehension(target=_store(item), iter=value, ifs=[], is_async=0)],
            )

        if isinstance(descriptor, MapType):
            if not self._needs_encoding(descriptor.value):
                return _call(_name("dict"), value)
            key, item = f"key{depth}", f"value{depth}"
            return ast.DictComp(
                key=_name(key),
                value=self._encode(descriptor.value, _name(item), depth + 1),
                generators=[
                    ast.comprehension(
                        target=ast.Tuple(elts=[_store(key), _store(item)], ctx=ast.Store()),
                        iter=_call(ast.Attribute(value=value, attr="items", ctx=ast.Load())),
                        ifs=[],
                        is_async=0,
                    )
                ],
            )

        return value

    # Types

    def translate_type(self, descriptor: TypeDescriptor) -> ast.expr:
        """Translate a descriptor to a Python annotation."""
        if isinstance(descriptor, PrimitiveType):
            if descriptor.json_type == "null":
                return ast.Constant(value=None)
            return _name(self.TYPE_MAP[descriptor.json_type])

        if isinstance(descriptor, NamedReference):
            return _name(descriptor.name)

        if isinstance(descriptor, OptionalType):
            inner = self.translate_type(descriptor.inner)
            if isinstance(inner, ast.Constant) and inner.value is None:
                return inner
            return ast.BinOp(left=inner, op=ast.BitOr(), right=ast.Constant(value=None))

        if isinstance(descriptor, SliceType):
            return ast.Subscript(value=_name("list"), slice=self.translate_type(descriptor.item), ctx=ast.Load())

        if isinstance(descriptor, MapType):
            key_value = ast.Tuple(elts=[_name("str"), self.translate_type(descriptor.value)], ctx=ast.Load())
            return ast.Subscript(value=_name("dict"), slice=key_value, ctx=ast.Load())

        if not isinstance(descriptor, OpenType):
            raise EmitterInvariantError(f"{descriptor.kind.value} cannot be used as a field type")
        return _name("Any")

    # Helpers

    def _dataclass(self, name: str, body: list[ast.stmt]) -> ast.ClassDef:
        self.python_imports.add(("dataclasses", "dataclass"))
        decorator = ast.Call(
            func=_name("dataclass"),
            args=[],
            keywords=[ast.keyword(arg="kw_only", value=ast.Constant(value=True))],
        )
        return ast.ClassDef(name=name, bases=[], keywords=[], body=body, decorator_list=[decorator])

    def _from_json_method(self, class_name: str, body: list[ast.stmt]) -> ast.FunctionDef:
        """Build `from_json(cls, data: Any, path: str = "$") -> ClassName`."""
        args = _arguments("cls", "data", "path", defaults=[ast.Constant(value="$")])
        args.args[1].annotation = _name("Any")
        args.args[2].annotation = _name("str")
        return ast.FunctionDef(
            name="from_json",
            args=args,
            body=body,
            decorator_list=[_name("classmethod")],
            returns=_name(class_name),
        )

    def _to_json_method(self, body: list[ast.stmt], returns: ast.expr) -> ast.FunctionDef:
        return ast.FunctionDef(
            name="to_json",
            args=_arguments("self"),
            body=body,
            decorator_list=[],
            returns=returns,
        )

    def _constant_tuple(self, values: list[str]) -> ast.Tuple:
        return ast.Tuple(elts=[ast.Constant(value=v) for v in values], ctx=ast.Load())

    def _parse_expr(self, expr_str: str) -> ast.expr:
        """Parse an expression string into an AST expression."""
        return ast.parse(expr_str, mode="eval").body
