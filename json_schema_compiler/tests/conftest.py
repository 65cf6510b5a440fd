from __future__ import annotations

import itertools
import sys
import types

import pytest

from json_schema_compiler import compile_schemas

_module_ids = itertools.count()


@pytest.fixture
def load_generated():
    """Execute generated source as a registered module and return it."""
    loaded = []

    def load(code: str) -> types.ModuleType:
        name = f"generated_{next(_module_ids)}"
        module = types.ModuleType(name)
        # dataclasses looks the defining module up in sys.modules
        sys.modules[name] = module
        loaded.append(name)
        exec(compile(code, f"<{name}>", "exec"), module.__dict__)
        return module

    yield load

    for name in loaded:
        sys.modules.pop(name, None)


@pytest.fixture
def compile_module(load_generated):
    """Compile {uri: schema} documents and load the generated module."""

    def compile_and_load(schemas: dict) -> types.ModuleType:
        return load_generated(compile_schemas(schemas))

    return compile_and_load
