import ast
import logging

import pytest

from json_schema_compiler.errors import FormattingError
from json_schema_compiler.pipeline import CompilerConfig, ModuleRenderer
from json_schema_compiler.pipeline.analyzer.ir_nodes import ImportDef
from json_schema_compiler.pipeline.formatters import RuffFormatter, get_formatter


def test_empty_module_layout():
    code = ModuleRenderer(CompilerConfig(package_name="models")).render([], [ImportDef("typing", ("Any",))])
    lines = code.splitlines()
    assert lines[0] == "# Code generated by json_schema_compiler. DO NOT EDIT."
    assert lines[1] == '"""Types of the models package, decoded from and encoded to JSON."""'
    assert "from typing import Any" in lines
    assert "class DecodeError(ValueError):" in lines
    assert code.endswith("\n") and not code.endswith("\n\n")


def test_declarations_are_separated_by_two_blank_lines():
    declarations = [ast.parse("class A:\n    pass").body[0], ast.parse("class B:\n    pass").body[0]]
    code = ModuleRenderer(CompilerConfig()).render(declarations, [])
    assert "\n\n\nclass A:\n    pass\n\n\nclass B:\n    pass\n" in code


def test_invalid_source_is_rejected():
    with pytest.raises(FormattingError, match="not valid Python"):
        ModuleRenderer(CompilerConfig()).validate("class :\n")


def test_unavailable_formatter_leaves_output_unchanged(monkeypatch, caplog):
    monkeypatch.setattr(RuffFormatter, "is_available", lambda self: False)
    config = CompilerConfig()
    plain = ModuleRenderer(config).render([], [])

    config.formatter.name = "ruff"
    with caplog.at_level(logging.WARNING):
        assert ModuleRenderer(config).render([], []) == plain
    assert "Formatter ruff is not available" in caplog.text


def test_unknown_formatter():
    with pytest.raises(ValueError, match="Unknown formatter 'yapf'"):
        get_formatter("yapf")


def test_unknown_formatter_set_after_loading():
    config = CompilerConfig()
    config.formatter.name = "yapf"
    with pytest.raises(FormattingError, match="Unknown formatter 'yapf'"):
        ModuleRenderer(config).render([], [])
