import json
import os

import pytest
from click.testing import CliRunner

from json_schema_compiler.json_schema_compiler import json_schema_compiler

PERSON = {
    "title": "Person",
    "type": "object",
    "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
    "required": ["name"],
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def person_file(tmp_path):
    path = tmp_path / "person.json"
    path.write_text(json.dumps(PERSON), encoding="utf-8")
    return str(path)


def test_compile_to_stdout(runner, person_file):
    result = runner.invoke(json_schema_compiler, [person_file])
    assert result.exit_code == 0, result.output
    assert result.output.startswith("# Code generated by json_schema_compiler. DO NOT EDIT.\n")
    assert "class Person:" in result.output


def test_compile_from_stdin(runner):
    result = runner.invoke(json_schema_compiler, ["-p", "people", "-"], input=json.dumps(PERSON))
    assert result.exit_code == 0, result.output
    assert '"""Types of the people package' in result.output
    assert "class Person:" in result.output


def test_output_file_is_only_rewritten_on_change(runner, person_file, tmp_path):
    output = tmp_path / "out" / "schema.py"
    result = runner.invoke(json_schema_compiler, ["-o", str(output), person_file])
    assert result.exit_code == 0, result.output
    assert result.output == ""
    assert "class Person:" in output.read_text(encoding="utf-8")

    os.utime(output, ns=(1_000_000_000, 1_000_000_000))
    result = runner.invoke(json_schema_compiler, ["-o", str(output), person_file])
    assert result.exit_code == 0, result.output
    assert output.stat().st_mtime_ns == 1_000_000_000


def test_no_files(runner):
    result = runner.invoke(json_schema_compiler, [])
    assert result.exit_code == 2
    assert "json_schema_compiler: no JSON Schema files listed." in result.output
    assert "Usage:" in result.output


@pytest.mark.parametrize(
    "args, message",
    [
        (["-p", "1abc"], "json_schema_compiler: invalid package name '1abc'."),
        (["-p", "class"], "json_schema_compiler: invalid package name 'class'."),
    ],
)
def test_bad_package_name(runner, person_file, args, message):
    result = runner.invoke(json_schema_compiler, args + [person_file])
    assert result.exit_code == 2
    assert message in result.output


def test_missing_file(runner, tmp_path):
    result = runner.invoke(json_schema_compiler, [str(tmp_path / "nope.json")])
    assert result.exit_code == 2
    assert "json_schema_compiler: cannot read" in result.output
    assert "No such file or directory." in result.output


def test_invalid_json(runner, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{", encoding="utf-8")
    result = runner.invoke(json_schema_compiler, [str(path)])
    assert result.exit_code == 2
    assert "is not valid JSON" in result.output


def test_schema_error(runner, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"type": "object", "properties": {"x": {"$ref": "#/definitions/X"}}}), encoding="utf-8")
    result = runner.invoke(json_schema_compiler, [str(path)])
    assert result.exit_code == 2
    assert "json_schema_compiler: unresolved $ref '#/definitions/X' at " in result.output
    assert "broken.json#/properties/x." in result.output


def test_nothing_written_on_error(runner, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"type": "string", "items": {}}), encoding="utf-8")
    output = tmp_path / "schema.py"
    result = runner.invoke(json_schema_compiler, ["-o", str(output), str(path)])
    assert result.exit_code == 2
    assert not output.exists()


def test_config_file(runner, person_file, tmp_path):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"package_name": "models", "formatter": {"name": "none"}}), encoding="utf-8")
    result = runner.invoke(json_schema_compiler, ["-c", str(config), person_file])
    assert result.exit_code == 0, result.output
    assert '"""Types of the models package' in result.output


def test_invalid_config_keys(runner, person_file, tmp_path):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"formatter": {"style": "pep8"}}), encoding="utf-8")
    result = runner.invoke(json_schema_compiler, ["-c", str(config), person_file])
    assert result.exit_code == 2
    assert "json_schema_compiler: invalid config" in result.output


@pytest.mark.parametrize(
    "config_data, message",
    [
        ({"formatter": {"name": "yapf"}}, "unknown formatter 'yapf'"),
        ({"formatter": "ruff"}, "'formatter' must be an object"),
    ],
)
def test_invalid_formatter_config(runner, person_file, tmp_path, config_data, message):
    config = tmp_path / "config.json"
    config.write_text(json.dumps(config_data), encoding="utf-8")
    result = runner.invoke(json_schema_compiler, ["-c", str(config), person_file])
    assert result.exit_code == 2
    assert "json_schema_compiler: invalid config" in result.output
    assert message in result.output
    assert "Traceback" not in result.output


def test_unknown_formatter_option(runner, person_file):
    result = runner.invoke(json_schema_compiler, ["--formatter", "yapf", person_file])
    assert result.exit_code == 2
