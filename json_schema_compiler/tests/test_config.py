import pytest

from json_schema_compiler.pipeline.config import CompilerConfig, FormatterConfig, OutputConfig


def test_defaults():
    config = CompilerConfig()
    assert config.package_name == "schema"
    assert config.formatter.name == "none"
    assert not config.formatter.enabled
    assert config.output.atomic_write


def test_from_dict_round_trip():
    data = {
        "package_name": "models",
        "formatter": {"name": "ruff", "line_length": 88, "target_version": "py313"},
        "output": {"atomic_write": False, "validate_before_write": True},
    }
    config = CompilerConfig.from_dict(data)
    assert config.formatter == FormatterConfig(name="ruff", line_length=88, target_version="py313")
    assert config.formatter.enabled
    assert config.output == OutputConfig(atomic_write=False)
    assert config.to_dict() == data


def test_from_dict_ignores_unknown_keys():
    config = CompilerConfig.from_dict({"language": "cs", "package_name": "api"})
    assert config.package_name == "api"
    assert not hasattr(config, "language")


@pytest.mark.parametrize(
    "data, message",
    [
        ({"formatter": {"name": "yapf"}}, "unknown formatter 'yapf', expected one of none, ruff, black"),
        ({"formatter": "ruff"}, "'formatter' must be an object"),
        ({"output": True}, "'output' must be an object"),
    ],
)
def test_from_dict_rejects_invalid_sections(data, message):
    with pytest.raises(ValueError, match=message):
        CompilerConfig.from_dict(data)
