"""
Configuration for the compiler pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field

FORMATTER_NAMES = ("none", "ruff", "black")


@dataclass
class FormatterConfig:
    """Configuration for post-processing formatters."""

    # Which formatter to run on the rendered module ("none", "ruff", "black")
    name: str = "none"

    # Line length for the formatter
    line_length: int = 100

    # Python version target (e.g., "py312", "py313")
    target_version: str = "py312"

    def __post_init__(self):
        if self.name not in FORMATTER_NAMES:
            raise ValueError(f"unknown formatter {self.name!r}, expected one of {', '.join(FORMATTER_NAMES)}")

    @property
    def enabled(self) -> bool:
        return self.name != "none"


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        atomic_write: Whether to write through a temporary file and rename
        validate_before_write: Whether to parse the rendered module before writing
    """

    atomic_write: bool = True
    validate_before_write: bool = True


@dataclass
class CompilerConfig:
    """Configuration options for compilation."""

    # Package name mentioned in the generated module docstring
    package_name: str = "schema"

    # Formatter configuration
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> CompilerConfig:
        """
        Create a config from a dictionary.

        Raises:
            TypeError: If a section holds unknown keys
            ValueError: If a section is not an object or names an unknown formatter
        """
        config = CompilerConfig()
        for k, v in d.items():
            if k in ("formatter", "output") and not isinstance(v, dict):
                raise ValueError(f"'{k}' must be an object")
            if k == "formatter":
                config.formatter = FormatterConfig(**v)
            elif k == "output":
                config.output = OutputConfig(**v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "package_name": self.package_name,
            "formatter": {
                "name": self.formatter.name,
                "line_length": self.formatter.line_length,
                "target_version": self.formatter.target_version,
            },
            "output": {
                "atomic_write": self.output.atomic_write,
                "validate_before_write": self.output.validate_before_write,
            },
        }
