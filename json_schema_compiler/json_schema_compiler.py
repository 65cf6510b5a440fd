import json
import logging
import sys

import click

from .errors import ArgumentError, CompilerError, DecodeError, FileAccessError
from .loader import load_documents
from .pipeline import CompilerConfig, SchemaCompiler, check_package_name, write_if_different
from .pipeline.config import FORMATTER_NAMES

PROG_NAME = "json_schema_compiler"


def load_config(path: str | None) -> CompilerConfig:
    """Read a JSON config file, or return the default config."""
    if path is None:
        return CompilerConfig()
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise DecodeError(f"config {path} is not valid JSON: {e.msg}") from e
    except OSError as e:
        raise FileAccessError(f"cannot read config {path}: {e.strerror or e}") from e

    if not isinstance(data, dict):
        raise ArgumentError(f"config {path} must hold a JSON object")
    try:
        return CompilerConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ArgumentError(f"invalid config {path}: {e}") from e


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--pkg", "-p", default=None, type=str, help="Name of the generated package (default: schema)")
@click.option(
    "--output",
    "-o",
    default=None,
    type=click.Path(dir_okay=False),
    help="Write the module to this file instead of stdout; unchanged files are not rewritten",
)
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False), help="JSON config file")
@click.option("--formatter", default=None, type=click.Choice(FORMATTER_NAMES), help="Formatter run on the output")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log pipeline steps on stderr")
@click.argument("files", nargs=-1, type=str)
@click.pass_context
def json_schema_compiler(ctx, pkg, output, config, formatter, verbose, files):
    """Compile JSON Schema FILES into Python dataclasses ("-" reads stdin)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not files:
        click.echo(f"{PROG_NAME}: no JSON Schema files listed.", err=True)
        click.echo(ctx.get_usage(), err=True)
        ctx.exit(2)

    try:
        compiler_config = load_config(config)
        if pkg is not None:
            check_package_name(pkg)
            compiler_config.package_name = pkg
        if formatter is not None:
            compiler_config.formatter.name = formatter

        documents = load_documents(list(files))
        code = SchemaCompiler(compiler_config).generate(documents)

        if output is None:
            click.echo(code, nl=False)
        else:
            write_if_different(output, code, atomic=compiler_config.output.atomic_write)
    except CompilerError as e:
        click.echo(f"{PROG_NAME}: {e}.", err=True)
        ctx.exit(2)
