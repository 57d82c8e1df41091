"""Command-line interface for the declkit declaration generator."""

import sys
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from declkit.core.errors import RenderError
from declkit.core.config import get_version, load_declkit_config
from declkit.core.integrator import generate_declarations

app = typer.Typer(help="Generate TypeScript declarations from a processed API schema")

logger = logging.getLogger(__name__)


@app.command()
def version() -> None:
    """Print the installed package version."""
    typer.echo(get_version())


@app.command()
def generate(
    input_path: Annotated[
        Optional[Path],
        typer.Option("--input", "-i", exists=True, readable=True, help="Schema JSON (default: stdin)."),
    ] = None,
    output_path: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Destination file (default: stdout).")
    ] = None,
    config_path: Annotated[
        Optional[Path], typer.Option("--config", help="Path to declkit.config.json.")
    ] = None,
    preamble: Annotated[
        Optional[Path], typer.Option(help="Static preamble prepended to the output.")
    ] = None,
    root_namespace: Annotated[
        Optional[str], typer.Option(help="Name of the ambient `declare namespace`.")
    ] = None,
    timestamp: Annotated[bool, typer.Option(help="Embed the generation timestamp.")] = True,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Read the processed API schema and write the declaration file."""
    try:
        config = load_declkit_config(str(config_path) if config_path else None)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--config")

    if preamble is not None:
        config.preamble = str(preamble)
    if root_namespace is not None:
        config.rootNamespace = root_namespace
    if not timestamp:
        config.timestamp = False

    raw = input_path.read_text(encoding="utf-8") if input_path else sys.stdin.read()

    try:
        output = generate_declarations(raw, config=config, verbose=verbose)
    except (RenderError, ValueError) as e:
        if verbose:
            logger.error(str(e))
        else:
            typer.echo(f"declkit: {e}", err=True)
        raise typer.Exit(code=1)

    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(output, encoding="utf-8")
    else:
        typer.echo(output, nl=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
