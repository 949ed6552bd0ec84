import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from code_assist.cli.common import err_console, fail
from code_assist.cli.context import context
from code_assist.cli.detect import detect, structure
from code_assist.cli.parse import parse
from code_assist.cli.search import grep, search
from code_assist.cli.serve import serve_app
from code_assist.config import load_settings
from code_assist.errors import ConfigError

app = typer.Typer(
    name="code-assist",
    help="Code Assist CLI: detect project types, search, parse and assemble context.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=verbose, show_path=verbose)],
        force=True,
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
    config: Annotated[Path | None, typer.Option("--config", "-c", help="Path to a config.toml file.")] = None,
) -> None:
    _configure_logging(verbose)
    try:
        ctx.obj = load_settings(config)
    except ConfigError as e:
        fail(str(e))


app.command("detect")(detect)
app.command("structure")(structure)
app.command("search")(search)
app.command("grep")(grep)
app.command("parse")(parse)
app.command("context")(context)
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
