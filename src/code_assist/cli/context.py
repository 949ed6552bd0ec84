from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from code_assist.cli.common import err_console, fail, get_settings
from code_assist.core.context import build_context, render_context
from code_assist.core.session import ProjectSession
from code_assist.errors import RepositoryNotFoundError


def context(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Free-text query; may be empty.")] = "",
    root: Annotated[Path, typer.Option("--root", "-r", help="Repository root.")] = Path("."),
    budget: Annotated[int | None, typer.Option(help="Byte budget for the rendered package.")] = None,
    limit: Annotated[int | None, typer.Option(help="Max ranked files.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Print the package as JSON.")] = False,
) -> None:
    """Assemble the budget-bounded context package for a query."""
    settings = get_settings(ctx)
    try:
        session = ProjectSession(root, settings)
        package = build_context(session.root, query, budget, session=session, limit=limit, settings=settings)
    except (RepositoryNotFoundError, ValueError) as e:
        fail(str(e))

    if json_output:
        typer.echo(package.model_dump_json(indent=2))
        return
    typer.echo(render_context(package), nl=False)
    for diagnostic in package.diagnostics:
        message = f"{escape(diagnostic.path)}: {escape(diagnostic.message)}"
        err_console.print(f"[yellow]{diagnostic.kind.value}[/yellow] {message}")
