from collections.abc import Sequence
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.markup import escape
from rich.table import Table

from code_assist.cli.common import console, fail, get_settings
from code_assist.core.search import grep as _grep
from code_assist.core.search import run_search
from code_assist.core.session import ProjectSession
from code_assist.errors import RepositoryNotFoundError


def _render_table(headers: Sequence[str], rows: Sequence[tuple[Any, ...]]) -> None:
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(escape(str(v)) for v in row))
    console.print(table)
    console.print(f"({len(rows)} rows)")


def search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Free-text query; may be empty.")] = "",
    root: Annotated[Path, typer.Option("--root", "-r", help="Repository root.")] = Path("."),
    limit: Annotated[int | None, typer.Option(help="Max files to return.")] = None,
    excerpts: Annotated[bool, typer.Option(help="Show matched-line excerpts.")] = True,
) -> None:
    """Rank files by relevance to a query."""
    settings = get_settings(ctx)
    try:
        session = ProjectSession(root, settings)
        snapshot = session.snapshot
        outcome = run_search(
            snapshot.root,
            query,
            snapshot.project_type,
            limit,
            session.is_ignored,
            settings,
            snapshot.features.drupal_modules,
        )
    except RepositoryNotFoundError as e:
        fail(str(e))

    console.print(f"[green]Project type:[/green] {session.project_type.label}")
    rows = [(f"{hit.score:.3f}", hit.language.value, hit.file_path) for hit in outcome.hits]
    _render_table(["score", "language", "path"], rows)
    if excerpts:
        for hit in outcome.hits:
            if hit.matched_lines:
                console.print(f"[bold]{escape(hit.file_path)}[/bold]")
                for number, line in hit.matched_lines:
                    console.print(f"  {number}: {line}", markup=False, highlight=False)
    if outcome.diagnostics:
        console.print(f"[yellow]{len(outcome.diagnostics)} files skipped or searched by path only[/yellow]")


def grep(
    ctx: typer.Context,
    pattern: Annotated[str, typer.Argument(help="Regular expression.")],
    root: Annotated[Path, typer.Option("--root", "-r", help="Repository root.")] = Path("."),
    ignore_case: Annotated[bool, typer.Option("--ignore-case", "-i", help="Case-insensitive match.")] = False,
    max_results: Annotated[int, typer.Option(help="Max lines to return.")] = 200,
) -> None:
    """Search file contents line by line with a regular expression."""
    try:
        matches = _grep(root, pattern, settings=get_settings(ctx), max_results=max_results, ignore_case=ignore_case)
    except (RepositoryNotFoundError, ValueError) as e:
        fail(str(e))
    _render_table(["path", "line", "text"], [(m.file_path, m.line_number, m.line) for m in matches])
