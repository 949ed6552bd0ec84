from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from code_assist.cli.common import console, fail
from code_assist.core.parser import parse_file


def parse(
    path: Annotated[Path, typer.Argument(help="Path to a source file.")],
    language: Annotated[str | None, typer.Option(help="Language name or alias (e.g. rust, py, ts, php).")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Print the parse result as JSON.")] = False,
) -> None:
    """Show the structural outline of one file."""
    try:
        result = parse_file(path, language)
    except (OSError, ValueError) as e:
        fail(str(e))

    if json_output:
        typer.echo(result.model_dump_json(indent=2))
        return

    console.print(f"[green]{escape(str(path))}[/green] ({result.language.value}, {result.line_count} lines)")
    if result.imports:
        console.print("imports: " + ", ".join(result.imports), markup=False)
    table = Table(show_lines=False)
    for h in ("kind", "name", "lines", "parent"):
        table.add_column(h)
    for symbol in result.symbols:
        table.add_row(
            symbol.kind.value,
            escape(symbol.name),
            f"{symbol.start_line}-{symbol.end_line}",
            escape(symbol.parent or ""),
        )
    console.print(table)
    for error in result.parse_errors:
        console.print(f"[yellow]{escape(error)}[/yellow]")
