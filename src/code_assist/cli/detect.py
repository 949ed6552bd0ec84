from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from code_assist.cli.common import console, fail, get_settings
from code_assist.core.session import ProjectSession
from code_assist.core.structure import analyze_structure
from code_assist.errors import RepositoryNotFoundError


def detect(
    ctx: typer.Context,
    root: Annotated[Path, typer.Argument(help="Repository root.")] = Path("."),
) -> None:
    """Detect the project type and the features it was derived from."""
    try:
        session = ProjectSession(root, get_settings(ctx))
        snapshot = session.snapshot
    except RepositoryNotFoundError as e:
        fail(str(e))

    features = snapshot.features
    console.print(f"[green]Project type:[/green] {snapshot.project_type.label}")
    table = Table(show_lines=False)
    table.add_column("feature")
    table.add_column("values")
    table.add_row("manifests", ", ".join(sorted(features.manifests)))
    table.add_row("dependencies", ", ".join(sorted(features.dependencies)))
    table.add_row("markers", ", ".join(sorted(features.markers)))
    table.add_row("drupal modules", ", ".join(sorted(features.drupal_modules)))
    table.add_row("languages", ", ".join(sorted(lang.value for lang in features.source_languages)))
    console.print(table)


def structure(
    ctx: typer.Context,
    root: Annotated[Path, typer.Argument(help="Repository root.")] = Path("."),
) -> None:
    """Show directories and files grouped by extension."""
    settings = get_settings(ctx)
    try:
        session = ProjectSession(root, settings)
        result = analyze_structure(session.root, session.is_ignored)
    except RepositoryNotFoundError as e:
        fail(str(e))

    console.print(f"[green]Directories[/green] ({len(result.directories)})")
    for directory in result.directories:
        console.print(f"  {directory}/", markup=False)
    table = Table(show_lines=False)
    table.add_column("extension")
    table.add_column("files", justify="right")
    for extension, files in result.files_by_extension.items():
        table.add_row(extension, str(len(files)))
    console.print(table)
