from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from code_assist.config import Settings

console = Console()
err_console = Console(stderr=True)


def get_settings(ctx: typer.Context) -> Settings:
    """Settings loaded by the root callback, or defaults when a command runs standalone."""
    root = ctx.find_root()
    if isinstance(root.obj, Settings):
        return root.obj
    return Settings()


def fail(message: str) -> NoReturn:
    err_console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)
