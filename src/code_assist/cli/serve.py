from pathlib import Path
from typing import Annotated

import typer

from code_assist.cli.common import err_console, fail, get_settings
from code_assist.errors import RepositoryNotFoundError

serve_app = typer.Typer(help="Start servers.")


@serve_app.command("mcp")
def mcp(
    ctx: typer.Context,
    root: Annotated[Path, typer.Option("--root", "-r", help="Repository root the tools operate on.")] = Path("."),
    transport: str = "stdio",
) -> None:
    """Start the MCP server."""
    from code_assist.core.session import ProjectSession
    from code_assist.mcp.server import create_mcp_server

    try:
        session = ProjectSession(root, get_settings(ctx))
    except RepositoryNotFoundError as e:
        fail(str(e))
    server = create_mcp_server(session)
    # stdout carries the protocol on stdio
    err_console.print(f"[green]Starting MCP server for {session.root} (transport: {transport})[/green]")
    server.run(transport=transport)  # type: ignore[arg-type]
