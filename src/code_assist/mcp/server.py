"""FastMCP server exposing code-assist tools."""

from __future__ import annotations

import asyncio
from typing import Any

from fastmcp import FastMCP

from code_assist.core.context import build_context as _build_context
from code_assist.core.context import render_context
from code_assist.core.parser import parse_file as _parse_file
from code_assist.core.search import run_search
from code_assist.core.session import ProjectSession
from code_assist.core.structure import analyze_structure


def _project_summary(session: ProjectSession) -> dict[str, Any]:
    snapshot = session.snapshot
    features = snapshot.features
    return {
        "root": str(snapshot.root),
        "project_type": snapshot.project_type.label,
        "kind": snapshot.project_type.kind.value,
        "framework": snapshot.project_type.framework.value if snapshot.project_type.framework else None,
        "drupal": snapshot.project_type.drupal,
        "manifests": sorted(features.manifests),
        "dependencies": sorted(features.dependencies),
        "markers": sorted(features.markers),
        "drupal_modules": sorted(features.drupal_modules),
        "languages": sorted(lang.value for lang in features.source_languages),
    }


def create_mcp_server(session: ProjectSession) -> FastMCP:
    """Create a FastMCP server bound to one repository session."""

    mcp = FastMCP(
        "code-assist",
        instructions="Detect the project type, search and outline files, and assemble size-bounded context.",
    )

    @mcp.tool()
    async def detect_project() -> dict[str, Any]:
        """Return the detected project type and the features behind it."""
        return await asyncio.to_thread(_project_summary, session)

    @mcp.tool()
    async def refresh_project() -> dict[str, Any]:
        """Re-scan manifests after the repository changed and return the new project type."""
        await asyncio.to_thread(session.refresh)
        return _project_summary(session)

    @mcp.tool()
    async def search_files(query: str = "", limit: int | None = None) -> list[dict[str, Any]]:
        """Rank repository files by relevance to a query."""

        def _run() -> list[dict[str, Any]]:
            snapshot = session.snapshot
            outcome = run_search(
                snapshot.root,
                query,
                snapshot.project_type,
                limit,
                session.is_ignored,
                session.settings,
                snapshot.features.drupal_modules,
            )
            return [hit.model_dump(mode="json") for hit in outcome.hits]

        return await asyncio.to_thread(_run)

    @mcp.tool()
    async def parse_file(path: str, language: str | None = None) -> dict[str, Any] | str:
        """Return the structural outline of a file inside the repository."""
        target = (session.root / path).resolve()
        if not target.is_relative_to(session.root):
            return f"Error: {path} is outside the repository root."
        try:
            result = await asyncio.to_thread(_parse_file, target, language)
        except (OSError, ValueError) as e:
            return f"Error: {e}"
        result.file_path = target.relative_to(session.root).as_posix()
        return result.model_dump(mode="json")

    @mcp.tool()
    async def build_context(query: str = "", budget_bytes: int | None = None, limit: int | None = None) -> str:
        """Assemble the budget-bounded context block for a query."""
        if budget_bytes is not None and budget_bytes < 0:
            return "Error: budget_bytes must not be negative."
        package = await asyncio.to_thread(
            _build_context, session.root, query, budget_bytes, session, limit, session.settings
        )
        return render_context(package)

    @mcp.tool()
    async def project_structure() -> dict[str, Any]:
        """List directories and files grouped by extension."""
        result = await asyncio.to_thread(analyze_structure, session.root, session.is_ignored)
        return result.model_dump(mode="json")

    return mcp
