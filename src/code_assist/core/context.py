"""Budget-bounded context packages for the prompt builder.

The rendered package is a header, a ranked file listing with excerpts and one
summary block per parsed file, concatenated in that order. Summaries are added
greedily in rank order; the first block that would push the rendering past the
byte budget stops inclusion and every later hit stays listed but unparsed.
"""

import logging
from pathlib import Path

from code_assist.config import Settings
from code_assist.core.languages import CONTENT_PREFIX_BYTES, detect_language
from code_assist.core.parser import parse_source
from code_assist.core.search import run_search
from code_assist.core.session import ProjectSession
from code_assist.models import (
    ContextPackage,
    Diagnostic,
    DiagnosticKind,
    Language,
    ParseResult,
    ProjectType,
    SearchHit,
)

logger = logging.getLogger(__name__)

LISTING_TITLE = "\n## Ranked files\n"
SUMMARIES_TITLE = "\n## File summaries\n"


def _size(text: str) -> int:
    return len(text.encode("utf-8"))


def _render_header(root: str, query: str, project_type: ProjectType) -> str:
    return f"# Project context\nroot: {root}\nproject type: {project_type.label}\nquery: {query}\n"


def _render_entry(position: int, hit: SearchHit) -> str:
    lines = [f"{position}. {hit.file_path} [{hit.language.value}] score={hit.score:.6f}"]
    lines.extend(f"   L{number}: {excerpt}" for number, excerpt in hit.matched_lines)
    return "\n".join(lines) + "\n"


def _render_summary(file_path: str, result: ParseResult, first: bool) -> str:
    lines = [f"### {file_path} ({result.language.value}, {result.line_count} lines)"]
    if result.imports:
        lines.append("imports: " + ", ".join(result.imports))
    for symbol in result.symbols:
        line = f"- {symbol.kind.value} {symbol.name} [{symbol.start_line}-{symbol.end_line}]"
        if symbol.parent:
            line += f" in {symbol.parent}"
        lines.append(line)
    lines.extend(f"! {error}" for error in result.parse_errors)
    block = "\n".join(lines) + "\n"
    return SUMMARIES_TITLE + block if first else block


def _render_parts(package: ContextPackage) -> list[str]:
    if not package.header_included:
        return []
    parts = [_render_header(package.root, package.query, package.project_type)]
    if package.ranked_files:
        parts.append(LISTING_TITLE)
        parts.extend(_render_entry(i, hit) for i, hit in enumerate(package.ranked_files, start=1))
    first = True
    for hit in package.ranked_files:
        result = package.parsed_summaries.get(hit.file_path)
        if result is not None:
            parts.append(_render_summary(hit.file_path, result, first))
            first = False
    return parts


def render_context(package: ContextPackage) -> str:
    """Render ``package`` as the text block injected into a prompt.

    Deterministic: the same package always renders to the same string, and its
    UTF-8 size is ``package.total_size_bytes``.
    """
    return "".join(_render_parts(package))


def _fit_listing(header: str, hits: list[SearchHit], budget: int) -> list[SearchHit]:
    """Drop ranked entries from the tail until header and listing fit in ``budget``."""
    used = _size(header)
    if hits:
        used += _size(LISTING_TITLE)
    entry_sizes = [_size(_render_entry(i, hit)) for i, hit in enumerate(hits, start=1)]
    used += sum(entry_sizes)
    kept = len(hits)
    while kept and used > budget:
        kept -= 1
        used -= entry_sizes[kept]
        if not kept:
            used -= _size(LISTING_TITLE)
    return hits[:kept]


def _parse_hit(root: Path, hit: SearchHit, diagnostics: list[Diagnostic]) -> ParseResult | None:
    path = root / hit.file_path
    try:
        source = path.read_bytes()
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        diagnostics.append(Diagnostic(path=hit.file_path, kind=DiagnosticKind.IO, message=str(e)))
        return None

    prefix = source[:CONTENT_PREFIX_BYTES].decode("utf-8", errors="ignore")
    language = detect_language(path, prefix)
    if language is Language.UNKNOWN:
        return None
    result = parse_source(source, language, hit.file_path)
    if result.language is Language.UNKNOWN:
        diagnostics.append(
            Diagnostic(path=hit.file_path, kind=DiagnosticKind.ENCODING, message="; ".join(result.parse_errors))
        )
        return None
    if result.parse_errors:
        diagnostics.append(
            Diagnostic(path=hit.file_path, kind=DiagnosticKind.PARSE, message="; ".join(result.parse_errors))
        )
    return result


def build_context(
    root: str | Path,
    query: str,
    budget_bytes: int | None = None,
    session: ProjectSession | None = None,
    limit: int | None = None,
    settings: Settings | None = None,
) -> ContextPackage:
    """Assemble the context package for ``query`` within ``budget_bytes``.

    ``session`` supplies the cached project type; a fresh one is created when
    it is missing or bound to a different root.
    """
    if session is None or session.root != Path(root).resolve():
        session = ProjectSession(root, settings)
    settings = settings or session.settings
    budget = settings.budget_bytes if budget_bytes is None else budget_bytes
    if budget < 0:
        raise ValueError(f"budget_bytes must not be negative, got {budget}")

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
    diagnostics = list(outcome.diagnostics)
    root_str = str(snapshot.root)

    header = _render_header(root_str, query, snapshot.project_type)
    if _size(header) > budget:
        logger.info("Budget of %d bytes cannot hold the context header", budget)
        return ContextPackage(
            root=root_str,
            query=query,
            project_type=snapshot.project_type,
            budget_bytes=budget,
            header_included=False,
            diagnostics=diagnostics,
        )

    ranked = _fit_listing(header, outcome.hits, budget)
    listing_complete = len(ranked) == len(outcome.hits)
    used = _size(header)
    if ranked:
        used += _size(LISTING_TITLE) + sum(_size(_render_entry(i, hit)) for i, hit in enumerate(ranked, start=1))

    summaries: dict[str, ParseResult] = {}
    # memo lives only for this call
    parsed: dict[str, ParseResult | None] = {}
    if listing_complete:
        for hit in ranked:
            if hit.file_path not in parsed:
                parsed[hit.file_path] = _parse_hit(snapshot.root, hit, diagnostics)
            result = parsed[hit.file_path]
            if result is None:
                continue
            block_size = _size(_render_summary(hit.file_path, result, first=not summaries))
            if used + block_size > budget:
                logger.debug("Budget reached at %s (%d + %d > %d)", hit.file_path, used, block_size, budget)
                break
            summaries[hit.file_path] = result
            used += block_size
    else:
        logger.debug("Ranked listing trimmed to %d of %d entries", len(ranked), len(outcome.hits))

    package = ContextPackage(
        root=root_str,
        query=query,
        project_type=snapshot.project_type,
        ranked_files=ranked,
        parsed_summaries=summaries,
        budget_bytes=budget,
        diagnostics=diagnostics,
    )
    package.total_size_bytes = _size(render_context(package))
    logger.info(
        "Context for %r: %d ranked, %d parsed, %d/%d bytes",
        query,
        len(ranked),
        len(summaries),
        package.total_size_bytes,
        budget,
    )
    return package
