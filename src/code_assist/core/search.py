"""Relevance search over a repository, weighted by the detected project type.

Each file is read once. Scoring is a pure function of the file's relative path
and content so the walk can be spread over a thread pool without changing the
ranking: results are merged by a single ``(-score, path)`` sort.
"""

import logging
import re
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path, PurePosixPath

from code_assist.config import Settings
from code_assist.core.analyzers.php import drupal_hook_suffix
from code_assist.core.analyzers.scan import split_lines
from code_assist.core.ignore import IgnoreRules, walk_files
from code_assist.core.keywords import asks_for_drupal_component, extract_terms, query_focus
from code_assist.core.languages import CONTENT_PREFIX_BYTES, detect_language, detect_signatures, looks_binary
from code_assist.errors import RepositoryNotFoundError
from code_assist.models import (
    Diagnostic,
    DiagnosticKind,
    Framework,
    Language,
    LineMatch,
    ProjectType,
    SearchHit,
    Signature,
)

logger = logging.getLogger(__name__)

WORD_HIT = 1.0
SUBSTRING_HIT = 0.5
REPEAT_DECAY = 0.7
DECLARATION_BONUS = 1.5
PATH_BONUS = 2.0
COVERAGE_BONUS = 1.0
EMPTY_QUERY_BASE = 1.0

LANGUAGE_BOOST = 1.5
RELATED_LANGUAGE_BOOST = 1.2
FRAMEWORK_KEYWORD_BOOST = 1.0
MAX_FRAMEWORK_KEYWORDS = 3
FRAMEWORK_SIGNATURE_BOOST = 3.0
DRUPAL_HOOK_BOOST = 4.0
DRUPAL_COMPONENT_BOOST = 4.0
FOCUS_BOOST = 2.5
DRUPAL_SCRIPT_PENALTY = 0.5

SCORE_PRECISION = 6

FRAMEWORK_KEYWORDS: dict[Framework, tuple[str, ...]] = {
    Framework.REACT: ("usestate", "useeffect", "props", "component", "jsx", "classname", "usecontext"),
    Framework.ANGULAR: ("@component", "@injectable", "ngoninit", "@input", "observable", "ngmodule"),
    Framework.NEXTJS: ("getserversideprops", "getstaticprops", "next/router", "next/link", "use client", "userouter"),
    Framework.DJANGO: ("models.model", "urlpatterns", "queryset", "httpresponse", "render(", "serializer"),
    Framework.FLASK: ("@app.route", "blueprint", "render_template", "jsonify", "request.", "flask"),
    Framework.FASTAPI: ("apirouter", "depends(", "basemodel", "@app.get", "@router.", "httpexception"),
}
DRUPAL_KEYWORDS = ("hook_", "\\drupal", "drupal::", "$form_state", "@plugin", "implements hook")

FRAMEWORK_SIGNATURES: dict[Framework, frozenset[Signature]] = {
    Framework.REACT: frozenset({Signature.REACT, Signature.JSX}),
    Framework.ANGULAR: frozenset({Signature.ANGULAR}),
    Framework.NEXTJS: frozenset({Signature.NEXTJS, Signature.REACT, Signature.JSX}),
    Framework.DJANGO: frozenset({Signature.DJANGO}),
    Framework.FLASK: frozenset({Signature.FLASK}),
    Framework.FASTAPI: frozenset({Signature.FASTAPI}),
}
DRUPAL_SIGNATURES = frozenset(
    {Signature.DRUPAL, Signature.DRUPAL_INFO, Signature.DRUPAL_SERVICES, Signature.DRUPAL_TEMPLATE}
)

_RELATED_LANGUAGES = {
    Language.JAVASCRIPT: Language.TYPESCRIPT,
    Language.TYPESCRIPT: Language.JAVASCRIPT,
}
_DRUPAL_COMPONENT_NAMESPACES = ("\\plugin\\", "\\form\\", "\\entity\\")
_FUNCTION_NAME = re.compile(r"^\s*function\s+(?P<name>\w+)\s*\(", re.MULTILINE)
_DECLARATION = re.compile(
    r"^\s*(?:(?:export|pub(?:\([^)]*\))?|public|private|protected|static|async|default|abstract|final)\s+)*"
    r"(?:fn|def|class|function|func|struct|enum|trait|interface|type|impl|const|let|var|mod)\b"
)


@dataclass(frozen=True)
class ScoringProfile:
    """Everything about a query and project that scoring needs, computed once per search."""

    project_type: ProjectType
    terms: tuple[str, ...]
    focus: frozenset[Signature] = frozenset()
    component_query: bool = False
    drupal_modules: frozenset[str] = frozenset()
    max_excerpts: int = 5
    excerpt_chars: int = 160
    _word_patterns: tuple[re.Pattern[str], ...] = field(default=(), repr=False, compare=False)

    @classmethod
    def build(
        cls,
        query: str,
        project_type: ProjectType,
        settings: Settings | None = None,
        drupal_modules: Iterable[str] = (),
    ) -> "ScoringProfile":
        settings = settings or Settings()
        terms = extract_terms(query)
        return cls(
            project_type=project_type,
            terms=tuple(terms),
            focus=query_focus(terms),
            component_query=asks_for_drupal_component(terms),
            drupal_modules=frozenset(m.lower() for m in drupal_modules),
            max_excerpts=settings.max_excerpts_per_file,
            excerpt_chars=settings.excerpt_chars,
            _word_patterns=tuple(re.compile(rf"(?<![\w$]){re.escape(t)}(?![\w$])") for t in terms),
        )

    def word_pattern(self, index: int) -> re.Pattern[str]:
        if len(self._word_patterns) == len(self.terms):
            return self._word_patterns[index]
        return re.compile(rf"(?<![\w$]){re.escape(self.terms[index])}(?![\w$])")


@dataclass
class SearchOutcome:
    hits: list[SearchHit]
    diagnostics: list[Diagnostic] = field(default_factory=list)
    files_scanned: int = 0


def _language_factor(language: Language, project_type: ProjectType) -> float:
    primary = project_type.primary_language
    if primary is Language.UNKNOWN or language is Language.UNKNOWN:
        return 1.0
    if language is primary:
        return LANGUAGE_BOOST
    if _RELATED_LANGUAGES.get(language) is primary:
        return RELATED_LANGUAGE_BOOST
    return 1.0


def _in_language_family(language: Language, project_type: ProjectType) -> bool:
    primary = project_type.primary_language
    return language is primary or _RELATED_LANGUAGES.get(language) is primary


def _term_score(
    content: str, profile: ScoringProfile
) -> tuple[float, set[str], list[tuple[int, str]]]:
    score = 0.0
    matched: set[str] = set()
    excerpts: list[tuple[int, str]] = []
    seen = [0] * len(profile.terms)

    for line_number, line in enumerate(split_lines(content), start=1):
        lower = line.lower()
        line_hit = False
        for i, term in enumerate(profile.terms):
            count = lower.count(term)
            if not count:
                continue
            words = len(profile.word_pattern(i).findall(lower))
            for k in range(count):
                weight = WORD_HIT if k < words else SUBSTRING_HIT
                score += weight * REPEAT_DECAY ** seen[i]
                seen[i] += 1
            if words and _DECLARATION.match(line):
                score += DECLARATION_BONUS
            matched.add(term)
            line_hit = True
        if line_hit and len(excerpts) < profile.max_excerpts:
            excerpts.append((line_number, line.strip()[: profile.excerpt_chars]))
    return score, matched, excerpts


def _framework_boost(
    rel_path: str, lower: str, signatures: frozenset[Signature], profile: ScoringProfile
) -> float:
    project_type = profile.project_type
    boost = 0.0
    if project_type.framework is not None:
        hits = sum(1 for keyword in FRAMEWORK_KEYWORDS[project_type.framework] if keyword in lower)
        boost += FRAMEWORK_KEYWORD_BOOST * min(hits, MAX_FRAMEWORK_KEYWORDS)
        if signatures & FRAMEWORK_SIGNATURES[project_type.framework]:
            boost += FRAMEWORK_SIGNATURE_BOOST
    elif project_type.drupal:
        hits = sum(1 for keyword in DRUPAL_KEYWORDS if keyword in lower)
        boost += FRAMEWORK_KEYWORD_BOOST * min(hits, MAX_FRAMEWORK_KEYWORDS)
        if signatures & DRUPAL_SIGNATURES:
            boost += FRAMEWORK_SIGNATURE_BOOST
        if _has_drupal_hook(rel_path, lower, profile.drupal_modules):
            boost += DRUPAL_HOOK_BOOST
    return boost


def _has_drupal_hook(rel_path: str, lower: str, modules: frozenset[str]) -> bool:
    if "implements hook_" in lower:
        return True
    candidates = modules | {PurePosixPath(rel_path).name.split(".", 1)[0].lower()}
    # only <module>_<hook> counts here; unprefixed names are too common in plain PHP
    for m in _FUNCTION_NAME.finditer(lower):
        name = m.group("name")
        if any(name.startswith(f"{module}_") and drupal_hook_suffix(name, module) for module in candidates):
            return True
    return False


def score_content(rel_path: str, content: str | None, profile: ScoringProfile) -> SearchHit | None:
    """Score one file against a query.

    ``content`` of ``None`` means the file could not be decoded: only its path
    is scored and its language is unknown. Returns ``None`` for files that do
    not match at all.
    """
    project_type = profile.project_type
    language = Language.UNKNOWN
    if content is not None:
        language = detect_language(Path(rel_path), content[:CONTENT_PREFIX_BYTES])

    path_lower = rel_path.lower()
    excerpts: list[tuple[int, str]] = []
    if profile.terms:
        score, matched, excerpts = _term_score(content, profile) if content is not None else (0.0, set(), [])
        for term in profile.terms:
            if term in path_lower:
                score += PATH_BONUS
                matched.add(term)
        if not matched:
            return None
        score += COVERAGE_BONUS * len(matched)
    else:
        score = EMPTY_QUERY_BASE if _in_language_family(language, project_type) else 0.0

    score *= _language_factor(language, project_type)

    if content is not None:
        lower = content.lower()
        signatures = detect_signatures(content)
        score += _framework_boost(rel_path, lower, signatures, profile)
        if project_type.drupal and profile.component_query and language is Language.PHP:
            if any(ns in lower for ns in _DRUPAL_COMPONENT_NAMESPACES):
                score += DRUPAL_COMPONENT_BOOST
        if profile.focus & signatures:
            score += FOCUS_BOOST
        if project_type.drupal and language is Language.JAVASCRIPT and "drupal" not in lower:
            score *= DRUPAL_SCRIPT_PENALTY

    score = round(score, SCORE_PRECISION)
    if score <= 0:
        return None
    return SearchHit(file_path=rel_path, language=language, score=score, matched_lines=excerpts)


def _score_path(
    root: Path, profile: ScoringProfile, max_bytes: int, path: Path
) -> tuple[SearchHit | None, Diagnostic | None]:
    rel = path.relative_to(root).as_posix()
    try:
        size = path.stat().st_size
        if size > max_bytes:
            return None, Diagnostic(path=rel, kind=DiagnosticKind.TOO_LARGE, message=f"{size} bytes exceeds limit")
        data = path.read_bytes()
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None, Diagnostic(path=rel, kind=DiagnosticKind.IO, message=str(e))

    if looks_binary(data):
        return score_content(rel, None, profile), Diagnostic(
            path=rel, kind=DiagnosticKind.ENCODING, message="binary content"
        )
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        return score_content(rel, None, profile), Diagnostic(path=rel, kind=DiagnosticKind.ENCODING, message=str(e))
    return score_content(rel, text, profile), None


def _resolve_root(root: str | Path) -> Path:
    root_path = Path(root)
    if not root_path.is_dir():
        raise RepositoryNotFoundError(str(root))
    return root_path.resolve()


def run_search(
    root: str | Path,
    query: str,
    project_type: ProjectType,
    limit: int | None = None,
    is_ignored: Callable[[Path], bool] | None = None,
    settings: Settings | None = None,
    drupal_modules: Iterable[str] = (),
) -> SearchOutcome:
    """Rank the files under ``root`` for ``query``, keeping per-file diagnostics."""
    settings = settings or Settings()
    root_path = _resolve_root(root)
    predicate = is_ignored if is_ignored is not None else IgnoreRules.for_root(root_path, settings.extra_ignore)
    profile = ScoringProfile.build(query, project_type, settings, drupal_modules)
    limit = settings.search_limit if limit is None else limit

    files = list(walk_files(root_path, predicate))
    scorer = partial(_score_path, root_path, profile, settings.max_file_bytes)
    with ThreadPoolExecutor(max_workers=settings.workers) as pool:
        results = list(pool.map(scorer, files))

    hits: list[SearchHit] = []
    diagnostics: list[Diagnostic] = []
    for hit, diagnostic in results:
        if hit is not None:
            hits.append(hit)
        if diagnostic is not None:
            diagnostics.append(diagnostic)

    hits.sort(key=lambda h: (-h.score, h.file_path))
    hits = hits[: max(limit, 0)]
    logger.info("Search %r in %s: %d files scanned, %d hits", query, root_path, len(files), len(hits))
    return SearchOutcome(hits=hits, diagnostics=diagnostics, files_scanned=len(files))


def search(
    root: str | Path,
    query: str,
    project_type: ProjectType,
    limit: int | None = None,
    is_ignored: Callable[[Path], bool] | None = None,
    settings: Settings | None = None,
    drupal_modules: Iterable[str] = (),
) -> list[SearchHit]:
    return run_search(root, query, project_type, limit, is_ignored, settings, drupal_modules).hits


def grep(
    root: str | Path,
    pattern: str,
    is_ignored: Callable[[Path], bool] | None = None,
    settings: Settings | None = None,
    max_results: int = 200,
    ignore_case: bool = False,
) -> list[LineMatch]:
    """Regex search line by line over the non-ignored text files under ``root``."""
    try:
        regex = re.compile(pattern, re.IGNORECASE if ignore_case else 0)
    except re.error as e:
        raise ValueError(f"Invalid search pattern {pattern!r}: {e}") from e

    settings = settings or Settings()
    root_path = _resolve_root(root)
    predicate = is_ignored if is_ignored is not None else IgnoreRules.for_root(root_path, settings.extra_ignore)

    matches: list[LineMatch] = []
    for path in walk_files(root_path, predicate):
        try:
            if path.stat().st_size > settings.max_file_bytes:
                continue
            data = path.read_bytes()
        except OSError as e:
            logger.debug("Cannot read %s: %s", path, e)
            continue
        if looks_binary(data):
            continue
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            continue
        rel = path.relative_to(root_path).as_posix()
        for line_number, line in enumerate(split_lines(text), start=1):
            if regex.search(line):
                matches.append(LineMatch(file_path=rel, line_number=line_number, line=line.rstrip()))
                if len(matches) >= max_results:
                    return matches
    return matches
