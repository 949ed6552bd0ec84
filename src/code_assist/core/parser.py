import logging
from pathlib import Path

from code_assist.core.analyzers.golang import analyze_go
from code_assist.core.analyzers.javascript import analyze_script
from code_assist.core.analyzers.php import analyze_php
from code_assist.core.analyzers.python import analyze_python
from code_assist.core.analyzers.rust import analyze_rust
from code_assist.core.analyzers.scan import split_lines
from code_assist.core.languages import CONTENT_PREFIX_BYTES, looks_binary, resolve_language
from code_assist.models import Language, ParseResult

logger = logging.getLogger(__name__)


def parse(text: str, language: Language, file_path: str | None = None) -> ParseResult:
    """Produce a structural summary of ``text``.

    Never raises for malformed source: anomalies land in ``parse_errors`` and
    whatever symbols were recognised are still returned.
    """
    match language:
        case Language.RUST:
            result = analyze_rust(text, file_path)
        case Language.PYTHON:
            result = analyze_python(text, file_path)
        case Language.JAVASCRIPT | Language.TYPESCRIPT:
            result = analyze_script(text, language, file_path)
        case Language.PHP:
            result = analyze_php(text, file_path)
        case Language.GO:
            result = analyze_go(text, file_path)
        case Language.UNKNOWN:
            result = ParseResult(file_path=file_path, language=language, line_count=len(split_lines(text)))

    if result.parse_errors:
        logger.debug("Parse anomalies in %s: %s", file_path or "<text>", result.parse_errors)
    return result


def parse_source(source: bytes, language: Language, file_path: str | None = None) -> ParseResult:
    """Parse raw file bytes; binary or non-UTF-8 content is left unparsed."""
    if looks_binary(source):
        return ParseResult(file_path=file_path, language=Language.UNKNOWN, parse_errors=["binary content"])
    try:
        text = source.decode("utf-8")
    except UnicodeDecodeError:
        return ParseResult(file_path=file_path, language=Language.UNKNOWN, parse_errors=["content is not valid UTF-8"])
    return parse(text, language, file_path)


def parse_file(path: str | Path, language: str | Language | None = None) -> ParseResult:
    file_path = Path(path)
    try:
        source = file_path.read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None

    if isinstance(language, Language):
        resolved = language
    else:
        prefix = source[:CONTENT_PREFIX_BYTES].decode("utf-8", errors="ignore")
        resolved = resolve_language(language, file_path, prefix)
    return parse_source(source, resolved, str(path))
