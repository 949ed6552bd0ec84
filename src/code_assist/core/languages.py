import re
from pathlib import Path

from code_assist.models import Language, Signature

_LANGUAGE_ALIASES = {
    "go": Language.GO,
    "golang": Language.GO,
    "javascript": Language.JAVASCRIPT,
    "js": Language.JAVASCRIPT,
    "jsx": Language.JAVASCRIPT,
    "node": Language.JAVASCRIPT,
    "php": Language.PHP,
    "drupal": Language.PHP,
    "python": Language.PYTHON,
    "py": Language.PYTHON,
    "rs": Language.RUST,
    "rust": Language.RUST,
    "ts": Language.TYPESCRIPT,
    "tsx": Language.TYPESCRIPT,
    "typescript": Language.TYPESCRIPT,
}

_EXTENSION_LANGUAGE_MAP = {
    ".cjs": Language.JAVASCRIPT,
    ".cts": Language.TYPESCRIPT,
    ".go": Language.GO,
    ".inc": Language.PHP,
    ".install": Language.PHP,
    ".js": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".mjs": Language.JAVASCRIPT,
    ".module": Language.PHP,
    ".mts": Language.TYPESCRIPT,
    ".php": Language.PHP,
    ".profile": Language.PHP,
    ".py": Language.PYTHON,
    ".pyi": Language.PYTHON,
    ".rs": Language.RUST,
    ".theme": Language.PHP,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TYPESCRIPT,
}

CONTENT_PREFIX_BYTES = 4096
_BINARY_SNIFF_BYTES = 8192

_SHEBANG_LANGUAGES = (
    ("python", Language.PYTHON),
    ("node", Language.JAVASCRIPT),
    ("deno", Language.TYPESCRIPT),
    ("php", Language.PHP),
)

_GO_PACKAGE = re.compile(r"^package\s+\w+\s*$", re.MULTILINE)
_GO_SHAPE = re.compile(r"^(?:import\s*(?:\(|\")|func\s)", re.MULTILINE)
_RUST_FN = re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?(?:async\s+)?fn\s+\w+", re.MULTILINE)
_RUST_SHAPE = re.compile(r"^\s*(?:use\s+[\w:]+|impl\b|let\s+(?:mut\s+)?\w+|struct\s+\w+|mod\s+\w+)", re.MULTILINE)
_PY_DEF = re.compile(r"^\s*(?:async\s+)?def\s+\w+\s*\(.*\)\s*(?:->.*)?:\s*$", re.MULTILINE)
_PY_SHAPE = re.compile(r"^(?:from\s+[\w.]+\s+import\s|import\s+[\w.]+\s*$|class\s+\w+.*:\s*$)", re.MULTILINE)
_JS_SHAPE = re.compile(r"\bfunction\b|\b(?:const|let|var)\s+\w+\s*=|=>|\bexport\s+(?:default|const|function)")
_JSX_MARKUP = re.compile(r"(?:return\s*\(?\s*|=>\s*\(?\s*)<(?:[A-Za-z][\w.]*|>)|</[A-Za-z][\w.]*>|<>|/>")


def normalize_language(language: str) -> Language:
    normalized = language.strip().lower()
    resolved = _LANGUAGE_ALIASES.get(normalized)
    if resolved is None:
        supported = sorted({lang.value for lang in _LANGUAGE_ALIASES.values()})
        raise ValueError(f"Unsupported language '{language}'. Supported: {supported}")
    return resolved


def language_from_extension(path: Path) -> Language:
    return _EXTENSION_LANGUAGE_MAP.get(path.suffix.lower(), Language.UNKNOWN)


def detect_language(path: Path, content_prefix: str | None = None) -> Language:
    """Classify a file by extension, falling back to its first few KiB of content."""
    by_extension = language_from_extension(path)
    if by_extension is not Language.UNKNOWN or not content_prefix:
        return by_extension
    return detect_language_from_content(content_prefix[:CONTENT_PREFIX_BYTES])


def detect_language_from_content(prefix: str) -> Language:
    stripped = prefix.lstrip()
    if stripped.startswith("<?php") or "<?php" in prefix[:256]:
        return Language.PHP

    first_line = stripped.splitlines()[0] if stripped else ""
    if first_line.startswith("#!"):
        for token, language in _SHEBANG_LANGUAGES:
            if token in first_line:
                return language

    if _GO_PACKAGE.search(prefix) and _GO_SHAPE.search(prefix):
        return Language.GO

    rust_fns = len(_RUST_FN.findall(prefix))
    python_defs = len(_PY_DEF.findall(prefix))
    if rust_fns and _RUST_SHAPE.search(prefix) and rust_fns >= python_defs:
        return Language.RUST
    if python_defs or _PY_SHAPE.search(prefix):
        return Language.PYTHON
    if _JS_SHAPE.search(prefix):
        return Language.JAVASCRIPT
    return Language.UNKNOWN


def resolve_language(language: str | None, file_path: Path | None, content: str | None = None) -> Language:
    if language:
        return normalize_language(language)
    if file_path:
        return detect_language(file_path, content)
    raise ValueError("Language must be provided when no file path is available.")


def looks_binary(data: bytes) -> bool:
    return b"\x00" in data[:_BINARY_SNIFF_BYTES]


def has_jsx(content: str) -> bool:
    return _JSX_MARKUP.search(content) is not None


def detect_signatures(content: str) -> frozenset[Signature]:
    """Return the framework and syntax markers found in ``content``."""
    lower = content.lower()
    found: set[Signature] = set()

    if re.search(r"^\s*(?:import\s|from\s+\S+\s+import\s|use\s+[\w\\:]+|#include\s)", content, re.MULTILINE) or (
        "require(" in content
    ):
        found.add(Signature.IMPORTS)
    if has_jsx(content):
        found.add(Signature.JSX)
    if re.search(r"""from\s+['"]react['"]|require\(['"]react['"]\)|\breact\.""", lower):
        found.add(Signature.REACT)
    if "@angular/" in lower or re.search(r"@(?:component|injectable|ngmodule)\s*\(", lower):
        found.add(Signature.ANGULAR)
    if re.search(r"""from\s+['"]next(?:/[\w-]+)?['"]""", lower):
        found.add(Signature.NEXTJS)
    if re.search(r"^\s*(?:from|import)\s+django\b", lower, re.MULTILINE):
        found.add(Signature.DJANGO)
    if re.search(r"^\s*(?:from|import)\s+flask\b", lower, re.MULTILINE):
        found.add(Signature.FLASK)
    if re.search(r"^\s*(?:from|import)\s+fastapi\b", lower, re.MULTILINE):
        found.add(Signature.FASTAPI)

    if (
        "drupal" in lower
        or "hook_" in lower
        or "module_implements" in lower
        or "@plugin" in lower
        or "pluginbase" in lower
        or "\\plugin\\" in lower
        or "\\form\\" in lower
        or "\\entity\\" in lower
        or "@implements" in lower
    ):
        found.add(Signature.DRUPAL)
    if "type: module" in lower or "core_version_requirement" in lower or re.search(r"^core:\s", lower, re.MULTILINE):
        found.add(Signature.DRUPAL_INFO)
    if "services:" in lower and "class:" in lower:
        found.add(Signature.DRUPAL_SERVICES)
    if "{{ content }}" in lower or "{{ attach_library" in lower or "{{ 'drupal" in lower:
        found.add(Signature.DRUPAL_TEMPLATE)

    return frozenset(found)
