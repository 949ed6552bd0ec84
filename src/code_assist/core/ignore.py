import fnmatch
import logging
import os
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".idea",
        ".vscode",
        ".venv",
        "venv",
        "__pycache__",
        ".mypy_cache",
        ".pytest_cache",
        ".tox",
        "node_modules",
        "target",
        "build",
        "dist",
        "vendor",
        ".next",
        "coverage",
    }
)

BINARY_EXTENSIONS = frozenset(
    {
        ".exe", ".dll", ".obj", ".bin", ".so", ".dylib", ".a", ".o", ".class",
        ".pyc", ".pyd", ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".ico", ".svg",
        ".pdf", ".zip", ".tar", ".gz", ".tgz", ".rar", ".7z", ".jar", ".war",
        ".woff", ".woff2", ".ttf", ".eot", ".mp3", ".mp4", ".wasm", ".lock",
    }
)  # fmt: skip


def read_gitignore(root: Path) -> list[str]:
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return []
    try:
        lines = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.warning("Cannot read %s: %s", gitignore, e)
        return []
    patterns = []
    for line in lines:
        line = line.strip()
        # negations are not supported
        if not line or line.startswith("#") or line.startswith("!"):
            continue
        patterns.append(line)
    return patterns


class IgnoreRules:
    """Decide whether a path under ``root`` is excluded from scanning.

    Instances are callable, so they satisfy ``IgnorePredicate``.
    """

    def __init__(self, root: Path, patterns: Iterable[str] = ()) -> None:
        self.root = root
        self._dir_patterns: list[str] = []
        self._patterns: list[str] = []
        for pattern in patterns:
            anchored = pattern.lstrip("/")
            if pattern.endswith("/"):
                self._dir_patterns.append(anchored.rstrip("/"))
            else:
                self._patterns.append(anchored)

    @classmethod
    def for_root(cls, root: Path, extra_patterns: Iterable[str] = ()) -> "IgnoreRules":
        return cls(root, [*read_gitignore(root), *extra_patterns])

    def __call__(self, path: Path) -> bool:
        return self.is_ignored(path)

    def is_ignored(self, path: Path) -> bool:
        try:
            rel = path.relative_to(self.root)
        except ValueError:
            rel = path
        parts = rel.parts
        if not parts:
            return False

        # Every ancestor directory is checked so the predicate also works for
        # callers that do not prune during their own walk.
        for part in parts[:-1]:
            if self._is_ignored_dir_name(part):
                return True

        name = parts[-1]
        if path.is_dir():
            if self._is_ignored_dir_name(name):
                return True
        elif path.suffix.lower() in BINARY_EXTENSIONS:
            return True

        rel_posix = rel.as_posix()
        for pattern in self._patterns:
            if fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(rel_posix, pattern):
                return True
            if any(fnmatch.fnmatch(part, pattern) for part in parts[:-1]):
                return True
        for pattern in self._dir_patterns:
            dirs = parts if path.is_dir() else parts[:-1]
            if any(fnmatch.fnmatch(part, pattern) for part in dirs):
                return True
            if fnmatch.fnmatch(rel_posix, pattern) or rel_posix.startswith(f"{pattern}/"):
                return True
        return False

    @staticmethod
    def _is_ignored_dir_name(name: str) -> bool:
        return name in DEFAULT_IGNORED_DIRS or (name.startswith(".") and name not in (".", ".."))


def walk_files(
    root: Path,
    is_ignored: Callable[[Path], bool] | None = None,
    max_depth: int | None = None,
) -> Iterator[Path]:
    """Yield files under ``root`` in a deterministic (sorted) order.

    Ignored directories are pruned and never descended into. ``max_depth`` of
    0 restricts the walk to files directly inside ``root``.
    """
    predicate = is_ignored if is_ignored is not None else IgnoreRules.for_root(root)
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        current = Path(dirpath)
        depth = len(current.relative_to(root).parts)
        if max_depth is not None and depth >= max_depth:
            dirnames[:] = []
        else:
            dirnames[:] = sorted(d for d in dirnames if not predicate(current / d))
        for filename in sorted(filenames):
            path = current / filename
            if not predicate(path):
                yield path


def _log_walk_error(error: OSError) -> None:
    logger.debug("Skipping unreadable directory: %s", error)
