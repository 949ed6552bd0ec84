import logging
from collections import defaultdict
from collections.abc import Callable
from pathlib import Path

from code_assist.core.ignore import IgnoreRules, walk_files
from code_assist.errors import RepositoryNotFoundError
from code_assist.models import ProjectStructure

logger = logging.getLogger(__name__)

NO_EXTENSION = "(none)"


def analyze_structure(root: str | Path, is_ignored: Callable[[Path], bool] | None = None) -> ProjectStructure:
    """List the non-ignored directories and group files by extension, all relative to ``root``."""
    root_path = Path(root)
    if not root_path.is_dir():
        raise RepositoryNotFoundError(str(root))
    root_path = root_path.resolve()
    predicate = is_ignored if is_ignored is not None else IgnoreRules.for_root(root_path)

    directories: set[str] = set()
    by_extension: dict[str, list[str]] = defaultdict(list)
    for path in walk_files(root_path, predicate):
        rel = path.relative_to(root_path)
        for parent in rel.parents:
            if parent != Path("."):
                directories.add(parent.as_posix())
        extension = path.suffix.lower() or NO_EXTENSION
        by_extension[extension].append(rel.as_posix())

    logger.debug("Structure of %s: %d directories, %d extensions", root_path, len(directories), len(by_extension))
    return ProjectStructure(
        root=str(root_path),
        directories=sorted(directories),
        files_by_extension={ext: sorted(files) for ext, files in sorted(by_extension.items())},
    )
