"""Unit tests for the directory and extension summary."""

from collections.abc import Callable
from pathlib import Path

import pytest

from code_assist.core.structure import NO_EXTENSION, analyze_structure
from code_assist.errors import RepositoryNotFoundError

RepoFactory = Callable[[dict[str, str | bytes]], Path]


def test_directories_and_extensions(make_repo: RepoFactory) -> None:
    root = make_repo(
        {
            "README": "",
            "docs/guide.md": "",
            "src/main.rs": "",
            "src/lib/util.RS": "",
            "node_modules/react/index.js": "",
        }
    )
    structure = analyze_structure(root)
    assert structure.root == str(root.resolve())
    assert structure.directories == ["docs", "src", "src/lib"]
    assert list(structure.files_by_extension) == [NO_EXTENSION, ".md", ".rs"]
    assert structure.files_by_extension[".rs"] == ["src/lib/util.RS", "src/main.rs"]
    assert structure.files_by_extension[NO_EXTENSION] == ["README"]


def test_empty_directories_are_not_listed(make_repo: RepoFactory) -> None:
    root = make_repo({"a.py": ""})
    (root / "empty").mkdir()
    assert analyze_structure(root).directories == []


def test_gitignore_respected(make_repo: RepoFactory) -> None:
    root = make_repo({".gitignore": "out/\n*.tmp\n", "out/a.js": "", "x.tmp": "", "y.py": ""})
    structure = analyze_structure(root)
    assert structure.directories == []
    assert structure.files_by_extension == {NO_EXTENSION: [".gitignore"], ".py": ["y.py"]}


def test_missing_root(tmp_path: Path) -> None:
    with pytest.raises(RepositoryNotFoundError):
        analyze_structure(tmp_path / "missing")
