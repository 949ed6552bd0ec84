"""Unit tests for ignore rules and the deterministic walk."""

from collections.abc import Callable
from pathlib import Path

from code_assist.core.ignore import IgnoreRules, read_gitignore, walk_files

RepoFactory = Callable[[dict[str, str | bytes]], Path]


def _rel(root: Path, paths: list[Path]) -> list[str]:
    return [p.relative_to(root).as_posix() for p in paths]


class TestIgnoreRules:
    def test_default_directories(self, make_repo: RepoFactory) -> None:
        root = make_repo({"node_modules/x.js": "", ".git/config": "", "target/debug/a.rs": "", "src/a.rs": ""})
        rules = IgnoreRules(root)
        assert rules(root / "node_modules")
        assert rules(root / "node_modules" / "x.js")
        assert rules(root / ".git" / "config")
        assert rules(root / "target" / "debug" / "a.rs")
        assert not rules(root / "src" / "a.rs")

    def test_binary_extensions(self, make_repo: RepoFactory) -> None:
        root = make_repo({"logo.png": b"\x89PNG", "Cargo.lock": "", "main.go": ""})
        rules = IgnoreRules(root)
        assert rules(root / "logo.png")
        assert rules(root / "Cargo.lock")
        assert not rules(root / "main.go")

    def test_gitignore_patterns(self, make_repo: RepoFactory) -> None:
        root = make_repo(
            {
                ".gitignore": "# comment\n*.log\n/generated/\n!keep.log\n",
                "app.log": "",
                "generated/api.py": "",
                "src/generated_names.py": "",
            }
        )
        assert read_gitignore(root) == ["*.log", "/generated/"]
        rules = IgnoreRules.for_root(root)
        assert rules(root / "app.log")
        assert rules(root / "generated")
        assert rules(root / "generated" / "api.py")
        assert not rules(root / "src" / "generated_names.py")

    def test_extra_patterns(self, make_repo: RepoFactory) -> None:
        root = make_repo({"fixtures/big.json": "{}", "src/a.py": ""})
        rules = IgnoreRules.for_root(root, ["fixtures/"])
        assert rules(root / "fixtures" / "big.json")
        assert not rules(root / "src" / "a.py")

    def test_missing_gitignore(self, tmp_path: Path) -> None:
        assert read_gitignore(tmp_path) == []


class TestWalkFiles:
    def test_sorted_and_pruned(self, make_repo: RepoFactory) -> None:
        root = make_repo({"b.py": "", "a/z.py": "", "a/b.py": "", "node_modules/m.js": "", "A.md": ""})
        assert _rel(root, list(walk_files(root))) == ["A.md", "b.py", "a/b.py", "a/z.py"]

    def test_max_depth(self, make_repo: RepoFactory) -> None:
        root = make_repo({"top.py": "", "a/mid.py": "", "a/b/deep.py": ""})
        assert _rel(root, list(walk_files(root, max_depth=0))) == ["top.py"]
        assert _rel(root, list(walk_files(root, max_depth=1))) == ["top.py", "a/mid.py"]

    def test_custom_predicate(self, make_repo: RepoFactory) -> None:
        root = make_repo({"keep.py": "", "skip.py": "", "node_modules/m.js": ""})
        files = _rel(root, list(walk_files(root, lambda p: p.name == "skip.py")))
        assert files == ["keep.py", "node_modules/m.js"]
