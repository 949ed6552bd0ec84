"""Unit tests for the per-root project session."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

import pytest

from code_assist.core import session as session_module
from code_assist.core.session import ProjectSession
from code_assist.errors import RepositoryNotFoundError
from code_assist.models import Framework, ProjectKind


@pytest.fixture
def detect_calls(monkeypatch: pytest.MonkeyPatch) -> list[Path]:
    calls: list[Path] = []
    original = session_module.detect_features

    def _counting(root: Path, *args: Any, **kwargs: Any) -> Any:
        calls.append(root)
        return original(root, *args, **kwargs)

    monkeypatch.setattr(session_module, "detect_features", _counting)
    return calls


class TestProjectSession:
    def test_detection_is_lazy_and_cached(self, rust_repo: Path, detect_calls: list[Path]) -> None:
        session = ProjectSession(rust_repo)
        assert detect_calls == []
        assert session.project_type.kind is ProjectKind.RUST
        assert "Cargo.toml" in session.features.manifests
        assert session.snapshot is session.snapshot
        assert len(detect_calls) == 1

    def test_refresh_picks_up_changes(self, rust_repo: Path, detect_calls: list[Path]) -> None:
        session = ProjectSession(rust_repo)
        assert session.project_type.kind is ProjectKind.RUST
        (rust_repo / "mymodule.info.yml").write_text("name: X\ntype: module\n")
        assert session.project_type.kind is ProjectKind.RUST
        snapshot = session.refresh()
        assert snapshot.project_type.drupal
        assert session.project_type.drupal
        assert len(detect_calls) == 2

    def test_change_root(self, rust_repo: Path, react_repo: Path) -> None:
        session = ProjectSession(rust_repo)
        assert session.project_type.kind is ProjectKind.RUST
        session.change_root(react_repo)
        assert session.root == react_repo.resolve()
        assert session.project_type.framework is Framework.REACT

    def test_change_root_to_missing_keeps_old_root(self, rust_repo: Path, tmp_path: Path) -> None:
        session = ProjectSession(rust_repo)
        with pytest.raises(RepositoryNotFoundError):
            session.change_root(tmp_path / "missing")
        assert session.root == rust_repo.resolve()

    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(RepositoryNotFoundError, match="not found"):
            ProjectSession(tmp_path / "missing")

    def test_concurrent_first_use_computes_once(self, rust_repo: Path, detect_calls: list[Path]) -> None:
        session = ProjectSession(rust_repo)
        with ThreadPoolExecutor(max_workers=8) as pool:
            snapshots = list(pool.map(lambda _: session.snapshot, range(16)))
        assert all(s is snapshots[0] for s in snapshots)
        assert len(detect_calls) == 1

    def test_custom_ignore_predicate(self, make_repo: Any) -> None:
        root = make_repo({"Cargo.toml": "[package]\n", "web/package.json": '{"dependencies": {"react": "1"}}'})
        assert ProjectSession(root).project_type.framework is Framework.REACT
        session = ProjectSession(root, is_ignored=lambda path: path.name == "web")
        assert session.project_type.kind is ProjectKind.RUST
