"""Shared fixtures and helpers for tests."""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Repository builders
# ---------------------------------------------------------------------------

RepoFactory = Callable[[dict[str, str | bytes]], Path]


def write_repo(root: Path, files: dict[str, str | bytes]) -> Path:
    """Write ``files`` (relative path -> content) under ``root`` and return it."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_repo(tmp_path: Path) -> RepoFactory:
    """Return a factory that lays out a repository in a fresh directory."""
    counter = iter(range(1000))

    def _make(files: dict[str, str | bytes]) -> Path:
        root = tmp_path / f"repo{next(counter)}"
        root.mkdir()
        return write_repo(root, files)

    return _make


RUST_AUTH = """use std::collections::HashMap;

fn reset_password() {
    let users: HashMap<String, String> = HashMap::new();
    println!("{}", users.len());
}
"""

REACT_BUTTON = """import React from 'react';

function Button() {
  return <button className="primary">Click</button>;
}

export default Button;
"""

DRUPAL_MODULE = """<?php

/**
 * Implements hook_menu().
 */
function mymodule_menu() {
  $items = [];
  $items['mymodule/settings'] = [
    'title' => 'Settings menu',
  ];
  return $items;
}
"""

PLAIN_PHP = """<?php

class MenuRenderer {
  public function render($menu) {
    return implode(',', $menu);
  }
}
"""


@pytest.fixture
def rust_repo(make_repo: RepoFactory) -> Path:
    return make_repo(
        {
            "Cargo.toml": '[package]\nname = "auth"\nversion = "0.1.0"\n\n[dependencies]\nserde = "1"\n',
            "src/auth.rs": RUST_AUTH,
        }
    )


@pytest.fixture
def react_repo(make_repo: RepoFactory) -> Path:
    return make_repo(
        {
            "package.json": '{"name": "ui", "dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0"}}',
            "src/Button.jsx": REACT_BUTTON,
        }
    )


@pytest.fixture
def drupal_repo(make_repo: RepoFactory) -> Path:
    return make_repo(
        {
            "mymodule.info.yml": "name: My Module\ntype: module\ncore_version_requirement: ^10\n",
            "mymodule.module": DRUPAL_MODULE,
            "src/MenuRenderer.php": PLAIN_PHP,
        }
    )
