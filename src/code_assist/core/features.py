"""Cheap, query-independent scan of a repository's manifests and marker files.

This runs once per session before any per-file analysis so the project's shape
is known before search decides how to weight files.
"""

import json
import logging
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from code_assist.core.ignore import IgnoreRules, walk_files
from code_assist.core.languages import language_from_extension
from code_assist.errors import RepositoryNotFoundError
from code_assist.models import Language, ProjectFeatures

logger = logging.getLogger(__name__)

DEFAULT_SCAN_DEPTH = 4

MANIFEST_NAMES = frozenset(
    {
        "Cargo.toml",
        "pyproject.toml",
        "setup.py",
        "setup.cfg",
        "Pipfile",
        "package.json",
        "tsconfig.json",
        "composer.json",
        "go.mod",
        "angular.json",
        "manage.py",
        "next.config.js",
        "next.config.mjs",
    }
)

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")
_SETUP_FRAMEWORKS = ("django", "flask", "fastapi")


def _requirement_name(spec: str) -> str | None:
    m = _REQUIREMENT_NAME.match(spec)
    return m.group(1).lower() if m else None


def _package_json(data: Any) -> set[str]:
    names: set[str] = set()
    if isinstance(data, dict):
        for key in ("dependencies", "devDependencies", "peerDependencies"):
            section = data.get(key)
            if isinstance(section, dict):
                names.update(str(name).lower() for name in section)
    return names


def _composer_json(data: Any) -> tuple[set[str], set[str]]:
    names: set[str] = set()
    markers: set[str] = set()
    if isinstance(data, dict):
        for key in ("require", "require-dev"):
            section = data.get(key)
            if isinstance(section, dict):
                names.update(str(name).lower() for name in section)
        if str(data.get("type", "")).startswith("drupal-"):
            markers.add("drupal_module")
    if any(name.startswith("drupal/") for name in names):
        markers.add("drupal_core")
    return names, markers


def _table(data: Any, key: str) -> dict[str, Any]:
    value = data.get(key) if isinstance(data, dict) else None
    return value if isinstance(value, dict) else {}


def _specs(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _pyproject(data: dict[str, Any]) -> set[str]:
    names: set[str] = set()
    project = _table(data, "project")
    groups = [_specs(project.get("dependencies"))]
    groups.extend(_specs(group) for group in _table(project, "optional-dependencies").values())
    for group in groups:
        for spec in group:
            if name := _requirement_name(str(spec)):
                names.add(name)
    poetry = _table(_table(data, "tool"), "poetry")
    for key in ("dependencies", "dev-dependencies"):
        names.update(str(name).lower() for name in _table(poetry, key))
    names.discard("python")
    return names


def _cargo(data: dict[str, Any]) -> set[str]:
    names: set[str] = set()
    for key in ("dependencies", "dev-dependencies", "build-dependencies"):
        section = data.get(key, {})
        if isinstance(section, dict):
            names.update(str(name).lower() for name in section)
    return names


def _requirements_txt(text: str) -> set[str]:
    names: set[str] = set()
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith(("#", "-")):
            continue
        if name := _requirement_name(line):
            names.add(name)
    return names


def _go_mod(text: str) -> set[str]:
    names: set[str] = set()
    in_block = False
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("require ("):
            in_block = True
            continue
        if in_block and stripped == ")":
            in_block = False
            continue
        if in_block and stripped:
            names.add(stripped.split()[0].lower())
        elif stripped.startswith("require "):
            parts = stripped.split()
            if len(parts) > 1:
                names.add(parts[1].lower())
    return names


def _info_yml(text: str) -> set[str]:
    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        return set()
    kind = str(data.get("type", "")).strip().lower()
    if kind == "module":
        return {"drupal_module"}
    if kind == "theme":
        return {"drupal_theme"}
    if kind == "profile":
        return {"drupal_profile"}
    return set()


def _read_manifest(path: Path, dependencies: set[str], markers: set[str]) -> None:
    name = path.name
    text = path.read_text(encoding="utf-8", errors="replace")
    if name == "package.json":
        dependencies.update(_package_json(json.loads(text)))
    elif name == "composer.json":
        names, found = _composer_json(json.loads(text))
        dependencies.update(names)
        markers.update(found)
    elif name == "pyproject.toml":
        dependencies.update(_pyproject(tomllib.loads(text)))
    elif name == "Pipfile":
        data = tomllib.loads(text)
        for key in ("packages", "dev-packages"):
            dependencies.update(str(n).lower() for n in _table(data, key))
    elif name == "Cargo.toml":
        dependencies.update(_cargo(tomllib.loads(text)))
    elif name == "go.mod":
        dependencies.update(_go_mod(text))
    elif name in ("setup.py", "setup.cfg"):
        lower = text.lower()
        dependencies.update(fw for fw in _SETUP_FRAMEWORKS if re.search(rf"""['"\s]{fw}\b""", lower))
    elif name.startswith("requirements") and name.endswith(".txt"):
        dependencies.update(_requirements_txt(text))
    elif name.endswith(".info.yml"):
        markers.update(_info_yml(text))


def _is_manifest(path: Path) -> bool:
    name = path.name
    return (
        name in MANIFEST_NAMES
        or name.endswith(".info.yml")
        or (name.startswith("requirements") and name.endswith(".txt"))
    )


def detect_features(
    root: str | Path,
    is_ignored: Callable[[Path], bool] | None = None,
    max_depth: int = DEFAULT_SCAN_DEPTH,
) -> ProjectFeatures:
    """Walk ``root`` once (depth-bounded) and record manifests, dependencies and markers."""
    root_path = Path(root)
    if not root_path.is_dir():
        raise RepositoryNotFoundError(str(root))
    root_path = root_path.resolve()
    predicate = is_ignored if is_ignored is not None else IgnoreRules.for_root(root_path)

    manifests: set[str] = set()
    dependencies: set[str] = set()
    markers: set[str] = set()
    languages: set[Language] = set()
    drupal_modules: set[str] = set()

    for path in walk_files(root_path, predicate, max_depth=max_depth):
        language = language_from_extension(path)
        if language is not Language.UNKNOWN:
            languages.add(language)
        if not _is_manifest(path):
            continue
        if path.name.endswith(".info.yml"):
            manifests.add("*.info.yml")
            drupal_modules.add(path.name.removesuffix(".info.yml").lower())
        else:
            manifests.add(path.name)
        try:
            _read_manifest(path, dependencies, markers)
        except (OSError, ValueError, TypeError, AttributeError, yaml.YAMLError) as e:
            # json and tomllib decode errors are ValueError subclasses; the rest cover odd shapes
            logger.warning("Cannot read manifest %s: %s", path, e)

    features = ProjectFeatures(
        root=str(root_path),
        manifests=frozenset(manifests),
        dependencies=frozenset(dependencies),
        markers=frozenset(markers),
        source_languages=frozenset(languages),
        drupal_modules=frozenset(drupal_modules),
    )
    logger.info(
        "Detected features for %s: manifests=%s markers=%s",
        root_path,
        sorted(features.manifests),
        sorted(features.markers),
    )
    return features
