from code_assist.models import Framework, Language, ProjectFeatures, ProjectKind, ProjectType

_DRUPAL_MARKERS = ("drupal_module", "drupal_theme", "drupal_profile", "drupal_core")
_PYTHON_MANIFESTS = ("pyproject.toml", "setup.py", "setup.cfg", "Pipfile", "requirements.txt", "manage.py")

# Source-file fallback when no manifest says anything.
_LANGUAGE_FALLBACK = (
    (Language.PHP, ProjectKind.PHP),
    (Language.RUST, ProjectKind.RUST),
    (Language.GO, ProjectKind.GO),
    (Language.PYTHON, ProjectKind.PYTHON),
    (Language.TYPESCRIPT, ProjectKind.TYPESCRIPT),
    (Language.JAVASCRIPT, ProjectKind.JAVASCRIPT),
)


def _script_kind(features: ProjectFeatures) -> ProjectKind:
    if features.has_any("tsconfig.json", "typescript"):
        return ProjectKind.TYPESCRIPT
    return ProjectKind.JAVASCRIPT


def _has_python_manifest(features: ProjectFeatures) -> bool:
    if features.has_any(*_PYTHON_MANIFESTS):
        return True
    return any(name.startswith("requirements") and name.endswith(".txt") for name in features.manifests)


def classify(features: ProjectFeatures) -> ProjectType:
    """Pick the single project type for a feature set.

    Framework-specific markers outrank generic language markers; the checks
    below run in precedence order and the first hit wins.
    """
    if features.has_any(*_DRUPAL_MARKERS):
        return ProjectType(kind=ProjectKind.PHP, drupal=True)

    if features.has_any("angular.json", "@angular/core"):
        return ProjectType(kind=ProjectKind.TYPESCRIPT, framework=Framework.ANGULAR)
    if features.has_any("next", "next.config.js", "next.config.mjs"):
        return ProjectType(kind=_script_kind(features), framework=Framework.NEXTJS)
    if features.has("react"):
        return ProjectType(kind=_script_kind(features), framework=Framework.REACT)

    if features.has_any("django", "manage.py"):
        return ProjectType(kind=ProjectKind.PYTHON, framework=Framework.DJANGO)
    if features.has("fastapi"):
        return ProjectType(kind=ProjectKind.PYTHON, framework=Framework.FASTAPI)
    if features.has("flask"):
        return ProjectType(kind=ProjectKind.PYTHON, framework=Framework.FLASK)

    if features.has("Cargo.toml"):
        return ProjectType(kind=ProjectKind.RUST)
    if features.has("go.mod"):
        return ProjectType(kind=ProjectKind.GO)
    if _has_python_manifest(features):
        return ProjectType(kind=ProjectKind.PYTHON)
    if features.has("composer.json"):
        return ProjectType(kind=ProjectKind.PHP)
    if features.has_any("tsconfig.json", "package.json"):
        return ProjectType(kind=_script_kind(features))

    for language, kind in _LANGUAGE_FALLBACK:
        if language in features.source_languages:
            return ProjectType(kind=kind)
    return ProjectType(kind=ProjectKind.GENERIC)
