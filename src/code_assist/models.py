from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Language(str, Enum):
    RUST = "rust"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PHP = "php"
    GO = "go"
    UNKNOWN = "unknown"


class Signature(str, Enum):
    """Lightweight content markers shared by the parser and the search scorer."""

    IMPORTS = "imports"
    JSX = "jsx"
    REACT = "react"
    ANGULAR = "angular"
    NEXTJS = "nextjs"
    DJANGO = "django"
    FLASK = "flask"
    FASTAPI = "fastapi"
    DRUPAL = "drupal"
    DRUPAL_INFO = "drupal_info"
    DRUPAL_SERVICES = "drupal_services"
    DRUPAL_TEMPLATE = "drupal_template"


class SymbolKind(str, Enum):
    MODULE = "module"
    TYPE = "type"
    FUNCTION = "function"
    METHOD = "method"
    COMPONENT = "component"
    HOOK = "hook"
    INTERFACE = "interface"
    SERVICE = "service"
    HINT = "hint"


class Symbol(BaseModel):
    name: str
    kind: SymbolKind
    start_line: int = Field(ge=1)
    end_line: int = Field(ge=1)
    parent: str | None = None

    @model_validator(mode="after")
    def _check_span(self) -> "Symbol":
        if self.end_line < self.start_line:
            raise ValueError(f"end_line {self.end_line} precedes start_line {self.start_line} for {self.name!r}")
        return self


class ParseResult(BaseModel):
    file_path: str | None = None
    language: Language
    line_count: int = 0
    symbols: list[Symbol] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)
    parse_errors: list[str] = Field(default_factory=list)


class ProjectFeatures(BaseModel):
    """What a single bounded walk of the repository root found.

    Immutable once built; a session replaces it wholesale on refresh.
    """

    model_config = ConfigDict(frozen=True)

    root: str
    manifests: frozenset[str] = frozenset()
    dependencies: frozenset[str] = frozenset()
    markers: frozenset[str] = frozenset()
    source_languages: frozenset[Language] = frozenset()
    # machine names of the Drupal extensions declared by *.info.yml files
    drupal_modules: frozenset[str] = frozenset()

    def has(self, name: str) -> bool:
        return name in self.manifests or name in self.dependencies or name in self.markers

    def has_any(self, *names: str) -> bool:
        return any(self.has(name) for name in names)


class ProjectKind(str, Enum):
    RUST = "rust"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PHP = "php"
    GO = "go"
    GENERIC = "generic"


class Framework(str, Enum):
    DJANGO = "django"
    FLASK = "flask"
    FASTAPI = "fastapi"
    REACT = "react"
    ANGULAR = "angular"
    NEXTJS = "nextjs"


_PYTHON_FRAMEWORKS = frozenset({Framework.DJANGO, Framework.FLASK, Framework.FASTAPI})
_SCRIPT_FRAMEWORKS = frozenset({Framework.REACT, Framework.ANGULAR, Framework.NEXTJS})

_KIND_LANGUAGE = {
    ProjectKind.RUST: Language.RUST,
    ProjectKind.PYTHON: Language.PYTHON,
    ProjectKind.JAVASCRIPT: Language.JAVASCRIPT,
    ProjectKind.TYPESCRIPT: Language.TYPESCRIPT,
    ProjectKind.PHP: Language.PHP,
    ProjectKind.GO: Language.GO,
    ProjectKind.GENERIC: Language.UNKNOWN,
}

_KIND_LABELS = {
    ProjectKind.RUST: "Rust",
    ProjectKind.PYTHON: "Python",
    ProjectKind.JAVASCRIPT: "JavaScript",
    ProjectKind.TYPESCRIPT: "TypeScript",
    ProjectKind.PHP: "PHP",
    ProjectKind.GO: "Go",
    ProjectKind.GENERIC: "Generic",
}

_FRAMEWORK_LABELS = {
    Framework.DJANGO: "Django",
    Framework.FLASK: "Flask",
    Framework.FASTAPI: "FastAPI",
    Framework.REACT: "React",
    Framework.ANGULAR: "Angular",
    Framework.NEXTJS: "Next.js",
}


class ProjectType(BaseModel):
    """The one active project variant for a repository snapshot.

    Only Python carries a Python framework, only JavaScript/TypeScript carry a
    script framework and only PHP carries the Drupal flag.
    """

    model_config = ConfigDict(frozen=True)

    kind: ProjectKind
    framework: Framework | None = None
    drupal: bool = False

    @model_validator(mode="after")
    def _check_variant(self) -> "ProjectType":
        if self.framework is not None:
            allowed = (
                _PYTHON_FRAMEWORKS
                if self.kind is ProjectKind.PYTHON
                else _SCRIPT_FRAMEWORKS
                if self.kind in (ProjectKind.JAVASCRIPT, ProjectKind.TYPESCRIPT)
                else frozenset()
            )
            if self.framework not in allowed:
                raise ValueError(f"Framework {self.framework.value} is not valid for {self.kind.value} projects")
        if self.drupal and self.kind is not ProjectKind.PHP:
            raise ValueError("Only PHP projects can be Drupal projects")
        return self

    @property
    def primary_language(self) -> Language:
        return _KIND_LANGUAGE[self.kind]

    @property
    def label(self) -> str:
        label = _KIND_LABELS[self.kind]
        if self.drupal:
            return f"{label} (Drupal)"
        if self.framework is not None:
            return f"{label} ({_FRAMEWORK_LABELS[self.framework]})"
        return label


class SearchHit(BaseModel):
    file_path: str
    language: Language = Language.UNKNOWN
    score: float = Field(ge=0)
    matched_lines: list[tuple[int, str]] = Field(default_factory=list)


class LineMatch(BaseModel):
    file_path: str
    line_number: int
    line: str


class DiagnosticKind(str, Enum):
    IO = "io"
    ENCODING = "encoding"
    TOO_LARGE = "too_large"
    PARSE = "parse"


class Diagnostic(BaseModel):
    path: str
    kind: DiagnosticKind
    message: str


class ContextPackage(BaseModel):
    root: str
    query: str
    project_type: ProjectType
    ranked_files: list[SearchHit] = Field(default_factory=list)
    parsed_summaries: dict[str, ParseResult] = Field(default_factory=dict)
    total_size_bytes: int = 0
    budget_bytes: int
    # False only when the budget is too small for even the header line
    header_included: bool = True
    diagnostics: list[Diagnostic] = Field(default_factory=list)


class ProjectStructure(BaseModel):
    root: str
    directories: list[str] = Field(default_factory=list)
    files_by_extension: dict[str, list[str]] = Field(default_factory=dict)
