"""Unit tests for the indentation-based Python scanner."""

from code_assist.core.analyzers.python import analyze_python
from code_assist.models import SymbolKind

SOURCE = '''import os, sys as system
from fastapi import APIRouter

router = APIRouter()


class UserService:
    """Manage users.

    def not_a_method(self): inside a docstring
    """

    def create(self, name):
        return name

    async def delete(
        self,
        user_id,
    ):
        pass


@router.get("/users/{user_id}")
def read_user(user_id: int):
    def helper():
        return user_id
    return helper()


@app.route("/login", methods=["GET", "POST"])
def login():
    pass
'''


def _spans() -> list[tuple[str, SymbolKind, int, int, str | None]]:
    result = analyze_python(SOURCE)
    return [(s.name, s.kind, s.start_line, s.end_line, s.parent) for s in result.symbols]


class TestPythonDeclarations:
    def test_imports(self) -> None:
        result = analyze_python(SOURCE)
        assert result.imports == ["os", "sys", "fastapi"]

    def test_class_and_methods(self) -> None:
        spans = _spans()
        assert ("UserService", SymbolKind.TYPE, 7, 20, None) in spans
        assert ("create", SymbolKind.METHOD, 13, 14, "UserService") in spans
        assert ("delete", SymbolKind.METHOD, 16, 20, "UserService") in spans

    def test_docstring_content_is_not_parsed(self) -> None:
        assert all(name != "not_a_method" for name, *_ in _spans())

    def test_route_decorators_become_hints(self) -> None:
        spans = _spans()
        assert ("GET /users/{user_id}", SymbolKind.HINT, 23, 23, None) in spans
        assert ("GET|POST /login", SymbolKind.HINT, 30, 30, None) in spans

    def test_nested_function_has_parent(self) -> None:
        spans = _spans()
        assert ("read_user", SymbolKind.FUNCTION, 24, 27, None) in spans
        assert ("helper", SymbolKind.FUNCTION, 25, 26, "read_user") in spans

    def test_symbols_in_file_order(self) -> None:
        starts = [start for _, _, start, _, _ in _spans()]
        assert starts == sorted(starts)


class TestPythonDegradation:
    def test_unterminated_docstring(self) -> None:
        result = analyze_python('def f():\n    """never closed\n    return 1\n')
        assert [s.name for s in result.symbols] == ["f"]
        assert "unterminated triple-quoted string at end of file" in result.parse_errors

    def test_unclosed_bracket(self) -> None:
        result = analyze_python("x = [\n    1,\n")
        assert result.parse_errors == ["unclosed bracket at end of file"]

    def test_django_urlpatterns(self) -> None:
        source = "urlpatterns = [\n    path('articles/', views.index),\n    re_path(r'^old/$', views.old),\n]\n"
        result = analyze_python(source)
        hints = [(s.name, s.kind, s.start_line) for s in result.symbols]
        assert hints == [("url articles/", SymbolKind.HINT, 2), ("url ^old/$", SymbolKind.HINT, 3)]
