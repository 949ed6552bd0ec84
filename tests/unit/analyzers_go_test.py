"""Unit tests for the Go scanner."""

from code_assist.core.analyzers.golang import analyze_go
from code_assist.models import SymbolKind

SOURCE = """package server

import (
	"fmt"
	h "net/http"
)

import "strings"

type Handler interface {
	Serve(w h.ResponseWriter)
}

type (
	ID   int64
	User struct {
		Name string
	}
)

type Store[T any] struct {
	items []T
}

func (s *Store[T]) Add(item T) {
	s.items = append(s.items, item)
}

func NewServer() *h.ServeMux {
	mux := h.NewServeMux()
	mux.HandleFunc("/health", func(w h.ResponseWriter, r *h.Request) {
		fmt.Fprint(w, strings.ToUpper("ok"))
	})
	return mux
}

const raw = `{ not a brace`
"""


def _symbols() -> dict[str, tuple[SymbolKind, int, int, str | None]]:
    return {s.name: (s.kind, s.start_line, s.end_line, s.parent) for s in analyze_go(SOURCE).symbols}


class TestGoDeclarations:
    def test_package(self) -> None:
        assert _symbols()["server"] == (SymbolKind.MODULE, 1, 1, None)

    def test_grouped_and_single_imports(self) -> None:
        assert analyze_go(SOURCE).imports == ["fmt", "net/http", "strings"]

    def test_interface(self) -> None:
        assert _symbols()["Handler"] == (SymbolKind.INTERFACE, 10, 12, None)

    def test_type_group(self) -> None:
        symbols = _symbols()
        assert symbols["ID"] == (SymbolKind.TYPE, 15, 15, None)
        assert symbols["User"] == (SymbolKind.TYPE, 16, 18, None)

    def test_generic_receiver_method(self) -> None:
        symbols = _symbols()
        assert symbols["Store"] == (SymbolKind.TYPE, 21, 23, None)
        assert symbols["Add"] == (SymbolKind.METHOD, 25, 27, "Store")

    def test_function_and_route_hint(self) -> None:
        symbols = _symbols()
        assert symbols["NewServer"] == (SymbolKind.FUNCTION, 29, 35, None)
        assert symbols["HANDLE /health"][:2] == (SymbolKind.HINT, 31)

    def test_raw_string_braces_ignored(self) -> None:
        assert analyze_go(SOURCE).parse_errors == []


class TestGoDegradation:
    def test_unterminated_type_group(self) -> None:
        result = analyze_go("package x\n\ntype (\n\tA int\n")
        assert "unterminated type group starting at line 3" in result.parse_errors
        assert [s.name for s in result.symbols] == ["x", "A"]
