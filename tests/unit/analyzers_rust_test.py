"""Unit tests for the Rust line scanner."""

from code_assist.core.analyzers.rust import analyze_rust
from code_assist.models import Language, SymbolKind

SOURCE = """use std::fmt;
use crate::db::{Pool, Conn};

pub mod handlers;

/// A user account.
pub struct User {
    name: String,
}

pub enum Role { Admin, Member }

pub trait Greeter {
    fn greet(&self) -> String;
}

impl fmt::Display for User {
    fn fmt(&self, f: &mut fmt::Formatter<'_>) -> fmt::Result {
        write!(f, "{}", self.name)
    }
}

impl<'a> User {
    pub fn new(name: &'a str) -> Self {
        let brace = '{';
        User { name: name.to_string() }
    }
}

pub async fn reset_password(
    user: &User,
) -> Result<(), String> {
    Ok(())
}

macro_rules! log {
    ($x:expr) => { println!("{}", $x) };
}
"""


def _by_name(source: str) -> dict[str, tuple[SymbolKind, int, int, str | None]]:
    result = analyze_rust(source)
    return {s.name: (s.kind, s.start_line, s.end_line, s.parent) for s in result.symbols}


class TestRustDeclarations:
    def test_language_and_imports(self) -> None:
        result = analyze_rust(SOURCE, "src/lib.rs")
        assert result.language is Language.RUST
        assert result.file_path == "src/lib.rs"
        assert result.imports == ["std::fmt", "crate::db::{Pool, Conn}"]

    def test_module_declaration(self) -> None:
        symbols = _by_name(SOURCE)
        assert symbols["handlers"] == (SymbolKind.MODULE, 4, 4, None)

    def test_struct_and_enum(self) -> None:
        symbols = _by_name(SOURCE)
        assert symbols["User"][:3] == (SymbolKind.TYPE, 7, 9)
        assert symbols["Role"][:3] == (SymbolKind.TYPE, 11, 11)

    def test_trait_methods_have_parent(self) -> None:
        symbols = _by_name(SOURCE)
        assert symbols["Greeter"][:3] == (SymbolKind.INTERFACE, 13, 15)
        assert symbols["greet"] == (SymbolKind.METHOD, 14, 14, "Greeter")

    def test_trait_impl_is_hint_and_methods_attach_to_type(self) -> None:
        symbols = _by_name(SOURCE)
        assert symbols["impl fmt::Display for User"][:3] == (SymbolKind.HINT, 17, 21)
        assert symbols["fmt"] == (SymbolKind.METHOD, 18, 20, "User")

    def test_char_literal_braces_do_not_break_spans(self) -> None:
        symbols = _by_name(SOURCE)
        assert symbols["new"] == (SymbolKind.METHOD, 24, 27, "User")

    def test_multiline_signature_function(self) -> None:
        symbols = _by_name(SOURCE)
        assert symbols["reset_password"] == (SymbolKind.FUNCTION, 30, 34, None)

    def test_macro_rules_hint(self) -> None:
        symbols = _by_name(SOURCE)
        assert symbols["log!"][:3] == (SymbolKind.HINT, 36, 38)


class TestRustDegradation:
    def test_unterminated_block_is_recorded(self) -> None:
        result = analyze_rust("fn broken() {\n    let x = 1;\n")
        assert [s.name for s in result.symbols] == ["broken"]
        assert result.symbols[0].end_line == 2
        assert result.parse_errors == ["unterminated block for 'broken' starting at line 1"]

    def test_commented_out_braces_are_ignored(self) -> None:
        result = analyze_rust("fn a() {\n    // }\n    /* { */\n}\nfn b() {}\n")
        spans = [(s.name, s.start_line, s.end_line) for s in result.symbols]
        assert spans == [("a", 1, 4), ("b", 5, 5)]
