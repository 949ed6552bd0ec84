"""Unit tests for the JavaScript/TypeScript scanner."""

from code_assist.core.analyzers.javascript import analyze_script
from code_assist.models import Language, SymbolKind

COMPONENTS = """import React, { useState } from 'react';
import './styles.css';
const api = require('./api');

export function Button({ label }) {
  return <button>{label}</button>;
}

export const Card = ({ title }) => {
  const [open, setOpen] = useState(false);
  return (
    <div className="card">{title}</div>
  );
};

export function useToggle(initial) {
  const [on, setOn] = useState(initial);
  return [on, () => setOn(!on)];
}

const formatDate = (d) => d.toISOString();

export default function () {
  return null;
}

class Legacy extends React.Component {
  render() {
    return <p>legacy</p>;
  }
}
"""

TYPESCRIPT = """import { Injectable } from '@angular/core';

export interface User {
  id: number;
  name: string;
}

export type UserId = number;

export enum Role {
  Admin,
  Member,
}

@Injectable({ providedIn: 'root' })
export class UserService {
  private cache = new Map<number, User>();

  constructor(private http: HttpClient) {}

  async load(id: UserId): Promise<User> {
    if (this.cache.has(id)) {
      return this.cache.get(id)!;
    }
    return this.http.get(`/users/${id}`);
  }

  handle = (event: Event) => {
    console.log(event);
  };
}
"""


def _symbols(
    source: str, language: Language = Language.JAVASCRIPT
) -> dict[str, tuple[SymbolKind, int, int, str | None]]:
    result = analyze_script(source, language)
    return {s.name: (s.kind, s.start_line, s.end_line, s.parent) for s in result.symbols}


class TestReactComponents:
    def test_imports_include_require(self) -> None:
        result = analyze_script(COMPONENTS, Language.JAVASCRIPT)
        assert result.imports == ["react", "./styles.css", "./api"]

    def test_function_returning_jsx_is_component(self) -> None:
        assert _symbols(COMPONENTS)["Button"] == (SymbolKind.COMPONENT, 5, 7, None)

    def test_arrow_component(self) -> None:
        assert _symbols(COMPONENTS)["Card"] == (SymbolKind.COMPONENT, 9, 14, None)

    def test_hook_naming(self) -> None:
        assert _symbols(COMPONENTS)["useToggle"] == (SymbolKind.HOOK, 16, 19, None)

    def test_plain_arrow_function(self) -> None:
        assert _symbols(COMPONENTS)["formatDate"] == (SymbolKind.FUNCTION, 21, 21, None)

    def test_anonymous_default_export(self) -> None:
        assert _symbols(COMPONENTS)["default"] == (SymbolKind.FUNCTION, 23, 25, None)

    def test_class_component_and_method(self) -> None:
        symbols = _symbols(COMPONENTS)
        assert symbols["Legacy"] == (SymbolKind.COMPONENT, 27, 31, None)
        assert symbols["render"] == (SymbolKind.METHOD, 28, 30, "Legacy")

    def test_local_bindings_are_not_symbols(self) -> None:
        names = set(_symbols(COMPONENTS))
        assert "open" not in names
        assert "on" not in names


class TestTypeScript:
    def test_interface_type_enum(self) -> None:
        symbols = _symbols(TYPESCRIPT, Language.TYPESCRIPT)
        assert symbols["User"] == (SymbolKind.INTERFACE, 3, 6, None)
        assert symbols["UserId"] == (SymbolKind.TYPE, 8, 8, None)
        assert symbols["Role"] == (SymbolKind.TYPE, 10, 13, None)

    def test_angular_service(self) -> None:
        symbols = _symbols(TYPESCRIPT, Language.TYPESCRIPT)
        assert symbols["UserService"] == (SymbolKind.SERVICE, 16, 31, None)

    def test_class_members(self) -> None:
        symbols = _symbols(TYPESCRIPT, Language.TYPESCRIPT)
        assert symbols["constructor"] == (SymbolKind.METHOD, 19, 19, "UserService")
        assert symbols["load"] == (SymbolKind.METHOD, 21, 26, "UserService")
        assert symbols["handle"] == (SymbolKind.METHOD, 28, 30, "UserService")
        assert "if" not in symbols

    def test_language_is_preserved(self) -> None:
        assert analyze_script(TYPESCRIPT, Language.TYPESCRIPT).language is Language.TYPESCRIPT


class TestRoutes:
    def test_express_routes(self) -> None:
        source = "app.get('/health', (req, res) => res.send('ok'));\nrouter.post(\"/users\", create);\n"
        result = analyze_script(source, Language.JAVASCRIPT)
        assert [(s.name, s.kind) for s in result.symbols] == [
            ("GET /health", SymbolKind.HINT),
            ("POST /users", SymbolKind.HINT),
        ]

    def test_apostrophe_in_jsx_text_does_not_swallow_braces(self) -> None:
        source = "function Note() {\n  return <p>Don't panic</p>;\n}\nfunction Other() {\n  return 1;\n}\n"
        symbols = _symbols(source)
        assert symbols["Note"] == (SymbolKind.COMPONENT, 1, 3, None)
        assert symbols["Other"] == (SymbolKind.FUNCTION, 4, 6, None)
