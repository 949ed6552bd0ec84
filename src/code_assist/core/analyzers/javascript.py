import re
from dataclasses import dataclass

from code_assist.core.analyzers.scan import (
    HEADER_LOOKAHEAD,
    BlockEnd,
    LineInfo,
    SymbolCollector,
    block_end,
    is_pascal_case,
    scan_braces,
    split_lines,
)
from code_assist.core.languages import has_jsx
from code_assist.models import Language, ParseResult, SymbolKind

_EXPORT = r"(?:export\s+(?:default\s+)?)?(?:declare\s+)?"
_IDENT = r"[A-Za-z_$][\w$]*"

_CLASS = re.compile(rf"^\s*{_EXPORT}(?:abstract\s+)?class\s+(?P<name>{_IDENT})(?P<rest>.*)$")
_FUNCTION = re.compile(rf"^\s*{_EXPORT}(?:async\s+)?function\s*\*?\s*(?P<name>{_IDENT})?\s*(?:<[^>]*>)?\s*\(")
_BINDING = re.compile(rf"^\s*{_EXPORT}(?:const|let|var)\s+(?P<name>{_IDENT})\s*(?::\s*[^=]+?)?=(?!=)\s*(?P<rhs>.*)$")
_ARROW_RHS = re.compile(rf"^(?:async\s+)?(?:<[^>]*>\s*)?(?:\((?P<params>[\s\S]*?)\)|{_IDENT})\s*(?::\s*[^=]+?)?=>")
_FUNCTION_RHS = re.compile(r"^(?:async\s+)?function\b")
_WRAPPER_RHS = re.compile(r"^(?:React\.)?(?:memo|forwardRef)\s*(?:<[^>]*>)?\(")
_INTERFACE = re.compile(rf"^\s*{_EXPORT}interface\s+(?P<name>{_IDENT})")
_TYPE_ALIAS = re.compile(rf"^\s*{_EXPORT}type\s+(?P<name>{_IDENT})\s*(?:<[^>]*>)?\s*=")
_ENUM = re.compile(rf"^\s*{_EXPORT}(?:const\s+)?enum\s+(?P<name>{_IDENT})")
_NAMESPACE = re.compile(rf"""^\s*{_EXPORT}(?:namespace|module)\s+(?P<name>[\w.$]+|['"][^'"]+['"])\s*\{{""")
_DECORATOR = re.compile(r"^\s*@(?P<name>Component|Injectable|NgModule|Directive|Pipe)\s*\(")
_METHOD = re.compile(
    r"^\s*(?:(?:public|private|protected|static|async|readonly|override|abstract|get|set)\s+)*"
    rf"(?P<name>#?{_IDENT})\s*(?:<[^>]*>)?\s*\([^)]*\)?\s*(?::\s*[^{{;=]+)?(?:\{{\s*\}}?)?\s*$"
)
_PROPERTY_ARROW = re.compile(
    r"^\s*(?:(?:public|private|protected|static|readonly)\s+)*"
    rf"(?P<name>#?{_IDENT})\s*(?::\s*[^=]+?)?=\s*(?:async\s+)?(?:\([^)]*\)|{_IDENT})\s*(?::\s*[^=]+?)?=>"
)
_ROUTE = re.compile(r"""^\s*(?:app|router|server|api|route)\.(?P<verb>get|post|put|patch|delete|all)\(\s*(?P<q>['"`])(?P<path>[^'"`]*)(?P=q)""")
_IMPORT_FROM = re.compile(r"""^\s*(?:import|export|\})\b.*?\bfrom\s+['"](?P<module>[^'"]+)['"]""")
_IMPORT_BARE = re.compile(r"""^\s*import\s+['"](?P<module>[^'"]+)['"]""")
_REQUIRE = re.compile(r"""\brequire\(\s*['"](?P<module>[^'"]+)['"]\s*\)""")

_NOT_METHODS = frozenset({"if", "for", "while", "switch", "catch", "return", "function", "with", "else", "do", "super"})
_HOOK_NAME = re.compile(r"^use[A-Z0-9]")
_CLASS_COMPONENT = re.compile(r"\bextends\s+(?:React\.)?(?:Pure)?Component\b")

_DECORATOR_KINDS = {
    "Component": SymbolKind.COMPONENT,
    "Injectable": SymbolKind.SERVICE,
    "NgModule": SymbolKind.MODULE,
    "Directive": SymbolKind.TYPE,
    "Pipe": SymbolKind.TYPE,
}


@dataclass
class _ClassScope:
    name: str
    end: int
    body_depth: int


def _brace_end_from(infos: list[LineInfo], start: int, base: int) -> BlockEnd:
    for j in range(start, min(len(infos), start + HEADER_LOOKAHEAD)):
        if infos[j].peak > base:
            for k in range(j, len(infos)):
                if infos[k].after <= base:
                    return BlockEnd(k)
            return BlockEnd(len(infos) - 1, terminated=False)
    return BlockEnd(start)


def _paren_end_from(infos: list[LineInfo], start: int, base: int) -> BlockEnd:
    for k in range(start, len(infos)):
        if infos[k].paren_after <= base and infos[k].after <= infos[start].before:
            return BlockEnd(k)
    return BlockEnd(len(infos) - 1, terminated=False)


def _header(infos: list[LineInfo], index: int, first: str) -> tuple[str, int]:
    """Join a declaration's right-hand side with following lines until its parameter list closes."""
    parts = [first]
    last = index
    base = infos[index].paren_before
    while infos[last].paren_after > base and last + 1 < min(len(infos), index + HEADER_LOOKAHEAD):
        last += 1
        parts.append(infos[last].code)
    return "\n".join(parts), last


def _binding_end(infos: list[LineInfo], index: int, rhs: str) -> tuple[bool, BlockEnd]:
    """Return (is_function, end) for ``const name = rhs``."""
    base_braces = infos[index].before
    base_parens = infos[index].paren_before
    if _WRAPPER_RHS.match(rhs):
        return True, _paren_end_from(infos, index, base_parens)
    if _FUNCTION_RHS.match(rhs):
        return True, _brace_end_from(infos, index, base_braces)

    header, header_last = _header(infos, index, rhs)
    arrow = _ARROW_RHS.match(header)
    if not arrow:
        return False, BlockEnd(index)

    body = header[arrow.end() :].strip()
    arrow_line = header_last if "=>" not in rhs else index
    if not body and arrow_line + 1 < len(infos):
        body = infos[arrow_line + 1].code.strip()
    if body.startswith("{"):
        return True, _brace_end_from(infos, arrow_line, base_braces)
    return True, _paren_end_from(infos, arrow_line, base_parens)


def _classify_callable(name: str, lines: list[str], start: int, end: int) -> SymbolKind:
    if _HOOK_NAME.match(name):
        return SymbolKind.HOOK
    if is_pascal_case(name) and has_jsx("\n".join(lines[start : end + 1])):
        return SymbolKind.COMPONENT
    return SymbolKind.FUNCTION


def _collect_imports(out: SymbolCollector, code: str) -> None:
    if m := _IMPORT_FROM.match(code):
        out.add_import(m.group("module"))
    elif m := _IMPORT_BARE.match(code):
        out.add_import(m.group("module"))
    for m in _REQUIRE.finditer(code):
        out.add_import(m.group("module"))


def analyze_script(text: str, language: Language, file_path: str | None = None) -> ParseResult:
    """Analyze JavaScript or TypeScript source; TypeScript-only forms simply never match in JS."""
    lines = split_lines(text)
    infos = scan_braces(lines, backtick_strings=True)
    out = SymbolCollector(line_count=len(lines))
    classes: list[_ClassScope] = []
    pending_decorator: SymbolKind | None = None

    for index, info in enumerate(infos):
        code = info.code
        if not code.strip():
            continue
        while classes and classes[-1].end < index:
            classes.pop()
        scope = classes[-1] if classes else None

        _collect_imports(out, code)

        if m := _DECORATOR.match(code):
            pending_decorator = _DECORATOR_KINDS[m.group("name")]
            continue

        if m := _CLASS.match(code):
            name = m.group("name")
            end = block_end(infos, index)
            if pending_decorator is not None:
                kind = pending_decorator
            elif _CLASS_COMPONENT.search(m.group("rest")):
                kind = SymbolKind.COMPONENT
            else:
                kind = SymbolKind.TYPE
            pending_decorator = None
            out.add(name, kind, index, end)
            classes.append(_ClassScope(name=name, end=end.index, body_depth=info.before + 1))
            continue

        if scope is not None and info.before == scope.body_depth:
            if (m := _PROPERTY_ARROW.match(code)) or (
                (m := _METHOD.match(code)) and m.group("name") not in _NOT_METHODS
            ):
                out.add(m.group("name"), SymbolKind.METHOD, index, block_end(infos, index), parent=scope.name)
            continue

        if m := _FUNCTION.match(code):
            name = m.group("name") or "default"
            end = block_end(infos, index)
            out.add(name, _classify_callable(name, lines, index, end.index), index, end)
            continue

        # local helpers inside function bodies are not part of the file's outline
        if info.before == 0 and (m := _BINDING.match(code)):
            name = m.group("name")
            is_function, end = _binding_end(infos, index, m.group("rhs"))
            if is_function:
                out.add(name, _classify_callable(name, lines, index, end.index), index, end)
            continue

        if m := _INTERFACE.match(code):
            out.add(m.group("name"), SymbolKind.INTERFACE, index, block_end(infos, index))
            continue
        if m := _TYPE_ALIAS.match(code):
            alias_end: BlockEnd | int = block_end(infos, index) if "{" in code else index
            out.add(m.group("name"), SymbolKind.TYPE, index, alias_end)
            continue
        if m := _ENUM.match(code):
            out.add(m.group("name"), SymbolKind.TYPE, index, block_end(infos, index))
            continue
        if m := _NAMESPACE.match(code):
            out.add(m.group("name").strip("'\""), SymbolKind.MODULE, index, block_end(infos, index))
            continue
        if m := _ROUTE.match(code):
            out.add(f"{m.group('verb').upper()} {m.group('path')}", SymbolKind.HINT, index)

    return out.result(language, file_path)
