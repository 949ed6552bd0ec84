import re
from dataclasses import dataclass

from code_assist.core.analyzers.scan import SymbolCollector, indent_width, split_lines
from code_assist.models import Language, ParseResult, SymbolKind

_CLASS = re.compile(r"^\s*class\s+(?P<name>\w+)")
_DEF = re.compile(r"^\s*(?:async\s+)?def\s+(?P<name>\w+)")
_ROUTE = re.compile(
    r"""^\s*@(?P<obj>[\w.]+)\.(?P<verb>route|get|post|put|patch|delete|head|options|websocket|api_route)"""
    r"""\(\s*(?P<q>['"])(?P<path>[^'"]*)(?P=q)(?P<rest>.*)"""
)
_METHODS = re.compile(r"methods\s*=\s*[\[(](?P<verbs>[^\])]*)[\])]")
_URL = re.compile(r"""^\s*(?:re_)?path\(\s*r?(?P<q>['"])(?P<path>[^'"]*)(?P=q)""")
_IMPORT = re.compile(r"^\s*import\s+(?P<names>.+)$")
_FROM = re.compile(r"^\s*from\s+(?P<module>[\w.]+)\s+import\b")


@dataclass(frozen=True)
class _Line:
    significant: bool
    indent: int
    # open brackets remaining after the line; > 0 means the statement continues
    depth_after: int
    in_string: bool = False


def _scan(lines: list[str]) -> tuple[list[_Line], bool]:
    """Classify each line as a statement start or not, tracking brackets and triple-quoted strings."""
    result: list[_Line] = []
    depth = 0
    triple: str | None = None

    for line in lines:
        stripped = line.strip()
        in_string = triple is not None
        significant = not in_string and depth == 0 and bool(stripped) and not stripped.startswith("#")
        indent = indent_width(line)

        i = 0
        n = len(line)
        quote: str | None = None
        while i < n:
            if triple is not None:
                if line.startswith(triple, i):
                    triple = None
                    i += 3
                else:
                    i += 2 if line[i] == "\\" else 1
                continue
            ch = line[i]
            if quote is not None:
                if ch == "\\":
                    i += 2
                    continue
                if ch == quote:
                    quote = None
                i += 1
                continue
            if ch == "#":
                break
            if line.startswith('"""', i) or line.startswith("'''", i):
                triple = line[i : i + 3]
                i += 3
                continue
            if ch in "\"'":
                quote = ch
            elif ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth = max(0, depth - 1)
            i += 1

        result.append(_Line(significant=significant, indent=indent, depth_after=depth, in_string=in_string))
    return result, triple is not None


def _block_end(lines: list[str], scanned: list[_Line], index: int) -> int:
    header_end = index
    while header_end < len(scanned) - 1 and scanned[header_end].depth_after > 0:
        header_end += 1

    indent = scanned[index].indent
    end = header_end
    for k in range(header_end + 1, len(scanned)):
        info = scanned[k]
        if info.significant and info.indent <= indent:
            break
        stripped = lines[k].strip()
        if stripped and not stripped.startswith("#"):
            end = k
    return end


def _route_label(match: re.Match[str]) -> str:
    verb = match.group("verb")
    path = match.group("path")
    if verb in ("route", "api_route"):
        methods = _METHODS.search(match.group("rest"))
        if methods:
            verbs = [v.strip(" '\"").upper() for v in methods.group("verbs").split(",") if v.strip(" '\"")]
            return f"{'|'.join(verbs)} {path}"
        return f"GET {path}"
    return f"{verb.upper()} {path}"


def analyze_python(text: str, file_path: str | None = None) -> ParseResult:
    lines = split_lines(text)
    scanned, unterminated_string = _scan(lines)
    out = SymbolCollector(line_count=len(lines))
    # (indent, name, kind) of enclosing class/def blocks
    stack: list[tuple[int, str, SymbolKind]] = []

    for index, line in enumerate(lines):
        info = scanned[index]
        if not info.significant:
            # urlpatterns entries sit inside the list literal
            if not info.in_string and (m := _URL.match(line)):
                out.add(f"url {m.group('path')}", SymbolKind.HINT, index)
            continue
        while stack and stack[-1][0] >= info.indent:
            stack.pop()

        if m := _IMPORT.match(line):
            for part in m.group("names").split(","):
                out.add_import(part.split(" as ")[0].strip(" ()\\"))
            continue
        if m := _FROM.match(line):
            out.add_import(m.group("module"))
            continue
        if m := _ROUTE.match(line):
            out.add(_route_label(m), SymbolKind.HINT, index)
            continue
        if m := _URL.match(line):
            out.add(f"url {m.group('path')}", SymbolKind.HINT, index)
            continue

        if m := _CLASS.match(line):
            name = m.group("name")
            parent = stack[-1][1] if stack else None
            out.add(name, SymbolKind.TYPE, index, _block_end(lines, scanned, index), parent=parent)
            stack.append((info.indent, name, SymbolKind.TYPE))
            continue
        if m := _DEF.match(line):
            name = m.group("name")
            end = _block_end(lines, scanned, index)
            if stack and stack[-1][2] is SymbolKind.TYPE:
                out.add(name, SymbolKind.METHOD, index, end, parent=stack[-1][1])
            else:
                out.add(name, SymbolKind.FUNCTION, index, end, parent=stack[-1][1] if stack else None)
            stack.append((info.indent, name, SymbolKind.FUNCTION))

    if unterminated_string:
        out.errors.append("unterminated triple-quoted string at end of file")
    if scanned and scanned[-1].depth_after > 0:
        out.errors.append("unclosed bracket at end of file")
    return out.result(Language.PYTHON, file_path)
