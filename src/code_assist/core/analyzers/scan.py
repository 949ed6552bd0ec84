"""Line-scanning toolkit shared by the per-language analyzers.

Analyzers read a file once into lines, run one of the depth scanners below
and then match declarations line by line. Block ends are estimated from the
precomputed depth table, so finding an end is a forward scan over integers,
never a re-read of the text.
"""

from dataclasses import dataclass, field

from code_assist.models import Language, ParseResult, Symbol, SymbolKind

# How far past a declaration line the opening brace may appear
# (multi-line signatures, where clauses, wrapped parameter lists).
HEADER_LOOKAHEAD = 8


def split_lines(text: str) -> list[str]:
    """Split on line feeds only; form feeds and other Unicode breaks stay inside their line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


@dataclass(frozen=True)
class LineInfo:
    code: str
    before: int
    peak: int
    after: int
    paren_before: int
    paren_after: int


@dataclass
class BlockEnd:
    index: int
    terminated: bool = True


def scan_braces(
    lines: list[str],
    *,
    single_quote_strings: bool = True,
    backtick_strings: bool = False,
    hash_comments: bool = False,
    char_literals: bool = False,
) -> list[LineInfo]:
    """Compute brace and paren depth around every line, ignoring strings and comments.

    ``code`` is the line with comments removed; string contents are kept so
    analyzers can still read route paths and import targets.
    """
    infos: list[LineInfo] = []
    depth = 0
    parens = 0
    in_block_comment = False
    in_backtick = False

    for line in lines:
        before = depth
        paren_before = parens
        peak = depth
        out: list[str] = []
        quote: str | None = "`" if in_backtick else None
        i = 0
        n = len(line)
        while i < n:
            ch = line[i]
            nxt = line[i + 1] if i + 1 < n else ""
            if in_block_comment:
                if ch == "*" and nxt == "/":
                    in_block_comment = False
                    i += 2
                else:
                    i += 1
                continue
            if quote is not None:
                out.append(ch)
                if ch == "\\":
                    out.append(nxt)
                    i += 2
                    continue
                if ch == quote:
                    quote = None
                i += 1
                continue
            if ch == "/" and nxt == "/":
                break
            if ch == "/" and nxt == "*":
                in_block_comment = True
                i += 2
                continue
            if hash_comments and ch == "#" and nxt != "[":
                break
            if ch == '"' or (ch == "'" and single_quote_strings) or (ch == "`" and backtick_strings):
                quote = ch
                out.append(ch)
                i += 1
                continue
            if ch == "'" and char_literals:
                # 'x' or '\n' is a char literal; anything else is a lifetime.
                if i + 2 < n and line[i + 1] != "\\" and line[i + 2] == "'":
                    out.append(line[i : i + 3])
                    i += 3
                    continue
                if i + 3 < n and line[i + 1] == "\\" and line[i + 3] == "'":
                    out.append(line[i : i + 4])
                    i += 4
                    continue
            if ch == "{":
                depth += 1
                peak = max(peak, depth)
            elif ch == "}":
                depth = max(0, depth - 1)
            elif ch == "(":
                parens += 1
            elif ch == ")":
                parens = max(0, parens - 1)
            out.append(ch)
            i += 1

        in_backtick = quote == "`"
        infos.append(
            LineInfo(
                code="".join(out),
                before=before,
                peak=peak,
                after=depth,
                paren_before=paren_before,
                paren_after=parens,
            )
        )
    return infos


def block_end(infos: list[LineInfo], index: int) -> BlockEnd:
    """Find the line closing the brace block a declaration at ``index`` opens.

    A declaration terminated by ``;`` before any brace, or one with no brace
    within the header lookahead, ends on its own line.
    """
    base = infos[index].before
    limit = min(len(infos), index + HEADER_LOOKAHEAD)
    for j in range(index, limit):
        info = infos[j]
        if info.peak > base:
            for k in range(j, len(infos)):
                if infos[k].after <= base:
                    return BlockEnd(k)
            return BlockEnd(len(infos) - 1, terminated=False)
        if info.code.rstrip().endswith(";"):
            return BlockEnd(j)
    return BlockEnd(index)


def paren_end(infos: list[LineInfo], index: int) -> BlockEnd:
    """Find the line where the parens open at the end of line ``index`` close."""
    base = infos[index].paren_before
    for k in range(index, len(infos)):
        if infos[k].paren_after <= base:
            return BlockEnd(k)
    return BlockEnd(len(infos) - 1, terminated=False)


@dataclass
class Container:
    name: str
    kind: SymbolKind
    end: int


@dataclass
class SymbolCollector:
    """Accumulate symbols and anomalies for one file, in file order."""

    line_count: int
    symbols: list[Symbol] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    containers: list[Container] = field(default_factory=list)

    def add(
        self,
        name: str,
        kind: SymbolKind,
        start: int,
        end: BlockEnd | int | None = None,
        parent: str | None = None,
    ) -> Symbol:
        if isinstance(end, BlockEnd):
            if not end.terminated:
                self.errors.append(f"unterminated block for '{name}' starting at line {start + 1}")
            end_index = end.index
        else:
            end_index = start if end is None else end
        start_line = min(max(start + 1, 1), self.line_count)
        end_line = min(max(end_index + 1, start_line), self.line_count)
        symbol = Symbol(name=name, kind=kind, start_line=start_line, end_line=end_line, parent=parent)
        self.symbols.append(symbol)
        return symbol

    def add_import(self, target: str) -> None:
        target = target.strip()
        if target and target not in self.imports:
            self.imports.append(target)

    def open_container(self, name: str, kind: SymbolKind, end: int) -> None:
        self.containers.append(Container(name, kind, end))

    def enclosing(self, index: int) -> Container | None:
        """Return the innermost container still open at line ``index``."""
        while self.containers and self.containers[-1].end < index:
            self.containers.pop()
        return self.containers[-1] if self.containers else None

    def result(self, language: Language, file_path: str | None) -> ParseResult:
        ordered = sorted(self.symbols, key=lambda s: s.start_line)
        return ParseResult(
            file_path=file_path,
            language=language,
            line_count=self.line_count,
            symbols=ordered,
            imports=self.imports,
            parse_errors=self.errors,
        )


def indent_width(line: str) -> int:
    expanded = line.expandtabs(4)
    return len(expanded) - len(expanded.lstrip(" "))


def is_pascal_case(name: str) -> bool:
    return bool(name) and name[0].isupper() and not name.isupper()
