import re

from code_assist.core.analyzers.scan import SymbolCollector, block_end, scan_braces, split_lines
from code_assist.models import Language, ParseResult, SymbolKind

_VIS = r"(?:pub(?:\s*\([^)]*\))?\s+)?"
_QUALIFIERS = r"(?:(?:default|const|async|unsafe|extern(?:\s+\"[^\"]*\")?)\s+)*"

_MOD = re.compile(rf"^\s*{_VIS}mod\s+(?P<name>\w+)\s*[;{{]?")
_TYPE = re.compile(rf"^\s*{_VIS}(?P<kw>struct|enum|union|type)\s+(?P<name>\w+)")
_TRAIT = re.compile(rf"^\s*{_VIS}(?:unsafe\s+)?(?:auto\s+)?trait\s+(?P<name>\w+)")
_IMPL = re.compile(r"^\s*(?:unsafe\s+)?impl\b(?:\s*<[^>]*(?:<[^>]*>[^>]*)*>)?\s+(?P<body>.+?)\s*(?:\bwhere\b.*)?\{?\s*$")
_FN = re.compile(rf"^\s*{_VIS}{_QUALIFIERS}fn\s+(?P<name>\w+)")
_MACRO = re.compile(r"^\s*(?:#\[macro_export\]\s*)?macro_rules!\s*(?P<name>\w+)")
_USE = re.compile(rf"^\s*{_VIS}use\s+(?P<path>[^;]+);?")


def _impl_target(body: str) -> tuple[str, str]:
    """Return (label, self type) for the text after ``impl``."""
    body = body.rstrip("{ ").strip()
    if " for " in body:
        trait, target = body.split(" for ", 1)
        target = target.strip()
        return f"impl {trait.strip()} for {target}", _base_type(target)
    return f"impl {body}", _base_type(body)


def _base_type(text: str) -> str:
    text = text.lstrip("&").replace("mut ", "").replace("dyn ", "").strip()
    return re.split(r"[<\s]", text, maxsplit=1)[0].split("::")[-1]


def analyze_rust(text: str, file_path: str | None = None) -> ParseResult:
    lines = split_lines(text)
    infos = scan_braces(lines, single_quote_strings=False, char_literals=True)
    out = SymbolCollector(line_count=len(lines))

    for index, info in enumerate(infos):
        code = info.code
        if not code.strip():
            continue
        container = out.enclosing(index)

        if m := _USE.match(code):
            out.add_import(m.group("path"))
            continue
        if m := _MOD.match(code):
            end = block_end(infos, index) if code.rstrip().endswith("{") else index
            out.add(m.group("name"), SymbolKind.MODULE, index, end)
            continue
        if m := _TRAIT.match(code):
            end = block_end(infos, index)
            out.add(m.group("name"), SymbolKind.INTERFACE, index, end)
            out.open_container(m.group("name"), SymbolKind.INTERFACE, end.index)
            continue
        if m := _TYPE.match(code):
            end = block_end(infos, index)
            out.add(m.group("name"), SymbolKind.TYPE, index, end)
            continue
        if (m := _IMPL.match(code)) and not code.lstrip().startswith("impl Fn"):
            label, target = _impl_target(m.group("body"))
            end = block_end(infos, index)
            out.add(label, SymbolKind.HINT, index, end)
            out.open_container(target, SymbolKind.TYPE, end.index)
            continue
        if m := _FN.match(code):
            end = block_end(infos, index)
            if container is not None:
                out.add(m.group("name"), SymbolKind.METHOD, index, end, parent=container.name)
            else:
                out.add(m.group("name"), SymbolKind.FUNCTION, index, end)
            continue
        if m := _MACRO.match(code):
            out.add(f"{m.group('name')}!", SymbolKind.HINT, index, block_end(infos, index))

    return out.result(Language.RUST, file_path)
