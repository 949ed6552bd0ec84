import re

from code_assist.core.analyzers.scan import (
    BlockEnd,
    LineInfo,
    SymbolCollector,
    block_end,
    paren_end,
    scan_braces,
    split_lines,
)
from code_assist.models import Language, ParseResult, SymbolKind

_PACKAGE = re.compile(r"^\s*package\s+(?P<name>\w+)")
_IMPORT_SINGLE = re.compile(r"""^\s*import\s+(?:[\w.]+\s+)?"(?P<path>[^"]+)\"""")
_IMPORT_GROUP = re.compile(r"^\s*import\s*\(")
_IMPORT_SPEC = re.compile(r"""^\s*(?:[\w.]+\s+)?"(?P<path>[^"]+)\"""")
_FUNC = re.compile(r"^func\s+(?P<name>\w+)\s*(?:\[[^\]]*\])?\s*\(")
_METHOD = re.compile(r"^func\s*\(\s*(?:\w+\s+)?(?P<recv>\*?\s*[\w.]+(?:\[[^\]]*\])?)\s*\)\s*(?P<name>\w+)\s*\(")
_TYPE = re.compile(r"^type\s+(?P<name>\w+)(?:\[[^\]]*\])?\s+(?P<rest>.*)$")
_TYPE_GROUP = re.compile(r"^type\s*\(")
_TYPE_SPEC = re.compile(r"^\s+(?P<name>\w+)(?:\[[^\]]*\])?\s+(?P<rest>.*)$")
_ROUTE = re.compile(
    r"""\b(?:http\.)?(?:HandleFunc|Handle|GET|POST|PUT|PATCH|DELETE)\(\s*"(?P<path>[^"]*)\""""
)
_ROUTE_VERB = re.compile(r"\.(?P<verb>GET|POST|PUT|PATCH|DELETE)\(")


def _receiver_type(receiver: str) -> str:
    receiver = receiver.replace("*", "").strip()
    return receiver.split("[", 1)[0].split(".")[-1]


def _type_kind(rest: str) -> SymbolKind:
    rest = rest.lstrip()
    if rest.startswith("interface"):
        return SymbolKind.INTERFACE
    return SymbolKind.TYPE


def _type_end(infos: list[LineInfo], index: int) -> BlockEnd | int:
    # struct and interface bodies open on the declaration line; anything else is a one-liner
    return block_end(infos, index) if "{" in infos[index].code else index


def analyze_go(text: str, file_path: str | None = None) -> ParseResult:
    lines = split_lines(text)
    infos = scan_braces(lines, backtick_strings=True)
    out = SymbolCollector(line_count=len(lines))
    # end index of an open ``import (`` or ``type (`` group
    import_group_end = -1
    type_group_end = -1

    for index, info in enumerate(infos):
        code = info.code
        if not code.strip():
            continue

        if index <= import_group_end:
            if m := _IMPORT_SPEC.match(code):
                out.add_import(m.group("path"))
            continue
        if index <= type_group_end:
            if info.before == 0 and info.paren_before == 1 and (m := _TYPE_SPEC.match(code)):
                out.add(m.group("name"), _type_kind(m.group("rest")), index, _type_end(infos, index))
            continue

        if m := _PACKAGE.match(code):
            out.add(m.group("name"), SymbolKind.MODULE, index)
            continue
        if _IMPORT_GROUP.match(code):
            import_group_end = paren_end(infos, index).index
            continue
        if m := _IMPORT_SINGLE.match(code):
            out.add_import(m.group("path"))
            continue
        if m := _METHOD.match(code):
            receiver = _receiver_type(m.group("recv"))
            out.add(m.group("name"), SymbolKind.METHOD, index, block_end(infos, index), parent=receiver)
            continue
        if m := _FUNC.match(code):
            out.add(m.group("name"), SymbolKind.FUNCTION, index, block_end(infos, index))
            continue
        if _TYPE_GROUP.match(code):
            end = paren_end(infos, index)
            if not end.terminated:
                out.errors.append(f"unterminated type group starting at line {index + 1}")
            type_group_end = end.index
            continue
        if m := _TYPE.match(code):
            out.add(m.group("name"), _type_kind(m.group("rest")), index, _type_end(infos, index))
            continue
        if m := _ROUTE.search(code):
            verb = _ROUTE_VERB.search(code)
            label = verb.group("verb") if verb else "HANDLE"
            out.add(f"{label} {m.group('path')}", SymbolKind.HINT, index)

    return out.result(Language.GO, file_path)
