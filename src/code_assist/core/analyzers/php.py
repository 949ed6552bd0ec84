import re
from pathlib import PurePath

from code_assist.core.analyzers.scan import SymbolCollector, block_end, scan_braces, split_lines
from code_assist.core.languages import detect_signatures
from code_assist.models import Language, ParseResult, Signature, Symbol, SymbolKind

_NAMESPACE = re.compile(r"^\s*namespace\s+(?P<name>[\w\\]+)\s*(?P<brace>\{)?")
_USE = re.compile(r"^\s*use\s+(?:function\s+|const\s+)?(?P<names>[^;{]+(?:\{[^}]*\})?)\s*;")
_CLASS_LIKE = re.compile(r"^\s*(?:(?:abstract|final|readonly)\s+)*(?P<kw>class|trait|enum)\s+(?P<name>\w+)")
_INTERFACE = re.compile(r"^\s*interface\s+(?P<name>\w+)")
_FUNCTION = re.compile(
    r"^\s*(?:(?:public|private|protected|static|final|abstract)\s+)*function\s+&?\s*(?P<name>\w+)\s*\("
)
_PLUGIN_ANNOTATION = re.compile(
    r"^\s*(?:\*\s*@|#\[)(?P<name>Block|FieldType|FieldWidget|FieldFormatter|ContentEntityType|ConfigEntityType"
    r"|Action|Filter|QueueWorker|Condition|ViewsField|ViewsFilter|ViewsArgument|Mail|Migrate\w*|\w+Plugin)\s*\("
)

DRUPAL_EXTENSIONS = frozenset({".module", ".install", ".inc", ".theme", ".profile", ".engine"})

_KNOWN_HOOK = re.compile(
    r"^(?:menu|help|permission|theme|install|uninstall|enable|disable|schema|requirements|cron|init|boot|mail"
    r"|tokens|token_info|cache_flush|rebuild|toolbar|cron_queue_info|page_attachments(?:_alter)?|update_\d+"
    r"|form_alter|form_\w+_alter|preprocess(?:_\w+)?|theme_suggestions_\w+"
    r"|(?:node|entity|user|comment|taxonomy_term|block|field|file)_(?:view|presave|insert|update|delete|load"
    r"|access|info|view_alter|build_defaults_alter|login|logout|create|predelete)"
    r"|views_\w+|library_info_(?:alter|build)|query_\w+_alter|\w+_alter)$"
)


def drupal_hook_suffix(name: str, module: str | None) -> str | None:
    """Return the hook a function named ``<module>_<hook>`` implements, if any."""
    if module and name.startswith(f"{module}_"):
        suffix = name[len(module) + 1 :]
        return suffix if _KNOWN_HOOK.match(suffix) else None
    parts = name.split("_")
    for i in range(1, len(parts)):
        suffix = "_".join(parts[i:])
        if _KNOWN_HOOK.match(suffix):
            return suffix
    return None


def _mark_drupal_hooks(symbols: list[Symbol], file_path: str | None, text: str) -> list[Symbol]:
    module = None
    drupal_file = False
    if file_path:
        path = PurePath(file_path)
        module = path.name.split(".", 1)[0]
        drupal_file = path.suffix.lower() in DRUPAL_EXTENSIONS
    if not drupal_file:
        drupal_file = Signature.DRUPAL in detect_signatures(text)

    marked: list[Symbol] = []
    for symbol in symbols:
        if symbol.kind is SymbolKind.FUNCTION:
            suffix = drupal_hook_suffix(symbol.name, module)
            # outside Drupal files only the module-prefix convention counts
            prefixed = bool(module) and symbol.name.startswith(f"{module}_")
            if suffix and (drupal_file or prefixed):
                symbol = symbol.model_copy(update={"kind": SymbolKind.HOOK, "parent": f"hook_{suffix}"})
        marked.append(symbol)
    return marked


def analyze_php(text: str, file_path: str | None = None) -> ParseResult:
    lines = split_lines(text)
    infos = scan_braces(lines, hash_comments=True)
    out = SymbolCollector(line_count=len(lines))

    namespace_starts = [i for i, info in enumerate(infos) if _NAMESPACE.match(info.code)]
    namespace: str | None = None

    for index, info in enumerate(infos):
        raw = lines[index]
        if m := _PLUGIN_ANNOTATION.match(raw):
            out.add(f"@{m.group('name')} plugin", SymbolKind.HINT, index)
            continue

        code = info.code
        if not code.strip():
            continue
        container = out.enclosing(index)

        if m := _NAMESPACE.match(code):
            namespace = m.group("name")
            if m.group("brace"):
                end = block_end(infos, index)
            else:
                following = [i for i in namespace_starts if i > index]
                end = (following[0] - 1) if following else len(lines) - 1
            out.add(namespace, SymbolKind.MODULE, index, end)
            continue
        if m := _USE.match(code):
            names = m.group("names")
            if container is None and "{" in names:
                out.add_import(names.strip().lstrip("\\"))
            elif container is None:
                for name in names.split(","):
                    out.add_import(name.split(" as ")[0].strip().lstrip("\\"))
            continue
        if m := _CLASS_LIKE.match(code):
            end = block_end(infos, index)
            out.add(m.group("name"), SymbolKind.TYPE, index, end, parent=namespace)
            out.open_container(m.group("name"), SymbolKind.TYPE, end.index)
            continue
        if m := _INTERFACE.match(code):
            end = block_end(infos, index)
            out.add(m.group("name"), SymbolKind.INTERFACE, index, end, parent=namespace)
            out.open_container(m.group("name"), SymbolKind.INTERFACE, end.index)
            continue
        if m := _FUNCTION.match(code):
            end = block_end(infos, index)
            if container is not None:
                out.add(m.group("name"), SymbolKind.METHOD, index, end, parent=container.name)
            else:
                out.add(m.group("name"), SymbolKind.FUNCTION, index, end, parent=namespace)

    out.symbols = _mark_drupal_hooks(out.symbols, file_path, text)
    return out.result(Language.PHP, file_path)
