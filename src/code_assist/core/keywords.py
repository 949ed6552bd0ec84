import re

from code_assist.models import Signature

_TOKEN = re.compile(r"[\w$]+(?:[.\-:/\\][\w$]+)*")

STOP_WORDS = frozenset(
    {
        "the", "and", "for", "with", "from", "into", "that", "this", "these", "those", "what", "where",
        "when", "which", "how", "why", "does", "do", "is", "are", "was", "were", "can", "could", "should",
        "would", "please", "show", "find", "me", "all", "any", "some", "file", "files", "code", "about",
        "there", "here", "use", "used", "using", "get", "make", "add", "fix", "our", "your", "its",
    }
)  # fmt: skip

# Query words that reveal which framework or file family the user is after.
_FOCUS_WORDS: dict[Signature, tuple[str, ...]] = {
    Signature.REACT: ("react", "jsx", "tsx", "component", "hook", "usestate", "useeffect"),
    Signature.JSX: ("jsx", "tsx", "component"),
    Signature.ANGULAR: ("angular", "ngmodule", "directive", "injectable"),
    Signature.NEXTJS: ("next", "nextjs", "next.js", "getserversideprops"),
    Signature.DJANGO: ("django", "queryset", "manage.py"),
    Signature.FLASK: ("flask", "blueprint"),
    Signature.FASTAPI: ("fastapi", "pydantic", "apirouter"),
    Signature.DRUPAL: ("drupal", "hook", "module", "plugin", "block", "entity", "field", "form", "token"),
    Signature.DRUPAL_INFO: ("info", "configuration", "info.yml"),
    Signature.DRUPAL_SERVICES: ("service", "services", "dependency"),
    Signature.DRUPAL_TEMPLATE: ("template", "twig"),
}

DRUPAL_COMPONENT_WORDS = ("plugin", "block", "field", "form", "controller", "entity")


def extract_terms(query: str) -> list[str]:
    """Split a free-text query into lowercase search terms.

    Identifiers such as ``reset_password`` or ``app.route`` stay whole. Stop
    words and tokens shorter than three characters are dropped, unless that
    would drop every token; then the distinct tokens are kept as they are.
    """
    tokens = list(dict.fromkeys(_TOKEN.findall(query.lower())))
    terms = [t for t in tokens if len(t) >= 3 and t not in STOP_WORDS]
    return terms or tokens


def query_focus(terms: list[str]) -> frozenset[Signature]:
    """Return the signatures a query is explicitly asking about."""
    found: set[Signature] = set()
    for signature, words in _FOCUS_WORDS.items():
        if any(term == word or term.startswith(f"{word}_") for term in terms for word in words):
            found.add(signature)
    if any(term.startswith("hook_") for term in terms):
        found.add(Signature.DRUPAL)
    return frozenset(found)


def asks_for_drupal_component(terms: list[str]) -> bool:
    return any(word in term for term in terms for word in DRUPAL_COMPONENT_WORDS)
