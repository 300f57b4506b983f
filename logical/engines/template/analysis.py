"""
Static field discovery: which data fields does a template reference?

Used to decide which templates need re-rendering when a field changes. This is
a text scan, not a parse: string literals and ``#`` comments inside tags are
removed, then every remaining identifier is a candidate.
"""

import keyword
import re
from collections.abc import Iterable

from logical.engines.template.tokenizer import TokenKind, tokenize

_STRING_RE = re.compile(
    r"""(?:[rRbBuUfF]{0,2})(?:'''.*?'''|\"\"\".*?\"\"\"|'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*")""",
    re.DOTALL,
)
_COMMENT_RE = re.compile(r"#[^\n]*")
_NAME_RE = re.compile(r"(?<![\w.])([A-Za-z_]\w*)\b")

SUGAR_WORDS = frozenset({"end", "each", "var"})


def _strip_noise(code: str) -> str:
    return _COMMENT_RE.sub("", _STRING_RE.sub("", code))


def find_fields(
    source: str,
    known: Iterable[str] | None = None,
    *,
    expression_start: str = "<%",
    expression_end: str = "%>",
) -> list[str]:
    """
    Return names referenced in the template's output and statement tags, in
    first-seen order. Attribute names (``a.b`` -> ``b``) are skipped. With
    ``known``, only names in ``known`` are kept.
    """
    allowed = set(known) if known is not None else None
    found: list[str] = []
    for token in tokenize(source, expression_start, expression_end):
        if token.kind not in (TokenKind.OUTPUT, TokenKind.STATEMENT):
            continue
        for name in _NAME_RE.findall(_strip_noise(token.text)):
            if keyword.iskeyword(name) or name in SUGAR_WORDS:
                continue
            if allowed is not None and name not in allowed:
                continue
            if name not in found:
                found.append(name)
    return found
