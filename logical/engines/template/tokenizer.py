"""
Tag extraction and literal protection.

A template is literal text with tags bounded by a start/end marker pair
(``<%`` / ``%>`` by default). The first character after the start marker picks
the tag kind: ``#`` comment, ``=`` output, anything else a statement.

Tags are found in one pass; literal runs are cut from the source by offset,
so no placeholder characters are ever inserted and no literal content can
collide with them.
"""

import functools
import re
from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    LITERAL = "literal"
    COMMENT = "comment"
    OUTPUT = "output"
    STATEMENT = "statement"


COMMENT_SIGIL = "#"
OUTPUT_SIGIL = "="


@dataclass(frozen=True)
class Tag:
    """A matched tag: offsets cover the markers, ``inner`` excludes them."""

    start: int
    end: int
    inner: str

    @property
    def kind(self) -> TokenKind:
        if self.inner.startswith(COMMENT_SIGIL):
            return TokenKind.COMMENT
        if self.inner.startswith(OUTPUT_SIGIL):
            return TokenKind.OUTPUT
        return TokenKind.STATEMENT

    @property
    def body(self) -> str:
        """Inner text without the kind sigil."""
        if self.kind is TokenKind.STATEMENT:
            return self.inner
        return self.inner[1:]


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    start: int
    end: int


@functools.lru_cache(maxsize=32)
def tag_pattern(expression_start: str, expression_end: str) -> re.Pattern[str]:
    """
    Non-greedy multiline pattern for one tag.

    The inner text may not contain another start marker, so an unterminated
    tag is left as literal text instead of swallowing the next tag.
    """
    start = re.escape(expression_start)
    end = re.escape(expression_end)
    return re.compile(f"{start}((?:(?!{start}).)*?){end}", re.DOTALL)


def extract_tags(
    source: str, expression_start: str = "<%", expression_end: str = "%>"
) -> list[Tag]:
    """Return every tag in ``source`` in source order."""
    pattern = tag_pattern(expression_start, expression_end)
    return [Tag(m.start(), m.end(), m.group(1)) for m in pattern.finditer(source)]


def protect_literals(source: str, tags: list[Tag]) -> list[Token]:
    """
    Split ``source`` into literal runs and tag tokens.

    Literal runs keep their exact text, whitespace and newlines included.
    Empty runs between adjacent tags are dropped.
    """
    tokens: list[Token] = []
    pos = 0
    for tag in tags:
        if tag.start > pos:
            tokens.append(Token(TokenKind.LITERAL, source[pos : tag.start], pos, tag.start))
        tokens.append(Token(tag.kind, tag.body, tag.start, tag.end))
        pos = tag.end
    if pos < len(source):
        tokens.append(Token(TokenKind.LITERAL, source[pos:], pos, len(source)))
    return tokens


def tokenize(
    source: str, expression_start: str = "<%", expression_end: str = "%>"
) -> list[Token]:
    return protect_literals(source, extract_tags(source, expression_start, expression_end))
