"""
Block sugar: build a node tree from the token stream.

Statement tags may use a lightweight block syntax that spans several tags::

    <% if (x > 0): %>positive<% else if x == 0 %>zero<% else %>negative<% end %>
    <% each (item in items): %><li><%= item %></li><% end %>

Rules, checked on the stripped statement text:

- ``end`` closes the innermost open block.
- ``else``, ``else if <cond>``, ``elif <cond>``, ``except ...`` and ``finally``
  close the open block and open a chained branch.
- ``each (<name> in <collection>)`` opens a loop over the keys/indices of
  ``<collection>`` and rebinds ``<name>`` to the element value.
- A trailing colon opens a block with the statement as its header.

A multi-line statement whose first line shares the tag's line
(``<% a = 1`` / ``   b = 2 %>``) has the lines after it dedented on their own.

Blocks are matched with a stack over tokens, so the keywords are only
recognised as whole statement tags, never inside literals or strings.
Statements that match no rule pass through unchanged.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from logical.core.errors import TemplateSyntaxError
from logical.engines.template.layout import dedent_statement
from logical.engines.template.nodes import Block, Code, Expr, Node, Text
from logical.engines.template.tokenizer import Token, TokenKind

_log = logging.getLogger(__name__)

KEYS_NAME = "keys__"

_END_RE = re.compile(r"^end$")
_ELSE_RE = re.compile(r"^else\s*:?$")
_ELSE_IF_RE = re.compile(r"^(?:else\s+if|elif)\b\s*(?P<cond>.+?)\s*:?$", re.DOTALL)
_HANDLER_RE = re.compile(r"^(?P<head>except\b.*?|finally)\s*:?$", re.DOTALL)
_EACH_RE = re.compile(
    r"^each\s*\(\s*(?:var\s+)?(?P<name>[A-Za-z_]\w*)\s+in\s+"
    r"(?P<collection>[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)\s*\)\s*:?$"
)
_OPEN_RE = re.compile(r":\s*$")
_TRAILING_COMMENT_RE = re.compile(r"\s*#[^'\"\n]*$")


class Action(str, Enum):
    PASS = "pass"
    OPEN = "open"
    CHAIN = "chain"
    CLOSE = "close"


@dataclass(frozen=True)
class Rewrite:
    action: Action
    header: str = ""
    prelude: list[Code] = field(default_factory=list)


def normalize_statement(text: str) -> str:
    """Dedent a statement tag body and trim surrounding blank space."""
    return dedent_statement(text)


def rewrite_statement(code: str) -> Rewrite:
    """Classify one normalised statement. A trailing ``# comment`` is ignored."""
    code = _TRAILING_COMMENT_RE.sub("", code)
    if _END_RE.match(code):
        return Rewrite(Action.CLOSE)
    if _ELSE_RE.match(code):
        return Rewrite(Action.CHAIN, "else:")
    m = _ELSE_IF_RE.match(code)
    if m:
        return Rewrite(Action.CHAIN, f"elif {m.group('cond')}:")
    m = _HANDLER_RE.match(code)
    if m:
        return Rewrite(Action.CHAIN, f"{m.group('head')}:")
    m = _EACH_RE.match(code)
    if m:
        name, collection = m.group("name"), m.group("collection")
        return Rewrite(
            Action.OPEN,
            f"for {name} in {KEYS_NAME}({collection}):",
            [Code(f"{name} = {collection}[{name}]")],
        )
    if _OPEN_RE.search(code):
        return Rewrite(Action.OPEN, code.rstrip())
    return Rewrite(Action.PASS)


def build_tree(tokens: list[Token], *, sugar: bool = True) -> list[Node]:
    """
    Turn tokens into nodes. With ``sugar`` off every statement tag becomes a
    standalone ``Code`` node and no blocks are formed.
    """
    root: list[Node] = []
    stack: list[tuple[Block, Token]] = []

    def body() -> list[Node]:
        return stack[-1][0].body if stack else root

    def open_block(header: str, token: Token, prelude: list[Code]) -> None:
        block = Block(header, list(prelude))
        body().append(block)
        stack.append((block, token))

    for token in tokens:
        if token.kind is TokenKind.LITERAL:
            body().append(Text(token.text))
        elif token.kind is TokenKind.OUTPUT:
            body().append(Expr(token.text.strip()))
        elif token.kind is TokenKind.STATEMENT:
            code = normalize_statement(token.text)
            if not code:
                continue
            if not sugar:
                body().append(Code(code))
                continue
            rewrite = rewrite_statement(code)
            if rewrite.action is Action.PASS:
                body().append(Code(code))
            elif rewrite.action is Action.OPEN:
                open_block(rewrite.header, token, rewrite.prelude)
            else:
                if not stack:
                    raise TemplateSyntaxError(
                        f"{code!r} at offset {token.start} has no open block",
                        position=token.start,
                    )
                stack.pop()
                if rewrite.action is Action.CHAIN:
                    open_block(rewrite.header, token, rewrite.prelude)

    if stack:
        block, token = stack[-1]
        raise TemplateSyntaxError(
            f"Block {block.header!r} opened at offset {token.start} is never closed",
            position=token.start,
        )
    _log.debug("Built %d top-level nodes from %d tokens", len(root), len(tokens))
    return root
