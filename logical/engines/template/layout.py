"""
Line layout of Python snippets taken from tags.

Re-indenting a snippet must never touch the inside of a multi-line string
literal, so rows that continue a multi-line token are found with the
stdlib ``tokenize`` module and left exactly as written.
"""

import io
import tokenize

INDENT = " " * 4


def continuation_rows(source: str) -> set[int]:
    """1-based rows that lie inside a token started on an earlier row."""
    rows: set[int] = set()
    try:
        for tok in tokenize.generate_tokens(io.StringIO(source).readline):
            if tok.end[0] > tok.start[0]:
                rows.update(range(tok.start[0] + 1, tok.end[0] + 1))
    except (tokenize.TokenError, SyntaxError):
        # Unbalanced snippets are reported when the body is compiled.
        pass
    return rows


def _margin(lines: list[str], rows: list[int]) -> int:
    return min((len(lines[i]) - len(lines[i].lstrip()) for i in rows), default=0)


def dedent_statement(text: str) -> str:
    """
    Dedent a statement tag body.

    ``<%\\n    a = 1\\n    b = 2\\n%>`` loses the common margin. When the
    first line sits on the tag's own line (``<% a = 1\\n   b = 2 %>``), the
    lines after it are dedented on their own, one step deeper if the first
    line opens a block.
    """
    source = text.strip("\n")
    lines = source.split("\n")
    verbatim = continuation_rows(source)
    code_rows = [i for i, line in enumerate(lines) if i + 1 not in verbatim and line.strip()]
    out = list(lines)

    if text.lstrip(" \t").startswith("\n"):
        cut = _margin(lines, code_rows)
        for i in code_rows:
            out[i] = lines[i][cut:]
    else:
        out[0] = lines[0].lstrip()
        rest = [i for i in code_rows if i > 0]
        cut = _margin(lines, rest)
        pad = INDENT if out[0].rstrip().endswith(":") else ""
        for i in rest:
            out[i] = pad + lines[i][cut:]
    return "\n".join(out).strip()
