"""
Code assembly: node tree -> Python source body.

The body writes into the accumulator ``output__``; it neither creates nor
returns it. The evaluator binds a fresh buffer for every evaluation, so a body
can be evaluated any number of times.
"""

from logical.engines.template.layout import continuation_rows
from logical.engines.template.nodes import Block, Code, Expr, Node, Text

OUTPUT_NAME = "output__"


class CodeBuilder:
    """Collects indented source lines."""

    INDENT_STEP = 4

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.indent_level = 0

    def __str__(self) -> str:
        return "".join(line + "\n" for line in self.lines)

    def add_line(self, line: str) -> None:
        self.lines.append(" " * self.indent_level + line)

    def add_lines(self, source: str) -> None:
        """
        Add a dedented snippet at the current indent. Rows inside multi-line
        string literals are kept exactly as written.
        """
        verbatim = continuation_rows(source)
        for row, line in enumerate(source.split("\n"), start=1):
            if row in verbatim:
                self.lines.append(line)
            else:
                self.add_line(line)

    def indent(self) -> None:
        self.indent_level += self.INDENT_STEP

    def dedent(self) -> None:
        self.indent_level -= self.INDENT_STEP


def _emit(builder: CodeBuilder, nodes: list[Node]) -> None:
    for node in nodes:
        if isinstance(node, Text):
            builder.add_line(f"{OUTPUT_NAME}.write({node.text!r})")
        elif isinstance(node, Expr):
            builder.add_lines(f"{OUTPUT_NAME}.write({node.source})")
        elif isinstance(node, Code):
            builder.add_lines(node.source)
        elif isinstance(node, Block):
            builder.add_lines(node.header)
            builder.indent()
            if node.body:
                _emit(builder, node.body)
            else:
                builder.add_line("pass")
            builder.dedent()


def assemble(nodes: list[Node]) -> str:
    """Return the Python source for ``nodes``, left to right."""
    builder = CodeBuilder()
    _emit(builder, nodes)
    return str(builder)
