"""
Template compiler: source text -> ``CompiledTemplate``.

Compilation is pure and deterministic: the same source under the same
delimiters and sugar flag always yields the same body.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from logical.engines.template.assembler import assemble
from logical.engines.template.sugar import build_tree
from logical.engines.template.tokenizer import tokenize

_log = logging.getLogger(__name__)

BodyRenderer = Callable[[str, Any, Mapping[str, Any] | None], str]


def compile_source(
    source: str,
    *,
    expression_start: str = "<%",
    expression_end: str = "%>",
    sugar: bool = True,
) -> str:
    """Compile ``source`` to a Python body writing into ``output__``."""
    tokens = tokenize(source, expression_start, expression_end)
    code = assemble(build_tree(tokens, sugar=sugar))
    _log.debug("Compiled template (%d chars) to %d lines", len(source), code.count("\n"))
    return code


@dataclass(frozen=True)
class CompiledTemplate:
    """
    An assembled body bound to the registry that compiled it.

    ``render(data, helpers)`` runs the body through the owning registry's
    render pipeline (helper merge, collection fan-out, evaluation).
    """

    source: str
    code: str
    renderer: BodyRenderer = field(repr=False, compare=False)
    name: str | None = None

    def render(self, data: Any = None, helpers: Mapping[str, Any] | None = None) -> str:
        return self.renderer(self.code, data, helpers)
