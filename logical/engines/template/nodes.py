"""Node tree produced from the token stream and consumed by the assembler."""

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Text:
    """Literal text, written as-is."""

    text: str


@dataclass(frozen=True)
class Expr:
    """Output tag: the expression's value is written."""

    source: str


@dataclass(frozen=True)
class Code:
    """Statement tag passed through as Python statements."""

    source: str


@dataclass
class Block:
    """A compound statement header (``if x:``, ``for ...:``) and its body."""

    header: str
    body: list["Node"] = field(default_factory=list)


Node = Union[Text, Expr, Code, Block]
