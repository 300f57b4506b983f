"""
Template engine: tokenizer, block sugar, assembler and compiler.

Exports: compile_source, CompiledTemplate, tokenize, extract_tags, find_fields.
"""

from logical.engines.template.analysis import find_fields
from logical.engines.template.compiler import CompiledTemplate, compile_source
from logical.engines.template.tokenizer import Token, TokenKind, extract_tags, tokenize

__all__ = [
    "CompiledTemplate",
    "compile_source",
    "find_fields",
    "extract_tags",
    "tokenize",
    "Token",
    "TokenKind",
]
