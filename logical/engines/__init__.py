"""
Engines: template compiler and sandboxed evaluator.
"""

from logical.engines.sandbox import evaluate
from logical.engines.template import CompiledTemplate, compile_source, find_fields

__all__ = [
    "CompiledTemplate",
    "compile_source",
    "find_fields",
    "evaluate",
]
