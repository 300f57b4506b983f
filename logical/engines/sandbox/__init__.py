"""
Sandboxed evaluator (RestrictedPython) for assembled template bodies.

Exports: evaluate, OutputBuffer, build_scope, compile_body.
"""

from .evaluator import DATA_NAME, OutputBuffer, clear_code_cache, evaluate, iter_keys, record_fields
from .sandbox import build_scope, compile_body

__all__ = [
    "DATA_NAME",
    "OutputBuffer",
    "clear_code_cache",
    "evaluate",
    "iter_keys",
    "record_fields",
    "build_scope",
    "compile_body",
]
