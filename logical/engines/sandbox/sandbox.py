"""
Evaluation scopes for template bodies.

A restricted scope is RestrictedPython's ``safe_builtins`` widened with the
container and reduction builtins templates commonly need (``list``, ``dict``,
``enumerate``, ``sum`` ...) plus ``json`` and the ``datetime`` types. The
guards RestrictedPython's rewritten bytecode calls (``_getattr_``,
``_getitem_``, ...) and ``__builtins__`` are set after the caller's bindings,
and bindings whose names start with ``_`` are dropped: restricted code cannot
name them, so they could only ever replace a guard.

An ambient scope is the real ``builtins`` module and the bindings, nothing else.
"""

import builtins
import json
import operator
from collections.abc import Callable, Mapping
from datetime import date, datetime, time, timedelta
from types import CodeType
from typing import Any

from RestrictedPython import compile_restricted
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    safe_builtins,
    safer_getattr,
)

TEMPLATE_FILENAME = "<template>"
SCOPE_NAME = "template"

_INPLACE_OPS: dict[str, Callable[[Any, Any], Any]] = {
    "+=": operator.iadd,
    "-=": operator.isub,
    "*=": operator.imul,
    "/=": operator.itruediv,
    "//=": operator.ifloordiv,
    "%=": operator.imod,
    "**=": operator.ipow,
    "|=": operator.ior,
    "&=": operator.iand,
    "^=": operator.ixor,
}


def guarded_inplacevar(op: str, x: Any, y: Any) -> Any:
    """``x op= y`` on a plain name. Shifts and matmul are not allowed."""
    try:
        fn = _INPLACE_OPS[op]
    except KeyError:
        raise SyntaxError(f"Augmented assignment {op!r} is not allowed in templates") from None
    return fn(x, y)


_TEMPLATE_BUILTINS: dict[str, Any] = {
    **safe_builtins,
    "list": list,
    "dict": dict,
    "set": set,
    "enumerate": enumerate,
    "min": min,
    "max": max,
    "sum": sum,
    "any": any,
    "all": all,
    "reversed": reversed,
    "json": json,
    "datetime": datetime,
    "date": date,
    "time": time,
    "timedelta": timedelta,
}

_GUARDS: dict[str, Any] = {
    "_getattr_": safer_getattr,
    "_getiter_": default_guarded_getiter,
    "_getitem_": default_guarded_getitem,
    "_iter_unpack_sequence_": guarded_iter_unpack_sequence,
    "_write_": full_write_guard,
    "_inplacevar_": guarded_inplacevar,
}


def compile_body(code: str, *, restricted: bool) -> CodeType:
    """Compile a template body; RestrictedPython rewrites it when ``restricted``."""
    if not restricted:
        return compile(code, TEMPLATE_FILENAME, "exec")
    bytecode = compile_restricted(code, TEMPLATE_FILENAME, "exec")
    if bytecode is None:
        raise SyntaxError("RestrictedPython: compile failed")
    return bytecode


def build_scope(bindings: Mapping[str, Any], *, restricted: bool) -> dict[str, Any]:
    """Fresh globals for one evaluation of a body compiled with the same ``restricted``."""
    if not restricted:
        scope = dict(bindings)
        scope["__builtins__"] = builtins
        scope["__name__"] = SCOPE_NAME
        return scope

    scope = {name: value for name, value in bindings.items() if not name.startswith("_")}
    scope.update(_GUARDS)
    scope["__builtins__"] = dict(_TEMPLATE_BUILTINS)
    scope["__name__"] = SCOPE_NAME
    return scope
