"""
Evaluate an assembled template body against one data record.

sandbox=True: RestrictedPython bytecode in fresh restricted globals per call.
sandbox=False: plain ``compile``/``exec`` with the full builtins, no isolation.

Either way helpers, data fields, the whole record (``data__``), the key
enumerator (``keys__``) and a fresh ``output__`` buffer are bound as globals.
Errors raised by template code or helpers propagate unchanged.

Performance: code objects are cached in an LRU dict keyed by
(body hash, sandbox) so repeated renders skip recompilation. Only the
immutable code object is shared; globals are never reused across calls.
"""

import hashlib
import logging
import threading
from collections import OrderedDict
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from logical.core.config import settings
from logical.engines.sandbox.sandbox import build_scope, compile_body
from logical.engines.template.assembler import OUTPUT_NAME
from logical.engines.template.sugar import KEYS_NAME

_log = logging.getLogger(__name__)

DATA_NAME = "data__"

_code_cache: OrderedDict[tuple[str, bool], Any] = OrderedDict()
_cache_lock = threading.Lock()


class OutputBuffer:
    """The accumulator. ``write`` converts values with ``str``."""

    def __init__(self) -> None:
        self._parts: list[str] = []

    def write(self, value: Any) -> None:
        self._parts.append(value if isinstance(value, str) else str(value))

    def getvalue(self) -> str:
        return "".join(self._parts)


def iter_keys(collection: Any) -> list[Any] | range:
    """Keys of a mapping or indices of a sequence, as used by ``each``."""
    if isinstance(collection, Mapping):
        return list(collection.keys())
    if isinstance(collection, Sequence):
        return range(len(collection))
    raise TypeError(
        f"each() needs a mapping or a sequence, got {type(collection).__name__}"
    )


def record_fields(data: Any) -> dict[str, Any]:
    """Top-level names a record contributes to the evaluation scope."""
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return {str(k): v for k, v in data.items()}
    if isinstance(data, BaseModel):
        return {name: getattr(data, name) for name in type(data).model_fields}
    if hasattr(data, "__dict__") and not isinstance(data, type):
        return dict(vars(data))
    return {}


def _compile_cached(code: str, sandbox: bool) -> Any:
    key = (hashlib.md5(code.encode(), usedforsecurity=False).hexdigest(), sandbox)
    with _cache_lock:
        bytecode = _code_cache.get(key)
        if bytecode is not None:
            _code_cache.move_to_end(key)
            return bytecode
    bytecode = compile_body(code, restricted=sandbox)
    with _cache_lock:
        _code_cache[key] = bytecode
        if len(_code_cache) > settings.CODE_CACHE_SIZE:
            _code_cache.popitem(last=False)
    _log.debug("Compiled template body (sandbox=%s), cache size %d", sandbox, len(_code_cache))
    return bytecode


def clear_code_cache() -> None:
    with _cache_lock:
        _code_cache.clear()


def evaluate(
    code: str,
    data: Any,
    helpers: Mapping[str, Any],
    *,
    sandbox: bool = True,
) -> str:
    """Run ``code`` once and return what it wrote to ``output__``."""
    buffer = OutputBuffer()
    namespace: dict[str, Any] = dict(helpers)
    namespace.update(record_fields(data))
    namespace[DATA_NAME] = data
    namespace[KEYS_NAME] = iter_keys
    namespace[OUTPUT_NAME] = buffer

    bytecode = _compile_cached(code, sandbox)
    scope = build_scope(namespace, restricted=sandbox)
    exec(bytecode, scope)  # noqa: S102 - restricted unless sandbox is off
    return buffer.getvalue()
