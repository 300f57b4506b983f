"""
Registries and the render pipeline.

A ``Registry`` bundles helpers, named templates and options. The package keeps
one process-wide default registry; ``logical.instance()`` returns independent
ones that share no mutable state with it.

Render pipeline for ``render(source_or_key, data, helpers)``:

1. Use the named template if ``source_or_key`` is registered, else compile the
   source (transient, not stored).
2. Merge helpers: registry helpers, then the call's helpers on top.
3. If ``data`` is a collection (sized, iterable, not a string or mapping),
   render once per element in order and concatenate.
4. Otherwise evaluate the body once against ``data``.
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sized
from types import MappingProxyType
from typing import Any

from logical.core.config import TemplateOptions
from logical.engines.sandbox import evaluate
from logical.engines.template import CompiledTemplate, compile_source, find_fields

_log = logging.getLogger(__name__)

_UNSET: Any = object()


def is_collection(data: Any) -> bool:
    """True for list-like records that fan out into one render per element."""
    if isinstance(data, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(data, Sized) and isinstance(data, Iterable)


class Registry:
    """Helpers, named templates and options with their own lifecycle."""

    def __init__(self, options: TemplateOptions | None = None) -> None:
        self.helpers: dict[str, Callable[..., Any]] = {}
        self.templates: dict[str, CompiledTemplate] = {}
        self.options = options if options is not None else TemplateOptions.from_settings()
        self.add_helper("partial", self._partial)

    def __repr__(self) -> str:
        return f"<Registry helpers={sorted(self.helpers)} templates={sorted(self.templates)}>"

    def config(self, key: str, value: Any = _UNSET) -> Any:
        """Read an option with ``config(key)``, write it with ``config(key, value)``."""
        if value is _UNSET:
            return self.options.get(key)
        self.options.set(key, value)
        return value

    def add_helper(self, name: str, fn: Callable[..., Any]) -> None:
        self.helpers[name] = fn

    def compile(self, source: str, *, name: str | None = None) -> CompiledTemplate:
        code = compile_source(
            source,
            expression_start=self.options.expression_start,
            expression_end=self.options.expression_end,
            sugar=self.options.sugar,
        )
        return CompiledTemplate(source=source, code=code, renderer=self._render_code, name=name)

    def add_template(self, name: str, source: str) -> CompiledTemplate:
        """Compile ``source`` and store it under ``name``."""
        template = self.compile(source, name=name)
        self.templates[name] = template
        _log.debug("Registered template %r", name)
        return template

    def render(
        self,
        source_or_key: str,
        data: Any = None,
        helpers: Mapping[str, Any] | None = None,
    ) -> str:
        template = self.templates.get(source_or_key)
        if template is None:
            template = self.compile(source_or_key)
        return template.render(data, helpers)

    def fields(self, source: str, known: Iterable[str] | None = None) -> list[str]:
        """Names referenced by ``source`` (or by the named template ``source``)."""
        template = self.templates.get(source)
        return find_fields(
            template.source if template is not None else source,
            known,
            expression_start=self.options.expression_start,
            expression_end=self.options.expression_end,
        )

    def debug(self) -> Mapping[str, CompiledTemplate]:
        """Read-only view of the named templates."""
        return MappingProxyType(self.templates)

    def _render_code(
        self,
        code: str,
        data: Any = None,
        helpers: Mapping[str, Any] | None = None,
    ) -> str:
        merged = dict(self.helpers)
        if helpers:
            merged.update(helpers)
        return self._render_merged(code, {} if data is None else data, merged)

    def _render_merged(self, code: str, data: Any, helpers: dict[str, Any]) -> str:
        if is_collection(data):
            _log.debug("Rendering collection of %d records", len(data))
            return "".join(self._render_merged(code, item, helpers) for item in data)
        return evaluate(code, data, helpers, sandbox=self.options.sandbox)

    def _partial(self, name: str, data: Any = None) -> str:
        return self.render(name, data)
