"""
logical: a tiny template-to-Python compiler with a sandboxed evaluator.

Usage::

    import logical

    logical.render("<%= message %>", {"message": "Hello, world."})

Precompile a template you use a lot::

    tmp = logical.compile("<%= message %>")
    tmp.render({"message": "Hello, world."})

Pass a list instead of a record to render once per element::

    item = logical.compile("<li><%= name %></li>")
    item.render([{"name": "Tom"}, {"name": "Dick"}, {"name": "Harry"}])

The functions below act on the process-wide default registry; use
``instance()`` for an isolated one.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from logical.core.config import Settings, TemplateOptions, settings
from logical.core.errors import TemplateSyntaxError, UnknownOptionError
from logical.engines.template import CompiledTemplate
from logical.registry import Registry

__version__ = "0.1.0"

_default = Registry()


def default_registry() -> Registry:
    return _default


def instance(options: TemplateOptions | None = None) -> Registry:
    """A new registry with its own helpers, templates and options."""
    return Registry(options)


def config(key: str, *value: Any) -> Any:
    return _default.config(key, *value)


def compile(source: str) -> CompiledTemplate:
    return _default.compile(source)


def render(source_or_key: str, data: Any = None, helpers: Mapping[str, Any] | None = None) -> str:
    return _default.render(source_or_key, data, helpers)


def add_helper(name: str, fn: Callable[..., Any]) -> None:
    _default.add_helper(name, fn)


def add_template(name: str, source: str) -> CompiledTemplate:
    return _default.add_template(name, source)


def find_fields(source: str, known: Iterable[str] | None = None) -> list[str]:
    return _default.fields(source, known)


def debug() -> Mapping[str, CompiledTemplate]:
    return _default.debug()


__all__ = [
    "CompiledTemplate",
    "Registry",
    "Settings",
    "TemplateOptions",
    "TemplateSyntaxError",
    "UnknownOptionError",
    "add_helper",
    "add_template",
    "compile",
    "config",
    "debug",
    "default_registry",
    "find_fields",
    "instance",
    "render",
    "settings",
]
