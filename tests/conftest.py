from collections.abc import Iterator

import pytest

import logical
from logical.core.config import TemplateOptions
from logical.engines.sandbox import clear_code_cache
from logical.registry import Registry


@pytest.fixture
def registry() -> Registry:
    """A registry with library defaults, independent of LOGICAL_* env vars."""
    return Registry(TemplateOptions())


@pytest.fixture
def default_registry() -> Iterator[Registry]:
    """The process-wide registry, restored after the test."""
    reg = logical.default_registry()
    helpers = dict(reg.helpers)
    templates = dict(reg.templates)
    options = reg.options.model_copy()
    reg.options = TemplateOptions()
    try:
        yield reg
    finally:
        reg.helpers.clear()
        reg.helpers.update(helpers)
        reg.templates.clear()
        reg.templates.update(templates)
        reg.options = options


@pytest.fixture(autouse=True)
def _fresh_code_cache() -> Iterator[None]:
    clear_code_cache()
    yield
    clear_code_cache()
