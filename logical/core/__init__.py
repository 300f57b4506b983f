"""
Core: settings, template options and errors.
"""

from logical.core.config import Settings, TemplateOptions, settings
from logical.core.errors import TemplateSyntaxError, UnknownOptionError

__all__ = [
    "Settings",
    "TemplateOptions",
    "settings",
    "TemplateSyntaxError",
    "UnknownOptionError",
]
