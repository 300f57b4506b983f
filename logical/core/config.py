"""
Library settings and per-registry template options.

``Settings`` reads ``LOGICAL_*`` environment variables (or a ``.env`` file) once
at import; its values seed the defaults of every new ``TemplateOptions``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from logical.core.errors import UnknownOptionError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LOGICAL_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    SANDBOX: bool = True
    SUGAR: bool = True
    EXPRESSION_START: str = Field(default="<%", min_length=1)
    EXPRESSION_END: str = Field(default="%>", min_length=1)

    # Max compiled code objects kept by the evaluator (LRU).
    CODE_CACHE_SIZE: int = Field(default=512, ge=1)

    LOG_LEVEL: str = "WARNING"


settings = Settings()  # type: ignore


class TemplateOptions(BaseModel):
    """Options of one registry. Assignment is validated."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    sandbox: bool = True
    sugar: bool = True
    expression_start: str = Field(default="<%", min_length=1)
    expression_end: str = Field(default="%>", min_length=1)

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "TemplateOptions":
        s = source or settings
        return cls(
            sandbox=s.SANDBOX,
            sugar=s.SUGAR,
            expression_start=s.EXPRESSION_START,
            expression_end=s.EXPRESSION_END,
        )

    def get(self, key: str) -> Any:
        if key not in type(self).model_fields:
            raise UnknownOptionError(key)
        return getattr(self, key)

    def set(self, key: str, value: Any) -> None:
        if key not in type(self).model_fields:
            raise UnknownOptionError(key)
        setattr(self, key, value)
