"""Exceptions raised by the compiler itself. Errors from template code are never wrapped."""


class TemplateSyntaxError(SyntaxError):
    """Raised when block sugar cannot be matched (stray ``end``/``else``, unclosed block)."""

    def __init__(self, message: str, *, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class UnknownOptionError(KeyError):
    """Raised when reading or writing an option key that does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown template option: {self.key!r}"
