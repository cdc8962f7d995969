"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from TemplaterError.

Programming errors and exceptions raised by host transform functions
do NOT inherit from TemplaterError; they propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class TemplaterError(Exception):
    """
    Base class for all user-facing errors in templater.

    These errors indicate problems that the template author can fix:
    syntax errors, unknown transforms, invalid configuration.
    """
    pass


class ParseError(TemplaterError):
    """
    Синтаксическая ошибка шаблона.

    Attributes:
        message: Короткое описание ошибки
        row: Строка (начиная с 1)
        column: Колонка (начиная с 1)
        context: Полное сообщение со строкой исходника и подчёркиванием
    """

    def __init__(self, message: str, row: int, column: int, context: Optional[str] = None):
        self.message = message
        self.row = row
        self.column = column
        self.context = context or f"{message} at position {row}:{column}"
        super().__init__(self.context)


class NestingTooDeepError(ParseError):
    """Превышена допустимая глубина вложенности конструкций шаблона."""
    pass


class EvaluationError(TemplaterError):
    """Ошибка при вычислении шаблона (например, неизвестная функция-трансформер)."""

    def __init__(self, message: str, function: str = "", context: Optional[str] = None):
        self.message = message
        self.function = function
        self.context = context or message
        super().__init__(self.context)


class ConfigError(TemplaterError):
    """Ошибка конфигурации, опций рендеринга или файла переменных."""

    def __init__(self, message: str, path: tuple[str, ...] = ()):
        self.path = path
        prefix = f"{'.'.join(path)}: " if path else ""
        super().__init__(prefix + message)


__all__ = [
    "TemplaterError",
    "ParseError",
    "NestingTooDeepError",
    "EvaluationError",
    "ConfigError",
]
