"""
Шаблонизатор с директивами {{...}}: подстановка переменных, условия,
циклы, локальные привязки, управление пробелами и конвейеры функций.

Предоставляет две точки входа, render() и check(), и класс Templater
для переиспользования реестра функций.
"""

from __future__ import annotations

from .config import RenderOptions, load_config, load_variables
from .errors import (
    ConfigError,
    EvaluationError,
    NestingTooDeepError,
    ParseError,
    TemplaterError,
)
from .methods import DEFAULT_METHODS
from .processor import Templater, check, render

__all__ = [
    "Templater",
    "render",
    "check",
    "RenderOptions",
    "load_config",
    "load_variables",
    "DEFAULT_METHODS",
    "TemplaterError",
    "ParseError",
    "NestingTooDeepError",
    "EvaluationError",
    "ConfigError",
]
