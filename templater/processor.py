"""
Процессор шаблонов.

Публичный API, объединяющий грамматику и исполнитель:
render() превращает текст шаблона в строку, check() вычисляет условие.
Каждый вызов заново разбирает исходный текст; экземпляр Templater
хранит только реестр функций и опции и может переиспользоваться.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from .config import RenderOptions, Variables
from .executor import Executor, Methods
from .methods import DEFAULT_METHODS
from .parsers import Grammar

logger = logging.getLogger(__name__)

OptionsLike = Union[RenderOptions, Mapping[str, Any], None]


class Templater:
    """
    Шаблонизатор с фиксированным реестром функций-трансформеров.
    """

    def __init__(self, methods: Optional[Methods] = None, options: OptionsLike = None):
        """
        Args:
            methods: Функции вызывающего кода (перекрывают функции по умолчанию)
            options: Опции рендеринга по умолчанию для этого экземпляра
        """
        self.methods = {**DEFAULT_METHODS, **(methods or {})}
        self.options = RenderOptions.coerce(options)

    def render(self, text: str, variables: Optional[Variables] = None, options: OptionsLike = None) -> str:
        """
        Рендерит шаблон.

        Args:
            text: Исходный текст шаблона
            variables: Переменные шаблона
            options: Опции вызова (по умолчанию опции экземпляра)

        Returns:
            Итоговый текст

        Raises:
            ParseError: При синтаксической ошибке
            EvaluationError: При вызове неизвестной функции
        """
        render_options = self.options if options is None else RenderOptions.coerce(options)
        ast = Grammar(text, max_depth=render_options.max_depth).parse_template()
        executor = Executor(variables, self.methods, render_options, source=text)
        return executor.render(ast)

    def check(self, text: str, variables: Optional[Variables] = None) -> bool:
        """
        Вычисляет условие.

        Raises:
            ParseError: При синтаксической ошибке
            EvaluationError: При вызове неизвестной функции
        """
        condition = Grammar(text, max_depth=self.options.max_depth).parse_condition()
        executor = Executor(variables, self.methods, self.options, source=text)
        result = executor.check(condition)
        logger.debug(f"Condition evaluated -> {result}")
        return result


def render(
    text: str,
    variables: Optional[Variables] = None,
    methods: Optional[Methods] = None,
    options: OptionsLike = None,
) -> str:
    """Удобная функция: рендер шаблона одним вызовом."""
    return Templater(methods).render(text, variables, options)


def check(text: str, variables: Optional[Variables] = None, methods: Optional[Methods] = None) -> bool:
    """Удобная функция: вычисление условия одним вызовом."""
    return Templater(methods).check(text, variables)


__all__ = ["Templater", "render", "check"]
