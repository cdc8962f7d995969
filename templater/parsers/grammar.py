"""
Сборка грамматики.

Grammar владеет курсором и экземплярами всех правил, связывая
взаимно-рекурсивные парсеры друг с другом, и ограничивает глубину
вложенности разбора.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Tuple

from .blocks import (
    BlocksParser,
    ConfParser,
    DirectiveParser,
    ForParser,
    IfParser,
    NlParser,
    PrintParser,
    SetParser,
    TrimParser,
)
from .expressions import (
    ArgParser,
    ArrayParser,
    ConditionParser,
    MethodParser,
    ParamParser,
    VariableParser,
)
from .lexical import CLOSE_SYMBOLS
from ..errors import NestingTooDeepError
from ..nodes import Condition, TemplateAST
from ..reader import SourceReader

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100


class Grammar:
    """
    Набор связанных парсеров над одним исходным текстом.

    Экземпляр одноразовый: один Grammar на один разбор.
    """

    def __init__(self, text: str, max_depth: int = DEFAULT_MAX_DEPTH):
        self.reader = SourceReader(text)
        self.max_depth = max_depth
        self._depth = 0

        # Выражения
        self.arg = ArgParser(self)
        self.array = ArrayParser(self)
        self.variable = VariableParser(self)
        self.param = ParamParser(self)
        self.method = MethodParser(self)
        self.condition = ConditionParser(self)

        # Блоки (порядок directives задаёт приоритет выбора)
        self.blocks = BlocksParser(self)
        self.directives: Tuple[DirectiveParser, ...] = (
            IfParser(self),
            ForParser(self),
            SetParser(self),
            TrimParser(self),
            NlParser(self),
            PrintParser(self),
            ConfParser(self),
        )

    @contextmanager
    def nested(self) -> Iterator[None]:
        """
        Входит на один уровень вложенности.

        Raises:
            NestingTooDeepError: При превышении max_depth
        """
        self._depth += 1
        try:
            if self._depth > self.max_depth:
                raise self.reader.error(
                    f"Template is too deeply nested (limit is {self.max_depth})",
                    1,
                    error_cls=NestingTooDeepError,
                )
            yield
        finally:
            self._depth -= 1

    @contextmanager
    def _stack_guard(self) -> Iterator[None]:
        """
        Переводит исчерпание стека интерпретатора в NestingTooDeepError.

        Срабатывает, когда max_depth задан выше, чем позволяет
        sys.getrecursionlimit().
        """
        try:
            yield
        except RecursionError:
            logger.debug(f"Recursion limit hit at offset {self.reader.offset}")
            raise self.reader.error(
                "Template is too deeply nested for the interpreter stack",
                1,
                error_cls=NestingTooDeepError,
            ) from None

    def parse_template(self) -> TemplateAST:
        """Разбирает весь текст как последовательность блоков."""
        with self._stack_guard():
            ast = self.blocks.parse()
        if self.reader.remaining:
            # Последовательность остановилась на завершающем теге без пары
            end = self.reader.text.find(CLOSE_SYMBOLS, self.reader.offset)
            length = end + len(CLOSE_SYMBOLS) - self.reader.offset if end >= 0 else self.reader.remaining
            raise self.reader.error(
                f'Unmatched end directive "{self.reader.peek(length)}"', length
            )
        logger.debug(f"Parsed template -> {len(ast)} top-level nodes")
        return ast

    def parse_condition(self) -> Condition:
        """Разбирает весь текст как одно условие."""
        with self._stack_guard():
            condition = self.condition.parse()
            logger.debug(f"Parsed condition -> {condition}")
        self.condition.skip_spaces()
        if self.reader.remaining:
            raise self.reader.error(
                f'Unexpected "{self.reader.peek(10)}" after condition',
                min(10, self.reader.remaining),
            )
        return condition


__all__ = ["Grammar", "DEFAULT_MAX_DEPTH"]
