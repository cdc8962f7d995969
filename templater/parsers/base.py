"""
Базовые классы парсеров грамматики.

Каждое правило грамматики состоит из пары операций:
- test(): дешёвая проверка «могу ли я начать разбор здесь» (только peek);
- parse(): потребляет вход и возвращает узел либо выбрасывает ParseError.

Выбор между альтернативами выполняется только по test(), без отката.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from ..reader import SourceReader

if TYPE_CHECKING:
    from .grammar import Grammar

T = TypeVar("T")


class BaseParser(ABC, Generic[T]):
    """Парсер, работающий напрямую с курсором."""

    def __init__(self, reader: SourceReader):
        self.reader = reader

    def test(self) -> bool:
        """Проверяет, может ли парсер начать разбор с текущей позиции."""
        return True

    def read_while(self, condition: Callable[[str], bool]) -> str:
        """
        Читает символы, пока condition(buffer) истинно и вход не исчерпан.

        Args:
            condition: Предикат от уже прочитанного буфера
        """
        buffer = ""
        while self.reader.remaining and condition(buffer):
            buffer += self.reader.consume()
        return buffer

    def skip_spaces(self) -> str:
        """Пропускает пробельные символы (включая переводы строк)."""
        return self.read_while(lambda _: self.reader.peek().isspace())

    @abstractmethod
    def parse(self) -> T:
        """Разбирает вход и возвращает результат."""
        pass


class GrammarParser(BaseParser[T]):
    """
    Парсер правила грамматики, которому нужны другие правила.

    Взаимные ссылки между правилами разрешаются через общий объект Grammar.
    """

    def __init__(self, grammar: Grammar):
        super().__init__(grammar.reader)
        self.grammar = grammar


__all__ = ["BaseParser", "GrammarParser"]
