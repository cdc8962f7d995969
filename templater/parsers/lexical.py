"""
Лексические примитивы.

Небольшие парсеры поверх курсора: чтение до стоп-символа, строковые
литералы, идентификаторы, фиксированные токены директив
({{name, }}, {{/name}}) и распознавание неизвестных директив.
"""

from __future__ import annotations

import re
from typing import Pattern

from .base import BaseParser
from ..nodes import LiteralNode
from ..reader import SourceReader

OPEN_SYMBOLS = "{{"
CLOSE_SYMBOLS = "}}"
END_MARK = "/"
ESCAPE_SYMBOL = "\\"
QUOTES = ('"', "'")

_IDENTIFIER_START = re.compile(r"[A-Za-z_]")
_IDENTIFIER_CHAR = re.compile(r"[A-Za-z_0-9]")


class StringParser(BaseParser[str]):
    """Читает символы до первого символа, подходящего под stop (или до конца)."""

    def __init__(self, reader: SourceReader, stop: Pattern[str]):
        super().__init__(reader)
        self.stop = stop

    def parse(self) -> str:
        return self.read_while(lambda _: self.stop.match(self.reader.peek()) is None)


class TextLiteralParser(BaseParser[LiteralNode]):
    """
    Строковый литерал в одинарных или двойных кавычках.

    Обратный слеш экранирует любой следующий символ: сам слеш удаляется,
    следующий символ берётся как есть (\\" -> ", \\\\ -> \\).
    """

    def test(self) -> bool:
        return self.reader.peek() in QUOTES

    def parse(self) -> LiteralNode:
        start = self.reader.offset
        quote = self.reader.peek()
        if quote not in QUOTES:
            raise self.reader.error(f'Expected quote but found "{quote}"', 1)
        self.reader.consume()

        chars = []
        while True:
            if not self.reader.remaining:
                raise self.reader.error(
                    "Unterminated text literal", 1, offset=start - self.reader.offset
                )
            char = self.reader.consume()
            if char == quote:
                break
            if char == ESCAPE_SYMBOL:
                if not self.reader.remaining:
                    continue
                char = self.reader.consume()
            chars.append(char)

        return LiteralNode(text="".join(chars))


class IdentifierParser(BaseParser[str]):
    """Идентификатор: [A-Za-z_][A-Za-z_0-9]*. Возвращает пустую строку, если его нет."""

    def test(self) -> bool:
        return _IDENTIFIER_START.match(self.reader.peek()) is not None

    def parse(self) -> str:
        if not self.test():
            return ""
        return self.reader.consume() + self.read_while(
            lambda _: _IDENTIFIER_CHAR.match(self.reader.peek()) is not None
        )


class OpenDirectiveParser(BaseParser[str]):
    """Открывающий токен директивы: {{name (для печати {{:)."""

    def __init__(self, reader: SourceReader, directive: str):
        super().__init__(reader)
        self.directive = directive
        self.token = OPEN_SYMBOLS + directive

    def test(self) -> bool:
        return self.reader.peek(len(self.token)) == self.token

    def parse(self) -> str:
        expect_token(self.reader, self.token, "start directive")
        return self.directive


class CloseDirectiveParser(BaseParser[str]):
    """Закрывающий токен директивы: }}"""

    def test(self) -> bool:
        return self.reader.peek(len(CLOSE_SYMBOLS)) == CLOSE_SYMBOLS

    def parse(self) -> str:
        return expect_token(self.reader, CLOSE_SYMBOLS, "close directive")


class EndDirectiveParser(BaseParser[str]):
    """Завершающий тег блока: {{/name}}"""

    def __init__(self, reader: SourceReader, directive: str):
        super().__init__(reader)
        self.directive = directive
        self.token = f"{OPEN_SYMBOLS}{END_MARK}{directive}{CLOSE_SYMBOLS}"

    def test(self) -> bool:
        return self.reader.peek(len(self.token)) == self.token

    def parse(self) -> str:
        expect_token(self.reader, self.token, "end directive")
        return self.directive


class UnknownOpenDirectiveParser(BaseParser[str]):
    """
    Любая открывающая директива {{...

    Используется только для сообщения об ошибке: parse() потребляет
    {{ и имя директивы (до пробела или '}') и возвращает имя.
    """

    def test(self) -> bool:
        return self.reader.peek(len(OPEN_SYMBOLS)) == OPEN_SYMBOLS

    def parse(self) -> str:
        self.reader.consume(len(OPEN_SYMBOLS))
        return self.read_while(lambda _: self.reader.peek() not in (" ", CLOSE_SYMBOLS[0]))


class UnknownEndDirectiveParser(BaseParser[str]):
    """
    Любой завершающий тег {{/...}}.

    Последовательность блоков останавливается на нём, не потребляя,
    и возвращает управление охватывающему if/for.
    """

    def test(self) -> bool:
        return self.reader.peek(len(OPEN_SYMBOLS) + 1) == OPEN_SYMBOLS + END_MARK

    def parse(self) -> str:
        self.reader.consume(len(OPEN_SYMBOLS) + 1)
        name = self.read_while(lambda _: self.reader.peek() != CLOSE_SYMBOLS[0])
        if self.reader.peek(len(CLOSE_SYMBOLS)) == CLOSE_SYMBOLS:
            self.reader.consume(len(CLOSE_SYMBOLS))
        return name


def expect_token(reader: SourceReader, token: str, what: str) -> str:
    """Потребляет фиксированный токен или выбрасывает позиционированную ошибку."""
    found = reader.peek(len(token))
    if found == token:
        return reader.consume(len(token))
    if not found:
        raise reader.error(f'Unexpected end of input: expected {what} "{token}"', 1)
    raise reader.error(
        f'Wrong {what} "{found}", expected "{token}"', len(found)
    )


__all__ = [
    "OPEN_SYMBOLS",
    "CLOSE_SYMBOLS",
    "ESCAPE_SYMBOL",
    "StringParser",
    "TextLiteralParser",
    "IdentifierParser",
    "OpenDirectiveParser",
    "CloseDirectiveParser",
    "EndDirectiveParser",
    "UnknownOpenDirectiveParser",
    "UnknownEndDirectiveParser",
    "expect_token",
]
