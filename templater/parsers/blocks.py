"""
Парсеры директив и последовательности блоков.

Последовательность блоков читает текст и директивы, выбирая директиву
по test() в фиксированном порядке: if, for, set, trim, nl, print, conf.
На неизвестном завершающем теге {{/...}} она останавливается, не потребляя его,
и возвращает управление охватывающему парсеру if/for.
"""

from __future__ import annotations

import re
from typing import List, Tuple, Union

from .base import GrammarParser
from .lexical import (
    ESCAPE_SYMBOL,
    CloseDirectiveParser,
    EndDirectiveParser,
    IdentifierParser,
    OpenDirectiveParser,
    StringParser,
    UnknownEndDirectiveParser,
    UnknownOpenDirectiveParser,
    expect_token,
)
from ..nodes import (
    ArraySubtype,
    ConfNode,
    ForNode,
    IfNode,
    NlNode,
    PrintNode,
    RangeSubtype,
    SetNode,
    TemplateNode,
    TextNode,
    TrimNode,
)

_TEXT_STOP = re.compile(r"[{\\]")

RANGE_SYMBOLS = ".."
TRIM_DIRECTIONS = ("left", "right", "both")


class DirectiveParser(GrammarParser):
    """Директива вида {{name ...}}: test() проверяет открывающий токен."""

    name: str = ""

    def __init__(self, grammar):
        super().__init__(grammar)
        self.open = OpenDirectiveParser(self.reader, self.name)
        self.close = CloseDirectiveParser(self.reader)

    def test(self) -> bool:
        return self.open.test()

    def parse_identificator(self) -> str:
        identificator = IdentifierParser(self.reader).parse()
        if not identificator:
            raise self.reader.error("Empty identificator", 1)
        return identificator


class BlocksParser(GrammarParser[Tuple[TemplateNode, ...]]):
    """Последовательность текста и директив."""

    def parse(self) -> Tuple[TemplateNode, ...]:
        blocks: List[TemplateNode] = []
        text_parser = StringParser(self.reader, _TEXT_STOP)
        unknown_end = UnknownEndDirectiveParser(self.reader)
        unknown_open = UnknownOpenDirectiveParser(self.reader)

        while self.reader.remaining:
            prefix = ""
            if self.reader.peek() == ESCAPE_SYMBOL:
                # \ + два следующих символа выводятся как есть (для \{{)
                self.reader.consume()
                prefix = self.reader.consume(2)
            text = prefix + text_parser.parse()
            if text:
                blocks.append(TextNode(text=text))
                continue

            directive = next((d for d in self.grammar.directives if d.test()), None)
            if directive is not None:
                blocks.append(directive.parse())
                continue

            if unknown_end.test():
                break

            if unknown_open.test():
                start = self.reader.offset
                name = unknown_open.parse()
                raise self.reader.error(
                    f'Unknown start directive "{name}"',
                    len(name),
                    offset=start + 2 - self.reader.offset,
                )
            raise self.reader.error(
                f'Unknown "{self.reader.peek(10)}"', min(10, self.reader.remaining)
            )

        return tuple(blocks)


class IfParser(DirectiveParser):
    """{{if condition}}...{{/if}}"""

    name = "if"

    def parse(self) -> IfNode:
        self.open.parse()
        self.skip_spaces()
        condition = self.grammar.condition.parse()
        self.skip_spaces()
        self.close.parse()
        with self.grammar.nested():
            blocks = self.grammar.blocks.parse()
        EndDirectiveParser(self.reader, self.name).parse()
        return IfNode(condition=condition, blocks=blocks)


class ForParser(DirectiveParser):
    """{{for id in A..B}}...{{/for}} | {{for id of [..]}}...{{/for}}"""

    name = "for"

    def parse(self) -> ForNode:
        self.open.parse()
        self.skip_spaces()
        identificator = self.parse_identificator()
        self.skip_spaces()
        subtype = self._parse_subtype()
        self.skip_spaces()
        self.close.parse()
        with self.grammar.nested():
            blocks = self.grammar.blocks.parse()
        EndDirectiveParser(self.reader, self.name).parse()
        return ForNode(identificator=identificator, subtype=subtype, blocks=blocks)

    def _parse_subtype(self) -> Union[RangeSubtype, ArraySubtype]:
        kind = self.reader.peek(2)
        if kind not in ("in", "of"):
            if not kind:
                raise self.reader.error('Unexpected end of input: expected "in" or "of"', 1)
            raise self.reader.error(f'Wrong loop type "{kind}", expected "in" or "of"', len(kind))
        self.reader.consume(2)
        self.skip_spaces()

        if kind == "in":
            start = self.grammar.arg.parse()
            expect_token(self.reader, RANGE_SYMBOLS, "range separator")
            stop = self.grammar.arg.parse()
            return RangeSubtype(start=start, stop=stop)
        return ArraySubtype(items=self.grammar.array.parse())


class SetParser(DirectiveParser):
    """{{set id = arg}}"""

    name = "set"

    def parse(self) -> SetNode:
        identificator, arg = _parse_assignment(self)
        return SetNode(identificator=identificator, arg=arg)


class ConfParser(DirectiveParser):
    """{{conf key = arg}}"""

    name = "conf"

    def parse(self) -> ConfNode:
        identificator, arg = _parse_assignment(self)
        return ConfNode(identificator=identificator, arg=arg)


class PrintParser(DirectiveParser):
    """{{:arg}}"""

    name = ":"

    def parse(self) -> PrintNode:
        self.open.parse()
        self.skip_spaces()
        arg = self.grammar.arg.parse()
        self.skip_spaces()
        self.close.parse()
        return PrintNode(arg=arg)


class TrimParser(DirectiveParser):
    """{{trim}} | {{trim left|right|both}}"""

    name = "trim"

    def parse(self) -> TrimNode:
        self.open.parse()
        self.skip_spaces()
        direction = "both"
        if self.reader.peek() != "}":
            start = self.reader.offset
            direction = IdentifierParser(self.reader).parse()
            if direction not in TRIM_DIRECTIONS:
                raise self.reader.error(
                    f'Wrong trim direction "{direction or self.reader.peek()}"',
                    max(len(direction), 1),
                    offset=start - self.reader.offset,
                )
        self.skip_spaces()
        self.close.parse()
        return TrimNode(direction=direction)  # type: ignore[arg-type]


class NlParser(DirectiveParser):
    """{{nl}}"""

    name = "nl"

    def parse(self) -> NlNode:
        self.open.parse()
        self.skip_spaces()
        self.close.parse()
        return NlNode()


def _parse_assignment(parser: DirectiveParser):
    """Общая часть set/conf: {{name id = arg}}"""
    parser.open.parse()
    parser.skip_spaces()
    identificator = parser.parse_identificator()
    parser.skip_spaces()
    expect_token(parser.reader, "=", "symbol")
    parser.skip_spaces()
    arg = parser.grammar.arg.parse()
    parser.skip_spaces()
    parser.close.parse()
    return identificator, arg


__all__ = [
    "BlocksParser",
    "IfParser",
    "ForParser",
    "SetParser",
    "ConfParser",
    "PrintParser",
    "TrimParser",
    "NlParser",
]
