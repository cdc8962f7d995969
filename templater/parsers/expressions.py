"""
Парсеры выражений: аргументы, переменные, методы, массивы и условия.

Грамматика:
arg        → (text | variable) ("->" method)*
variable   → IDENT ("." IDENT | "[" arg "]")*
method     → IDENT "(" param* ")"
param      → IDENT ("=" arg)?
array      → "[" arg ("," arg)* "]"
condition  → ("(" condition ")" | leaf) (("or" | "and") condition)?
leaf       → arg ("not")? ("eq" arg | "like" arg | "in" array)?

Правая часть and/or разбирается повторным входом в парсер условия целиком,
поэтому `a and b or c` разбирается как `a and (b or c)`.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from .base import GrammarParser
from .lexical import IdentifierParser, TextLiteralParser, expect_token
from ..nodes import (
    ArgCondition,
    ArgNode,
    BinaryCondition,
    BracketsCondition,
    CompareCondition,
    Condition,
    ConditionType,
    InCondition,
    LiteralNode,
    MethodNode,
    ParamNode,
    VariableNode,
)

PIPE_SYMBOLS = "->"


class ArrayParser(GrammarParser[Tuple[ArgNode, ...]]):
    """Литерал массива: [arg, arg, ...] (минимум один элемент)."""

    def test(self) -> bool:
        return self.reader.peek() == "["

    def parse(self) -> Tuple[ArgNode, ...]:
        expect_token(self.reader, "[", "symbol")
        items: List[ArgNode] = []
        while True:
            self.skip_spaces()
            with self.grammar.nested():
                items.append(self.grammar.arg.parse())
            self.skip_spaces()
            if self.reader.peek() != ",":
                break
            self.reader.consume()
        expect_token(self.reader, "]", "symbol")
        return tuple(items)


class VariableParser(GrammarParser[VariableNode]):
    """Путь переменной: корень и шаги .field / [arg] в порядке исходника."""

    def test(self) -> bool:
        return IdentifierParser(self.reader).test()

    def parse(self) -> VariableNode:
        identifier = IdentifierParser(self.reader)
        root = identifier.parse()
        if not root:
            raise self.reader.error("Empty identificator", 1)

        parts: List[Union[str, ArgNode]] = []
        while self._at_step():
            if self.reader.consume() == ".":
                part = identifier.parse()
                if not part:
                    raise self.reader.error("Empty identificator", 1)
                parts.append(part)
            else:
                self.skip_spaces()
                with self.grammar.nested():
                    parts.append(self.grammar.arg.parse())
                self.skip_spaces()
                expect_token(self.reader, "]", "symbol")

        return VariableNode(root=root, parts=tuple(parts))

    def _at_step(self) -> bool:
        # ".." разделяет границы диапазона цикла, это не шаг пути
        if self.reader.peek() == ".":
            return self.reader.peek(2) != ".."
        return self.reader.peek() == "["


class ArgParser(GrammarParser[ArgNode]):
    """Аргумент: литерал или переменная с конвейером методов через ->."""

    def test(self) -> bool:
        return TextLiteralParser(self.reader).test() or IdentifierParser(self.reader).test()

    def parse(self) -> ArgNode:
        self.skip_spaces()
        literal = TextLiteralParser(self.reader)
        value: Union[LiteralNode, VariableNode]
        if literal.test():
            value = literal.parse()
        elif self.grammar.variable.test():
            value = self.grammar.variable.parse()
        elif not self.reader.remaining:
            raise self.reader.error("Unexpected end of input: expected text or variable", 1)
        else:
            found = self.reader.peek()
            raise self.reader.error(f'Expected text or variable but found "{found}"', 1)
        self.skip_spaces()

        methods: List[MethodNode] = []
        while self.reader.peek(len(PIPE_SYMBOLS)) == PIPE_SYMBOLS:
            self.reader.consume(len(PIPE_SYMBOLS))
            self.skip_spaces()
            methods.append(self.grammar.method.parse())
            self.skip_spaces()

        return ArgNode(value=value, methods=tuple(methods))


class ParamParser(GrammarParser[ParamNode]):
    """Параметр метода: key или key=arg."""

    def test(self) -> bool:
        return IdentifierParser(self.reader).test()

    def parse(self) -> ParamNode:
        key = IdentifierParser(self.reader).parse()
        if not key:
            raise self.reader.error("Empty param", 1)
        self.skip_spaces()

        value: Optional[ArgNode] = None
        if self.reader.peek() == "=":
            self.reader.consume()
            self.skip_spaces()
            with self.grammar.nested():
                value = self.grammar.arg.parse()

        return ParamNode(key=key, value=value)


class MethodParser(GrammarParser[MethodNode]):
    """Вызов метода: name(key=arg key2 ...), параметры разделены пробелами."""

    def parse(self) -> MethodNode:
        offset = self.reader.offset
        name = IdentifierParser(self.reader).parse()
        if not name:
            raise self.reader.error("Empty function name", 1)
        self.skip_spaces()
        expect_token(self.reader, "(", "symbol")
        self.skip_spaces()

        params: List[ParamNode] = []
        while self.grammar.param.test():
            params.append(self.grammar.param.parse())
            self.skip_spaces()
        expect_token(self.reader, ")", "symbol")

        return MethodNode(function=name, params=tuple(params), offset=offset)


class ConditionParser(GrammarParser[Condition]):
    """
    Парсер условий с рекурсивным спуском.

    Ключевые слова (not, eq, like, in, or, and) распознаются
    по фиксированному префиксу без токенизации.
    """

    def parse(self) -> Condition:
        with self.grammar.nested():
            return self._parse_condition()

    def _parse_condition(self) -> Condition:
        self.skip_spaces()
        left: Condition
        if self.reader.peek() == "(":
            self.reader.consume()
            self.skip_spaces()
            inner = self.parse()
            self.skip_spaces()
            expect_token(self.reader, ")", "symbol")
            left = BracketsCondition(condition=inner)
        elif self.grammar.arg.test():
            left = self._parse_leaf()
        else:
            raise self.reader.error("Invalid condition", 1)

        self.skip_spaces()
        if self._match_keyword("or"):
            return BinaryCondition(left=left, right=self.parse(), operator=ConditionType.OR)
        if self._match_keyword("and"):
            return BinaryCondition(left=left, right=self.parse(), operator=ConditionType.AND)
        return left

    def _parse_leaf(self) -> Condition:
        arg = self.grammar.arg.parse()
        self.skip_spaces()
        negate = self._match_keyword("not")

        if self._match_keyword("eq"):
            return CompareCondition(
                left=arg, right=self.grammar.arg.parse(), operator=ConditionType.EQ, negate=negate
            )
        if self._match_keyword("like"):
            return CompareCondition(
                left=arg, right=self.grammar.arg.parse(), operator=ConditionType.LIKE, negate=negate
            )
        if self._match_keyword("in"):
            return InCondition(arg=arg, items=self.grammar.array.parse(), negate=negate)

        if negate:
            raise self.reader.error("Expected eq, like or in after not", 1)
        return ArgCondition(arg=arg)

    def _match_keyword(self, keyword: str) -> bool:
        """Проверяет и потребляет ключевое слово вместе с пробелами после него."""
        if self.reader.peek(len(keyword)) != keyword:
            return False
        self.reader.consume(len(keyword))
        self.skip_spaces()
        return True


__all__ = [
    "ArrayParser",
    "VariableParser",
    "ArgParser",
    "ParamParser",
    "MethodParser",
    "ConditionParser",
]
