"""
AST-узлы шаблона.

Определяет неизменяемую иерархию классов узлов, которые строит
слой грамматики и обходит исполнитель. Узлы содержат только данные, без поведения,
кроме строкового представления для отладки.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Tuple, Union


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


# ---- Значения ----

@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Встречается только на уровне последовательности блоков
    и выводится в результат как есть (с учётом squash/trim).
    """
    text: str


@dataclass(frozen=True)
class LiteralNode(TemplateNode):
    """Строковый литерал в кавычках: "text" или 'text'."""
    text: str

    def __str__(self) -> str:
        return '"' + self.text.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(frozen=True)
class VariableNode(TemplateNode):
    """
    Ссылка на переменную: root.field[index]...

    Шаг пути: имя поля (str), либо вычисляемый индекс (ArgNode).
    """
    root: str
    parts: Tuple[Union[str, ArgNode], ...] = ()

    def __str__(self) -> str:
        chunks = [self.root]
        for part in self.parts:
            chunks.append(f".{part}" if isinstance(part, str) else f"[{part}]")
        return "".join(chunks)


@dataclass(frozen=True)
class ParamNode(TemplateNode):
    """Именованный параметр вызова метода: key или key=Arg."""
    key: str
    value: Optional[ArgNode] = None

    def __str__(self) -> str:
        return self.key if self.value is None else f"{self.key}={self.value}"


@dataclass(frozen=True)
class MethodNode(TemplateNode):
    """
    Вызов функции-трансформера: name(key=Arg ...).

    offset: позиция имени функции в исходнике, используется
    для диагностики неизвестных функций.
    """
    function: str
    params: Tuple[ParamNode, ...] = ()
    offset: int = 0

    def __str__(self) -> str:
        return f"{self.function}({' '.join(str(p) for p in self.params)})"


@dataclass(frozen=True)
class ArgNode(TemplateNode):
    """
    Производитель значения: литерал или переменная + конвейер методов.

    Методы применяются слева направо, каждый получает результат предыдущего.
    """
    value: Union[LiteralNode, VariableNode]
    methods: Tuple[MethodNode, ...] = ()

    def __str__(self) -> str:
        return " -> ".join([str(self.value), *(str(m) for m in self.methods)])


# ---- Условия ----

class ConditionType(Enum):
    """Типы условий."""
    ARG = "arg"
    BRACKETS = "brackets"
    AND = "and"
    OR = "or"
    EQ = "eq"
    LIKE = "like"
    IN = "in"


@dataclass(frozen=True)
class Condition(TemplateNode, ABC):
    """Базовый абстрактный класс для всех условий."""

    @abstractmethod
    def get_type(self) -> ConditionType:
        """Возвращает тип условия."""
        pass

    def __str__(self) -> str:
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass(frozen=True)
class ArgCondition(Condition):
    """Проверка истинности значения: истинно, если строковое значение непустое."""
    arg: ArgNode

    def get_type(self) -> ConditionType:
        return ConditionType.ARG

    def _to_string(self) -> str:
        return str(self.arg)


@dataclass(frozen=True)
class BracketsCondition(Condition):
    """Группа условий в скобках: (condition)"""
    condition: Condition

    def get_type(self) -> ConditionType:
        return ConditionType.BRACKETS

    def _to_string(self) -> str:
        return f"({self.condition})"


@dataclass(frozen=True)
class BinaryCondition(Condition):
    """
    Логическая операция: left and|or right

    Правая часть разбирается рекурсивным входом в парсер условия целиком,
    поэтому обе операции правоассоциативны.
    """
    left: Condition
    right: Condition
    operator: ConditionType  # AND или OR

    def get_type(self) -> ConditionType:
        return self.operator

    def _to_string(self) -> str:
        return f"{self.left} {self.operator.value} {self.right}"


@dataclass(frozen=True)
class CompareCondition(Condition):
    """Сравнение: left [not] eq|like right"""
    left: ArgNode
    right: ArgNode
    operator: ConditionType  # EQ или LIKE
    negate: bool = False

    def get_type(self) -> ConditionType:
        return self.operator

    def _to_string(self) -> str:
        op = f"not {self.operator.value}" if self.negate else self.operator.value
        return f"{self.left} {op} {self.right}"


@dataclass(frozen=True)
class InCondition(Condition):
    """Проверка вхождения: arg [not] in [a, b, ...]"""
    arg: ArgNode
    items: Tuple[ArgNode, ...]
    negate: bool = False

    def get_type(self) -> ConditionType:
        return ConditionType.IN

    def _to_string(self) -> str:
        op = "not in" if self.negate else "in"
        return f"{self.arg} {op} [{', '.join(str(i) for i in self.items)}]"


# ---- Директивы ----

TrimDirection = Literal["left", "right", "both"]


@dataclass(frozen=True)
class IfNode(TemplateNode):
    """Блок {{if condition}}...{{/if}}"""
    condition: Condition
    blocks: Tuple[TemplateNode, ...] = ()


@dataclass(frozen=True)
class RangeSubtype:
    """Числовой диапазон цикла: "from".."to" (полуоткрытый)."""
    start: ArgNode
    stop: ArgNode


@dataclass(frozen=True)
class ArraySubtype:
    """Явный массив цикла: [a, b, ...]"""
    items: Tuple[ArgNode, ...]


@dataclass(frozen=True)
class ForNode(TemplateNode):
    """Блок {{for id in A..B}}...{{/for}} или {{for id of [..]}}...{{/for}}"""
    identificator: str
    subtype: Union[RangeSubtype, ArraySubtype]
    blocks: Tuple[TemplateNode, ...] = ()


@dataclass(frozen=True)
class SetNode(TemplateNode):
    """Директива {{set id = Arg}}"""
    identificator: str
    arg: ArgNode


@dataclass(frozen=True)
class TrimNode(TemplateNode):
    """Директива {{trim}} / {{trim left|right|both}}"""
    direction: TrimDirection = "both"


@dataclass(frozen=True)
class NlNode(TemplateNode):
    """Директива {{nl}}: выводит один перевод строки."""
    pass


@dataclass(frozen=True)
class PrintNode(TemplateNode):
    """Директива {{:Arg}}"""
    arg: ArgNode


@dataclass(frozen=True)
class ConfNode(TemplateNode):
    """Директива {{conf key = Arg}} (значимый ключ пока только squash)."""
    identificator: str
    arg: ArgNode


# Алиас для последовательности блоков (AST)
TemplateAST = Tuple[TemplateNode, ...]


__all__ = [
    "TemplateNode",
    "TextNode",
    "LiteralNode",
    "VariableNode",
    "ParamNode",
    "MethodNode",
    "ArgNode",
    "ConditionType",
    "Condition",
    "ArgCondition",
    "BracketsCondition",
    "BinaryCondition",
    "CompareCondition",
    "InCondition",
    "TrimDirection",
    "IfNode",
    "RangeSubtype",
    "ArraySubtype",
    "ForNode",
    "SetNode",
    "TrimNode",
    "NlNode",
    "PrintNode",
    "ConfNode",
    "TemplateAST",
]
