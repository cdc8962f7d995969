"""
Исполнитель шаблона.

Обходит AST, вычисляя значения относительно стека областей видимости
и реестра функций-трансформеров. В режиме render возвращает итоговый текст
(через список фрагментов и постобработку), в режиме check булево значение.
"""

from __future__ import annotations

import logging
import math
import re
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Union, cast

from .config import RenderOptions, Variables
from .errors import EvaluationError, NestingTooDeepError
from .fragments import Fragment, render_fragments
from .nodes import (
    ArgCondition,
    ArgNode,
    ArraySubtype,
    BinaryCondition,
    BracketsCondition,
    CompareCondition,
    Condition,
    ConditionType,
    ConfNode,
    ForNode,
    IfNode,
    InCondition,
    LiteralNode,
    MethodNode,
    NlNode,
    PrintNode,
    SetNode,
    TemplateNode,
    TextNode,
    TrimNode,
    VariableNode,
)
from .reader import SourceReader
from .values import is_truthy, stringify

logger = logging.getLogger(__name__)

# Функция-трансформер: (значение, параметры) -> новое значение
Method = Callable[[Any, Dict[str, str]], Any]
Methods = Mapping[str, Method]

_MISSING = object()


class ScopeStack:
    """
    Стек областей видимости.

    Нижний кадр содержит переменные вызывающего кода (только чтение),
    над ним лежит изначально пустой кадр верхнего уровня.
    Поиск идёт от внутреннего кадра к внешнему.
    """

    def __init__(self, variables: Optional[Mapping[str, Any]] = None):
        self.frames: List[Mapping[str, Any]] = [variables or {}, {}]

    @property
    def depth(self) -> int:
        return len(self.frames)

    @property
    def current(self) -> Dict[str, Any]:
        """Самый внутренний кадр (в него пишет set)."""
        return cast(Dict[str, Any], self.frames[-1])

    @contextmanager
    def frame(self, values: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """Добавляет кадр на время блока; снимает его при любом выходе."""
        frame: Dict[str, Any] = dict(values or {})
        self.frames.append(frame)
        try:
            yield frame
        finally:
            self.frames.pop()

    def lookup(self, root: str, steps: Sequence[Callable[[], str]]) -> Any:
        """
        Ищет значение пути root + steps.

        Если в кадре путь не разрешается (нет ключа на любом шаге),
        поиск продолжается в следующем внешнем кадре; если путь
        не найден ни в одном кадре, возвращается пустая строка.

        Args:
            root: Корневой идентификатор
            steps: Ленивые вычислители ключей шагов пути
        """
        for frame in reversed(self.frames):
            value = frame.get(root, _MISSING)
            for step in steps:
                if value is _MISSING:
                    break
                value = _step_into(value, step())
            if value is not _MISSING and value is not None:
                return value
        return ""


def _step_into(container: Any, key: str) -> Any:
    """Один шаг пути: словарь по строковому ключу, список по числовому."""
    if isinstance(container, Mapping):
        value = container.get(key, _MISSING)
    elif isinstance(container, (list, tuple)):
        if not (key.isascii() and key.isdecimal()) or int(key) >= len(container):
            return _MISSING
        value = container[int(key)]
    else:
        return _MISSING
    return _MISSING if value is None else value


class Executor:
    """
    Интерпретатор AST шаблона.

    Экземпляр рассчитан на один вызов render()/check(): он владеет
    собственным стеком областей видимости.
    """

    def __init__(
        self,
        variables: Optional[Variables] = None,
        methods: Optional[Methods] = None,
        options: Optional[RenderOptions] = None,
        source: Optional[str] = None,
    ):
        """
        Args:
            variables: Переменные вызывающего кода
            methods: Реестр функций-трансформеров
            options: Начальные опции рендеринга
            source: Исходный текст шаблона (для диагностики)
        """
        self.scopes = ScopeStack(variables)
        self.methods: Methods = methods or {}
        self.options = options or RenderOptions()
        self.source = source

        self._block_handlers: Dict[type, Callable[[Any], List[Fragment]]] = {
            TextNode: self._eval_text,
            IfNode: self._eval_if,
            ForNode: self._eval_for,
            SetNode: self._eval_set,
            TrimNode: self._eval_trim,
            NlNode: self._eval_nl,
            PrintNode: self._eval_print,
            ConfNode: self._eval_conf,
        }

    # ---- Публичный API ----

    def render(self, blocks: Sequence[TemplateNode]) -> str:
        """Вычисляет блоки и собирает итоговый текст."""
        with self._stack_guard():
            fragments = self.eval_blocks(blocks)
        logger.debug(f"Rendering {len(fragments)} fragments")
        return render_fragments(fragments, self.options)

    def check(self, condition: Condition) -> bool:
        """Вычисляет условие."""
        with self._stack_guard():
            return self.eval_condition(condition)

    @contextmanager
    def _stack_guard(self) -> Iterator[None]:
        """Переводит исчерпание стека при обходе AST в NestingTooDeepError."""
        try:
            yield
        except RecursionError:
            message = "Template is too deeply nested for the interpreter stack"
            raise SourceReader(self.source or "").error(
                message, 1, error_cls=NestingTooDeepError
            ) from None

    # ---- Значения ----

    def eval_arg(self, node: ArgNode) -> Any:
        """Базовое значение аргумента, пропущенное через конвейер методов."""
        if isinstance(node.value, LiteralNode):
            value: Any = node.value.text
        else:
            value = self.eval_variable(node.value)
        for method in node.methods:
            value = self.eval_method(method, value)
        return value

    def eval_arg_as_string(self, node: ArgNode) -> str:
        return stringify(self.eval_arg(node))

    def eval_variable(self, node: VariableNode) -> Any:
        steps = [self._step_key(part) for part in node.parts]
        return self.scopes.lookup(node.root, steps)

    def _step_key(self, part: Union[str, ArgNode]) -> Callable[[], str]:
        if isinstance(part, str):
            return lambda: part
        cache: List[str] = []

        def compute() -> str:
            if not cache:
                cache.append(self.eval_arg_as_string(part))
            return cache[0]

        return compute

    def eval_method(self, node: MethodNode, value: Any) -> Any:
        """
        Вызывает функцию-трансформер.

        Raises:
            EvaluationError: Если функция не зарегистрирована
        """
        method = self.methods.get(node.function)
        if method is None:
            message = f'Unknown function "{node.function}"'
            context = None
            if self.source is not None:
                reader = SourceReader(self.source)
                context = reader.format_error(message, len(node.function), offset=node.offset)
            raise EvaluationError(message, function=node.function, context=context)

        params: Dict[str, str] = {}
        for param in node.params:
            params[param.key] = self.eval_arg_as_string(param.value) if param.value is not None else ""
        return method(value, params)

    # ---- Условия ----

    def eval_condition(self, condition: Condition) -> bool:
        """
        Вычисляет условие.

        and/or вычисляют обе стороны всегда (без короткого замыкания).
        """
        condition_type = condition.get_type()

        if condition_type == ConditionType.ARG:
            return is_truthy(self.eval_arg(cast(ArgCondition, condition).arg))
        elif condition_type == ConditionType.BRACKETS:
            return self.eval_condition(cast(BracketsCondition, condition).condition)
        elif condition_type == ConditionType.AND:
            binary = cast(BinaryCondition, condition)
            left = self.eval_condition(binary.left)
            right = self.eval_condition(binary.right)
            return left and right
        elif condition_type == ConditionType.OR:
            binary = cast(BinaryCondition, condition)
            left = self.eval_condition(binary.left)
            right = self.eval_condition(binary.right)
            return left or right
        elif condition_type == ConditionType.EQ:
            compare = cast(CompareCondition, condition)
            equal = self.eval_arg(compare.left) == self.eval_arg(compare.right)
            return equal != compare.negate
        elif condition_type == ConditionType.LIKE:
            compare = cast(CompareCondition, condition)
            left_text = self.eval_arg_as_string(compare.left)
            pattern = like_pattern(self.eval_arg_as_string(compare.right))
            return (pattern.fullmatch(left_text) is not None) != compare.negate
        elif condition_type == ConditionType.IN:
            membership = cast(InCondition, condition)
            value = self.eval_arg(membership.arg)
            items = [self.eval_arg(item) for item in membership.items]
            return (value in items) != membership.negate
        else:
            raise EvaluationError(f"Unknown condition type: {condition_type}")

    # ---- Блоки ----

    def eval_blocks(self, blocks: Sequence[TemplateNode]) -> List[Fragment]:
        fragments: List[Fragment] = []
        for block in blocks:
            fragments.extend(self.eval_block(block))
        return fragments

    def eval_block(self, block: TemplateNode) -> List[Fragment]:
        handler = self._block_handlers.get(type(block))
        if handler is None:
            raise EvaluationError(f"Unknown block type: {type(block).__name__}")
        return handler(block)

    def _eval_text(self, node: TextNode) -> List[Fragment]:
        return [Fragment.string(node.text)]

    def _eval_if(self, node: IfNode) -> List[Fragment]:
        if not self.eval_condition(node.condition):
            return []
        with self.scopes.frame():
            return self.eval_blocks(node.blocks)

    def _eval_for(self, node: ForNode) -> List[Fragment]:
        values: Iterable[Any]
        if isinstance(node.subtype, ArraySubtype):
            values = [self.eval_arg(item) for item in node.subtype.items]
        else:
            values = self._range_values(node)

        fragments: List[Fragment] = []
        for value in values:
            with self.scopes.frame({node.identificator: value}):
                fragments.extend(self.eval_blocks(node.blocks))
        return fragments

    def _range_values(self, node: ForNode) -> Iterator[str]:
        start = _to_number(self.eval_arg(node.subtype.start))  # type: ignore[union-attr]
        stop = _to_number(self.eval_arg(node.subtype.stop))  # type: ignore[union-attr]
        if start is None or stop is None:
            logger.warning(f"Non-numeric range bound in loop '{node.identificator}', skipping")
            return

        current = start
        while current < stop:
            yield _format_number(current)
            current += 1

    def _eval_set(self, node: SetNode) -> List[Fragment]:
        self.scopes.current[node.identificator] = self.eval_arg(node.arg)
        return []

    def _eval_trim(self, node: TrimNode) -> List[Fragment]:
        return [Fragment.trim(node.direction)]

    def _eval_nl(self, node: NlNode) -> List[Fragment]:
        return [Fragment.printed("\n")]

    def _eval_print(self, node: PrintNode) -> List[Fragment]:
        return [Fragment.printed(self.eval_arg_as_string(node.arg))]

    def _eval_conf(self, node: ConfNode) -> List[Fragment]:
        return [Fragment.conf(node.identificator, self.eval_arg_as_string(node.arg))]


def like_pattern(pattern: str) -> re.Pattern[str]:
    """Шаблон like: % совпадает с любой последовательностью, остальное буквально."""
    return re.compile(".*".join(re.escape(chunk) for chunk in pattern.split("%")), re.DOTALL)


def _to_number(value: Any) -> Optional[Union[int, float]]:
    text = stringify(value).strip()
    if not text:
        return 0
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _format_number(number: Union[int, float]) -> str:
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


__all__ = ["Executor", "ScopeStack", "Method", "Methods", "like_pattern"]
