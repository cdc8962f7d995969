"""
Функции-трансформеры по умолчанию.

Доступны в любом шаблоне; одноимённые функции вызывающего кода
имеют приоритет.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .values import stringify


def length(value: Any, params: Dict[str, str]) -> str:
    """Длина строки или количество элементов словаря/списка."""
    if isinstance(value, str):
        return str(len(value))
    if isinstance(value, (Mapping, list, tuple)):
        return str(len(value))
    return str(len(stringify(value)))


def replace(value: Any, params: Dict[str, str]) -> str:
    """Заменяет первое вхождение from на to."""
    return stringify(value).replace(params.get("from", ""), params.get("to", ""), 1)


def match(value: Any, params: Dict[str, str]) -> str:
    """
    Выбирает разделитель по позиции элемента в последовательности.

    Параметры: length (длина последовательности), first, middle, last.
    Позиция задаётся строковым значением индекса; последний индекс равен length - 1.

    - без last: first для "0" (если это не последний индекс), иначе middle;
    - без first: last для последнего индекса (если это не "0"), иначе middle;
    - иначе: first для "0", last для последнего индекса, middle для остальных.
    """
    position = stringify(value)
    end = _last_index(params.get("length", ""))
    first = params.get("first")
    middle = params.get("middle", "")
    last = params.get("last")

    if last is None:
        if position == "0" and position != end:
            return first or ""
        return middle
    if first is None:
        if position != "0" and position == end:
            return last
        return middle
    if position == "0":
        return first
    if position == end:
        return last
    return middle


def case(value: Any, params: Dict[str, str]) -> Any:
    """Подстановка по равенству: value == on → then, иначе else (если задан) или value."""
    if value == params.get("on"):
        return params.get("then", "")
    if "else" in params:
        return params["else"]
    return value


def _last_index(length_param: str) -> Optional[str]:
    text = length_param.strip()
    if not text:
        return "-1"
    try:
        number = float(text) - 1
    except ValueError:
        return None
    return str(int(number)) if number.is_integer() else str(number)


DEFAULT_METHODS = {
    "length": length,
    "replace": replace,
    "match": match,
    "case": case,
}


__all__ = ["DEFAULT_METHODS", "length", "replace", "match", "case"]
