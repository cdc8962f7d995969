"""
Модель значений шаблона.

Значение: строка, словарь строк/значений или список значений.
Функции-трансформеры могут вернуть и другие скаляры; при выводе
и сравнении по строке все значения приводятся к строке через stringify().
"""

from __future__ import annotations

import json
from typing import Any, Mapping


def stringify(value: Any) -> str:
    """
    Строковое представление значения.

    - str выводится как есть;
    - список: элементы через запятую;
    - словарь: компактный JSON;
    - None: пустая строка, bool: "true"/"false".
    """
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=stringify)
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    return str(value)


def is_truthy(value: Any) -> bool:
    """Значение истинно, если его строковое представление непустое."""
    return stringify(value) != ""


__all__ = ["stringify", "is_truthy"]
