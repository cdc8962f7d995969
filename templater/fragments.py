"""
Фрагменты вывода и финальная сборка текста.

Исполнитель превращает блоки шаблона в плоский список фрагментов:
- string: литеральный текст шаблона;
- value: подставленное значение ({{:...}}, {{nl}});
- trim: маркер нулевой ширины с направлением;
- conf: маркер нулевой ширины с настройкой рендеринга.

Постобработка выполняется один раз слева направо с одной текущей
копией опций, поэтому {{conf}} действует на весь последующий вывод,
а не только на свой блок.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Literal, Optional

from .config import SQUASH_MODES, RenderOptions
from .nodes import TrimDirection

logger = logging.getLogger(__name__)

FragmentKind = Literal["string", "value", "trim", "conf"]

_SPACES_RUN = re.compile(r"\s{2,}")
_SPACES_BEFORE_NEWLINE = re.compile(r" +\n")


@dataclass
class Fragment:
    """Один фрагмент вывода."""
    kind: FragmentKind
    content: str = ""
    direction: Optional[TrimDirection] = None  # для trim
    identificator: str = ""                    # для conf
    value: str = ""                            # для conf

    @classmethod
    def string(cls, content: str) -> Fragment:
        return cls(kind="string", content=content)

    @classmethod
    def printed(cls, content: str) -> Fragment:
        return cls(kind="value", content=content)

    @classmethod
    def trim(cls, direction: TrimDirection) -> Fragment:
        return cls(kind="trim", direction=direction)

    @classmethod
    def conf(cls, identificator: str, value: str) -> Fragment:
        return cls(kind="conf", identificator=identificator, value=value)


def merge_strings(fragments: Iterable[Fragment]) -> List[Fragment]:
    """Склеивает соседние string-фрагменты (возвращает новые объекты)."""
    merged: List[Fragment] = []
    for fragment in fragments:
        if fragment.kind == "string" and merged and merged[-1].kind == "string":
            merged[-1].content += fragment.content
        else:
            merged.append(dataclasses.replace(fragment))
    return merged


def squash(text: str) -> str:
    """Схлопывает серии пробельных символов в один пробел и удаляет переводы строк."""
    return _SPACES_RUN.sub(" ", text).replace("\n", "")


def apply_trims(fragments: List[Fragment]) -> None:
    """Применяет trim-маркеры к соседним фрагментам (на месте)."""
    for i, fragment in enumerate(fragments):
        if fragment.kind != "trim":
            continue
        if fragment.direction in ("left", "both") and i > 0:
            fragments[i - 1].content = fragments[i - 1].content.rstrip()
        if fragment.direction in ("right", "both") and i + 1 < len(fragments):
            fragments[i + 1].content = fragments[i + 1].content.lstrip()


def render_fragments(fragments: Iterable[Fragment], options: Optional[RenderOptions] = None) -> str:
    """
    Собирает итоговый текст из фрагментов.

    Порядок: склейка строк → trim-маркеры → conf/squash слева направо →
    обрезка краёв первого и последнего фрагментов (только string) → конкатенация →
    (опционально) удаление пробелов перед переводом строки.

    Args:
        fragments: Фрагменты в порядке вывода
        options: Начальные опции рендеринга
    """
    options = options or RenderOptions()
    current = dataclasses.replace(options)

    merged = merge_strings(fragments)
    apply_trims(merged)

    last = len(merged) - 1
    parts: List[str] = []
    for i, fragment in enumerate(merged):
        content = fragment.content
        if fragment.kind == "conf":
            current = _apply_conf(current, fragment)
        elif fragment.kind == "string":
            if current.squash == "on":
                content = squash(content)
            # края обрезаются только у текста шаблона, значения выводятся как есть
            if i == 0:
                content = content.lstrip()
            if i == last:
                content = content.rstrip()
        parts.append(content)

    output = "".join(parts)
    if options.trim_end_line:
        output = _SPACES_BEFORE_NEWLINE.sub("\n", output)
    return output


def _apply_conf(current: RenderOptions, fragment: Fragment) -> RenderOptions:
    if fragment.identificator != "squash":
        logger.warning(f"Ignoring unknown conf '{fragment.identificator}'")
        return current
    if fragment.value not in SQUASH_MODES:
        logger.warning(f"Ignoring unsupported squash value '{fragment.value}'")
        return current
    return dataclasses.replace(current, squash=fragment.value)


__all__ = [
    "Fragment",
    "FragmentKind",
    "merge_strings",
    "squash",
    "apply_trims",
    "render_fragments",
]
