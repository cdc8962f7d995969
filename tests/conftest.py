from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from templater.parsers import Grammar


def write(p: Path, text: str) -> Path:
    """Записывает текст в файл, создавая родительские директории при необходимости."""
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Создаёт файл относительно tmp_path и возвращает его путь."""
    def _write(name: str, text: str) -> Path:
        return write(tmp_path / name, text)
    return _write


@pytest.fixture
def grammar() -> Callable[..., Grammar]:
    """Фабрика грамматики над заданным текстом."""
    def _make(text: str, max_depth: int = 100) -> Grammar:
        return Grammar(text, max_depth=max_depth)
    return _make


@pytest.fixture
def weapons() -> dict:
    """Переменные сквозного сценария с оружием."""
    return {
        "weapons": [
            {
                "name": "Bow",
                "damage": {"from": "1", "to": "6"},
                "type": "project",
            },
            {
                "name": "Knife",
                "damage": {"from": "2", "to": "4"},
                "type": "cut",
                "modificators": ["fire", "ice"],
            },
        ],
    }
