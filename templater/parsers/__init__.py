"""
Слой грамматики: парсеры с рекурсивным спуском поверх SourceReader.
"""

from __future__ import annotations

from .grammar import DEFAULT_MAX_DEPTH, Grammar

__all__ = ["Grammar", "DEFAULT_MAX_DEPTH"]
