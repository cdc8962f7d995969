"""
Курсор по исходному тексту шаблона.

Хранит текст и позицию чтения, отслеживает строку и колонку
для диагностики ошибок. Является единственным источником
позиционированных сообщений об ошибках для всех парсеров.
"""

from __future__ import annotations

from typing import Tuple, Type

from .errors import ParseError


class SourceReader:
    """
    Позиционированный читатель символов.

    Поддерживает просмотр вперёд без потребления (peek)
    и потребляющее чтение (consume) с обновлением строки/колонки.
    """

    def __init__(self, text: str):
        self.text = text
        self.offset = 0
        self.row = 1
        self.column = 1

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def remaining(self) -> int:
        """Количество ещё не прочитанных символов."""
        return len(self.text) - self.offset

    @property
    def position(self) -> Tuple[int, int]:
        """Текущая позиция (строка, колонка), обе начиная с 1."""
        return self.row, self.column

    def peek(self, count: int = 1) -> str:
        """Возвращает следующие count символов без сдвига позиции (у конца текста их может быть меньше)."""
        return self.text[self.offset:self.offset + count]

    def consume(self, count: int = 1) -> str:
        """
        Читает count символов и сдвигает позицию.

        Raises:
            ParseError: Если символов осталось меньше, чем запрошено
        """
        if count > self.remaining:
            raise self.error("Unexpected end of input", 1)

        chunk = self.text[self.offset:self.offset + count]
        self.offset += count
        for char in chunk:
            if char == "\n":
                self.row += 1
                self.column = 1
            else:
                self.column += 1
        return chunk

    def location(self, offset: int = 0) -> Tuple[int, int]:
        """Строка и колонка символа, отстоящего от текущей позиции на offset."""
        target = self._clamp(self.offset + offset)
        row = self.text.count("\n", 0, target) + 1
        column = target - (self.text.rfind("\n", 0, target) + 1) + 1
        return row, column

    def format_error(self, message: str, length: int, offset: int = 0) -> str:
        """
        Формирует сообщение об ошибке с одной строкой контекста.

        Находит строку исходника, содержащую символ position + offset,
        и подчёркивает length символов, начиная с него, знаками '^'.

        Args:
            message: Текст ошибки
            length: Длина подчёркиваемого фрагмента
            offset: Смещение начала фрагмента относительно текущей позиции
        """
        target = self._clamp(self.offset + offset)
        row, column = self.location(offset)

        line_start = self.text.rfind("\n", 0, target) + 1
        line_end = self.text.find("\n", target)
        if line_end < 0:
            line_end = len(self.text)
        line = self.text[line_start:line_end]
        shift = target - line_start

        underline = " " * shift + "^" * max(length, 1)
        return f"{message} at position {row}:{column}:\n\n{line}\n{underline} - {message}"

    def error(
        self,
        message: str,
        length: int,
        offset: int = 0,
        error_cls: Type[ParseError] = ParseError,
    ) -> ParseError:
        """Создаёт (но не выбрасывает) позиционированную ошибку разбора."""
        row, column = self.location(offset)
        return error_cls(message, row, column, self.format_error(message, length, offset))

    def _clamp(self, index: int) -> int:
        return min(max(index, 0), len(self.text))


__all__ = ["SourceReader"]
