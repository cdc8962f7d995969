"""
Конфигурация рендеринга и загрузка переменных.

RenderOptions: неизменяемый набор опций одного вызова render().
Файлы конфигурации и переменных читаются через ruamel.yaml
(YAML является надмножеством JSON, поэтому JSON-файлы тоже подходят).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError
from .parsers import DEFAULT_MAX_DEPTH

_yaml = YAML(typ="safe")

CONFIG_ENV = "TEMPLATER_CONFIG"

SquashMode = Literal["on", "off"]
SQUASH_MODES = ("on", "off")

# Значение переменной: строка, словарь или список значений
Value = Union[str, Mapping[str, Any], List[Any]]
Variables = Dict[str, Any]

# Псевдонимы ключей, принятые в исходном формате опций
_KEY_ALIASES = {
    "trimEndLine": "trim_end_line",
    "maxDepth": "max_depth",
}


@dataclass(frozen=True)
class RenderOptions:
    """
    Опции рендеринга.

    Attributes:
        trim_end_line: Удалять пробелы перед переводом строки в итоговом тексте
        squash: Начальный режим схлопывания пробелов ("on" | "off");
                может переключаться директивой {{conf squash = ...}}
        max_depth: Предел вложенности конструкций при разборе
    """
    trim_end_line: bool = True
    squash: SquashMode = "on"
    max_depth: int = DEFAULT_MAX_DEPTH

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RenderOptions:
        """
        Создаёт опции из словаря (snake_case или camelCase ключи).

        Raises:
            ConfigError: При неизвестных ключах или неверных типах значений
        """
        if not isinstance(data, Mapping):
            raise ConfigError(f"expected mapping for options, got {type(data).__name__}")

        allowed = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in allowed:
                raise ConfigError(f"unexpected option {key!r}")
            kwargs[name] = value

        if "trim_end_line" in kwargs and not isinstance(kwargs["trim_end_line"], bool):
            raise ConfigError("expected boolean", ("trim_end_line",))
        if "squash" in kwargs and kwargs["squash"] not in SQUASH_MODES:
            raise ConfigError(f"expected 'on' or 'off', got {kwargs['squash']!r}", ("squash",))
        if "max_depth" in kwargs:
            depth = kwargs["max_depth"]
            if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
                raise ConfigError(f"expected positive integer, got {depth!r}", ("max_depth",))

        return cls(**kwargs)

    @classmethod
    def coerce(cls, options: Union[RenderOptions, Mapping[str, Any], None]) -> RenderOptions:
        """Приводит опции из любого поддерживаемого представления к RenderOptions."""
        if options is None:
            return cls()
        if isinstance(options, RenderOptions):
            return options
        return cls.from_dict(options)


def _read_yaml(path: Path) -> Any:
    try:
        return _yaml.load(path.read_text(encoding="utf-8"))
    except YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}")
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}")


def load_config(path: Optional[Path] = None) -> RenderOptions:
    """
    Загружает опции рендеринга из YAML-файла.

    Опции могут лежать на верхнем уровне или под ключом `options:`.
    Если путь не задан, используется переменная окружения TEMPLATER_CONFIG;
    при отсутствии файла возвращаются опции по умолчанию.

    Args:
        path: Путь к файлу конфигурации

    Returns:
        RenderOptions
    """
    if path is None:
        env = os.environ.get(CONFIG_ENV, "").strip()
        if not env:
            return RenderOptions()
        path = Path(env)

    if not path.is_file():
        return RenderOptions()

    raw = _read_yaml(path) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")
    if "options" in raw:
        raw = raw["options"] or {}
    return RenderOptions.from_dict(raw)


def normalize_value(value: Any, path: tuple[str, ...] = ()) -> Any:
    """
    Приводит значение к модели переменных шаблона.

    Скаляры превращаются в строки (bool → "true"/"false", None → ""),
    словари и списки обрабатываются рекурсивно.

    Raises:
        ConfigError: Для неподдерживаемых типов
    """
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, Mapping):
        return {str(k): normalize_value(v, (*path, str(k))) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize_value(v, (*path, str(i))) for i, v in enumerate(value)]
    raise ConfigError(f"unsupported value type {type(value).__name__}", path)


def load_variables(path: Path) -> Variables:
    """
    Загружает переменные шаблона из YAML/JSON-файла.

    Raises:
        ConfigError: Если файл не читается или верхний уровень не словарь
    """
    if not path.is_file():
        raise ConfigError(f"variables file not found: {path}")
    raw = _read_yaml(path)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"variables must be a mapping: {path}")
    return normalize_value(raw)


__all__ = [
    "RenderOptions",
    "SquashMode",
    "Value",
    "Variables",
    "load_config",
    "load_variables",
    "normalize_value",
]
