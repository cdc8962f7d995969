from __future__ import annotations

from importlib import metadata

DIST_NAME = "templater"
UNKNOWN_VERSION = "0.0.0"


def tool_version() -> str:
    """Версия дистрибутива templater (0.0.0, если пакет не установлен)."""
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return UNKNOWN_VERSION


__all__ = ["tool_version", "DIST_NAME"]
