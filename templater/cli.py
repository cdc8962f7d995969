from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .config import RenderOptions, Variables, load_config, load_variables
from .errors import ConfigError, TemplaterError
from .processor import Templater
from .version import tool_version

LOG_ENV = "TEMPLATER_LOG"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="templater",
        description="Render {{...}} templates and evaluate template conditions",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="уровень логирования (по умолчанию WARNING или $TEMPLATER_LOG)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--vars",
            metavar="FILE",
            help="YAML/JSON-файл с переменными шаблона",
        )

    sp_render = sub.add_parser("render", help="Отрендерить шаблон в stdout")
    sp_render.add_argument(
        "template",
        metavar="TEXT|@FILE|-",
        help="текст шаблона: прямая строка, @file для чтения из файла, или - для чтения из stdin",
    )
    add_common(sp_render)
    sp_render.add_argument(
        "--config",
        metavar="FILE",
        help="YAML-файл с опциями рендеринга (по умолчанию $TEMPLATER_CONFIG)",
    )
    sp_render.add_argument(
        "--no-trim-end-line",
        action="store_true",
        help="не удалять пробелы перед переводом строки",
    )
    sp_render.add_argument(
        "--squash",
        choices=["on", "off"],
        help="начальный режим схлопывания пробелов",
    )
    sp_render.add_argument(
        "--max-depth",
        type=int,
        metavar="N",
        help="предел вложенности конструкций шаблона",
    )

    sp_check = sub.add_parser("check", help="Вычислить условие (true/false, код возврата 0/1)")
    sp_check.add_argument(
        "expression",
        metavar="TEXT|@FILE|-",
        help="условие: прямая строка, @file для чтения из файла, или - для чтения из stdin",
    )
    add_common(sp_check)

    return p


def _setup_logging(level_name: Optional[str]) -> None:
    level_name = level_name or os.environ.get(LOG_ENV, "").strip().upper() or "WARNING"
    level = getattr(logging, level_name, logging.WARNING)
    log = logging.getLogger("templater")
    log.setLevel(level)
    if not log.handlers:
        h = logging.StreamHandler(sys.stderr)
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        log.addHandler(h)


def _read_source(arg: str) -> str:
    """
    Читает исходный текст аргумента.

    Поддерживает три формата:
    - Прямая строка: "Hello {{:name}}"
    - Из файла: @path/to/template.txt
    - Из stdin: -
    """
    if arg == "-":
        return sys.stdin.read()

    if arg.startswith("@"):
        file_path = Path(arg[1:])
        if not file_path.is_file():
            raise ConfigError(f"File not found: {file_path}")
        try:
            return file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read file {file_path}: {e}")

    return arg


def _variables(ns: argparse.Namespace) -> Variables:
    if not ns.vars:
        return {}
    return load_variables(Path(ns.vars))


def _render_options(ns: argparse.Namespace) -> RenderOptions:
    options = load_config(Path(ns.config) if ns.config else None)
    overrides = {}
    if ns.no_trim_end_line:
        overrides["trim_end_line"] = False
    if ns.squash:
        overrides["squash"] = ns.squash
    if ns.max_depth is not None:
        if ns.max_depth < 1:
            raise ConfigError(f"expected positive integer, got {ns.max_depth!r}", ("max_depth",))
        overrides["max_depth"] = ns.max_depth
    return dataclasses.replace(options, **overrides)


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(ns.log_level)

    try:
        if ns.cmd == "render":
            options = _render_options(ns)
            text = _read_source(ns.template)
            output = Templater(options=options).render(text, _variables(ns))
            sys.stdout.write(output)
            return 0

        text = _read_source(ns.expression)
        result = Templater().check(text, _variables(ns))
        sys.stdout.write("true\n" if result else "false\n")
        return 0 if result else 1

    except TemplaterError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
