from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from textwrap import wrap
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

LABEL_WIDTH = 18
WRAP_WIDTH = 110
INDENT = "    "
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s\n%(message)s\n"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed by configure_logging.
_OWNED_MARKER = "_goproconcat_handler"

Fields = Union[Mapping[str, object], Sequence[tuple[str, object]]]


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(_as_text(item) for item in value)
    return str(value).strip()


def _header(title: str, pad_top: bool) -> list[str]:
    lines = [""] if pad_top else []
    lines.extend([title, "-" * len(title)])
    return lines


def render_fields_block(title: str, fields: Fields, *, pad_top: bool = True) -> str:
    """Render an event title followed by aligned ``Label: value`` rows."""
    items = list(fields.items()) if isinstance(fields, Mapping) else list(fields)
    lines = _header(title, pad_top)
    if not items:
        return "\n".join(lines).rstrip()

    label_width = max(min(max(len(str(key)) for key, _ in items), LABEL_WIDTH), 8)
    value_width = max(WRAP_WIDTH - len(INDENT) - label_width - 2, 32)
    for key, value in items:
        wrapped = wrap(_as_text(value), width=value_width) or [""]
        lines.append(f"{INDENT}{str(key):<{label_width}}: {wrapped[0]}")
        lines.extend(f"{INDENT}{'':<{label_width}}  {extra}" for extra in wrapped[1:])
    return "\n".join(lines).rstrip()


def render_list_block(title: str, items: Iterable[object], *, pad_top: bool = True) -> str:
    """Render an event title followed by one numbered row per item."""
    lines = _header(title, pad_top)
    materialized = [item for item in items if item is not None]
    if not materialized:
        lines.append(f"{INDENT}(none)")
    width = len(str(len(materialized)))
    for index, item in enumerate(materialized, start=1):
        lines.append(f"{INDENT}{index:>{width}}. {_as_text(item)}")
    return "\n".join(lines).rstrip()


def configure_logging(
    level: int | str = logging.INFO,
    *,
    log_file: Path | None = None,
    console: Console | None = None,
) -> None:
    """Install a Rich console handler and an optional plain file handler."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    root = logging.getLogger()

    file_handler: logging.Handler | None = None
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=FILE_DATE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        setattr(file_handler, _OWNED_MARKER, True)

    for handler in list(root.handlers):
        if getattr(handler, _OWNED_MARKER, False):
            root.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    setattr(console_handler, _OWNED_MARKER, True)
    root.addHandler(console_handler)
    if file_handler is not None:
        root.addHandler(file_handler)

    root.setLevel(logging.DEBUG if file_handler is not None else level)
