"""Levelled console logging and plain coloured printing."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TextIO

DEBUG = -4
INFO = 0
WARN = 4
ERROR = 8
SILENT = 100

_RESET = "\033[0m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_BLUE = "\033[34m"

_LEVELS = {
    "debug": DEBUG,
    "info": INFO,
    "warn": WARN,
    "error": ERROR,
    "none": SILENT,
    "": SILENT,
}


@dataclass
class _Settings:
    level: int = SILENT
    color: bool = False


_settings = _Settings()


def _is_tty(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def _auto_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    return _is_tty(sys.stdout) and _is_tty(sys.stderr)


def set_color_mode(mode: str) -> None:
    """Choose ANSI colouring: ``"never"``, ``"always"`` or ``"auto"``.

    In auto mode a non-empty ``NO_COLOR`` disables colour; otherwise colour
    is used when both stdout and stderr are terminals.
    """
    mode = mode.strip().lower()
    if mode == "never":
        _settings.color = False
    elif mode == "always":
        _settings.color = True
    else:
        _settings.color = _auto_color()


def color_enabled() -> bool:
    """Tell whether ANSI colour codes are currently emitted."""
    return _settings.color


def set_log_level(level: str) -> None:
    """Set the level by name; unknown names, ``""`` and ``"none"`` silence logging."""
    _settings.level = _LEVELS.get(level.lower(), SILENT)


def _paint(code: str, text: str) -> str:
    if _settings.color:
        return f"{code}{text}{_RESET}"
    return text


def _format_value(value: Any) -> str:
    text = str(value)
    if not text or any(ch.isspace() or ch in '="' or not ch.isprintable() for ch in text):
        return json.dumps(text, ensure_ascii=False)
    return text


def debug(msg: str, **kwargs: Any) -> None:
    """Write a detailed ``key=value`` record to stderr at debug level."""
    if _settings.level > DEBUG:
        return
    timestamp = datetime.now().astimezone().isoformat(timespec="milliseconds")
    fields = [f"timestamp={timestamp}", "level=DEBUG", f"msg={_format_value(msg)}"]
    fields.extend(f"{key}={_format_value(value)}" for key, value in kwargs.items())
    print(" ".join(fields), file=sys.stderr)


def _log(threshold: int, tag: str, code: str, msg: str, stream: TextIO) -> None:
    if _settings.level <= threshold:
        print(f"[{_paint(code, tag)}] {msg}", file=stream)


def info(msg: str) -> None:
    """Print ``[INFO] msg`` to stdout at info level."""
    _log(INFO, "INFO", _BLUE, msg, sys.stdout)


def success(msg: str) -> None:
    """Print ``[SUCCESS] msg`` to stdout at info level."""
    _log(INFO, "SUCCESS", _GREEN, msg, sys.stdout)


def warn(msg: str) -> None:
    """Print ``[WARN] msg`` to stderr at warn level."""
    _log(WARN, "WARN", _YELLOW, msg, sys.stderr)


def error(msg: str) -> None:
    """Print ``[ERROR] msg`` to stderr at error level."""
    _log(ERROR, "ERROR", _RED, msg, sys.stderr)


def print_info(msg: str) -> None:
    """Print ``msg`` in blue to stdout, whatever the log level."""
    print(_paint(_BLUE, msg), file=sys.stdout)


def print_success(msg: str) -> None:
    """Print ``msg`` in green to stdout, whatever the log level."""
    print(_paint(_GREEN, msg), file=sys.stdout)


def print_warn(msg: str) -> None:
    """Print ``msg`` in yellow to stderr, whatever the log level."""
    print(_paint(_YELLOW, msg), file=sys.stderr)


def print_error(msg: str) -> None:
    """Print ``msg`` in red to stderr, whatever the log level."""
    print(_paint(_RED, msg), file=sys.stderr)


set_color_mode("auto")