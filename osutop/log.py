from __future__ import annotations

import logging
import sys
from enum import IntEnum

logger = logging.getLogger("osutop")


class Ansi(IntEnum):
    RED = 31
    GREEN = 32
    YELLOW = 33
    BLUE = 34
    MAGENTA = 35
    RESET = 0

    def __str__(self) -> str:
        return f"\x1b[{self.value}m"


LEVEL_COLOURS = {
    logging.DEBUG: Ansi.MAGENTA,
    logging.INFO: Ansi.BLUE,
    logging.WARNING: Ansi.YELLOW,
    logging.ERROR: Ansi.RED,
}


class ColourFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        colour = LEVEL_COLOURS.get(record.levelno, Ansi.RESET)
        message = super().format(record)

        return f"{colour}{message}{Ansi.RESET}"


def configure(debug: bool = False) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ColourFormatter("[%(asctime)s] %(levelname)s %(message)s", "%H:%M:%S"),
    )

    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False


def debug(msg: str) -> None:
    logger.debug(msg)


def info(msg: str) -> None:
    logger.info(msg)


def warning(msg: str) -> None:
    logger.warning(msg)


def error(msg: str) -> None:
    logger.error(msg)


def format_time(ns: float) -> str:
    for suffix in ("ns", "μs", "ms"):
        if ns < 1_000:
            return f"{ns:.2f}{suffix}"

        ns /= 1_000

    return f"{ns:.2f}s"
