# kestrel/core/logger.py
import logging
import sys
from dataclasses import dataclass
from enum import Enum


class Level(str, Enum):
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    def to_logging(self) -> int:
        return {
            Level.ERROR: logging.ERROR,
            Level.WARN: logging.WARNING,
            Level.INFO: logging.INFO,
            Level.DEBUG: logging.DEBUG,
        }[self]


class Destination(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


class SourceLocation(str, Enum):
    """How much of the call site is printed with each record."""

    NONE = "none"
    MODULE = "module"
    FILE = "file"


_BASE_FORMAT = "%(asctime)s %(levelname)-5s"
_MESSAGE = "%(message)s"

_SOURCE_FORMATS = {
    SourceLocation.NONE: f"{_BASE_FORMAT} {_MESSAGE}",
    SourceLocation.MODULE: f"{_BASE_FORMAT} [%(module)s:%(lineno)d] {_MESSAGE}",
    SourceLocation.FILE: f"{_BASE_FORMAT} [%(pathname)s:%(lineno)d] {_MESSAGE}",
}


@dataclass(frozen=True, slots=True)
class LoggerSettings:
    """Defaults: debug level, stderr, no source info."""

    level: Level = Level.DEBUG
    destination: Destination = Destination.STDERR
    source: SourceLocation = SourceLocation.NONE


def build_logger(
    settings: LoggerSettings | None = None, name: str = "kestrel"
) -> logging.Logger:
    """
    Configure and return the named logger.

    Calling this again with the same name swaps the handler instead of
    stacking a second one, so the logger can be rebuilt with new settings.
    """
    settings = settings or LoggerSettings()

    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        if getattr(handler, "_kestrel_handler", False):
            logger.removeHandler(handler)
            handler.close()

    stream = (
        sys.stdout
        if settings.destination is Destination.STDOUT
        else sys.stderr
    )
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(_SOURCE_FORMATS[settings.source]))
    handler._kestrel_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(settings.level.to_logging())

    logger.debug("logger initialized.")
    return logger
