# kestrel/core/__init__.py
from kestrel.core.context import EngineContext
from kestrel.core.logger import (
    Destination,
    Level,
    LoggerSettings,
    SourceLocation,
    build_logger,
)

__all__ = [
    "EngineContext",
    "LoggerSettings",
    "Level",
    "Destination",
    "SourceLocation",
    "build_logger",
]
