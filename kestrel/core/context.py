# kestrel/core/context.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from kestrel.assets.loader import ResourceLoader
from kestrel.core.logger import LoggerSettings, build_logger


@dataclass(frozen=True, slots=True)
class EngineContext:
    """
    Logger and resource access, built once and passed to every component
    that needs them. Nothing in the engine reaches for a process-wide
    instance.
    """

    logger: logging.Logger
    loader: ResourceLoader

    @staticmethod
    def create(
        root: Path,
        logger_settings: LoggerSettings | None = None,
        logger_name: str = "kestrel",
    ) -> EngineContext:
        logger = build_logger(logger_settings, name=logger_name)
        root = Path(root).expanduser()
        loader = ResourceLoader(root, logger=logger.getChild("assets"))
        logger.info("resources rooted at: %s", root)
        return EngineContext(logger=logger, loader=loader)

    def child_logger(self, suffix: str) -> logging.Logger:
        return self.logger.getChild(suffix)

    def path(self, name: str) -> Path:
        return self.loader.path(name)
