#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Logging mixin shared by holocall components.

Components inherit ``ModernLogger`` and call ``self.info(...)`` and friends
directly. Each logger name gets a single stream handler the first time it is
used, so importing holocall never reconfigures the root logger.
"""

import logging
import threading
from typing import Any, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_HANDLER_LOCK = threading.Lock()


def resolve_level(level: Union[str, int]) -> int:
    """
    Translate a level name (``"info"``) or number into a logging level.
    """
    if isinstance(level, int):
        return level
    normalized = str(level).strip().lower()
    if normalized not in _LEVELS:
        raise ValueError("Unknown log level: {0}".format(level))
    return _LEVELS[normalized]


def is_known_level(level: Union[str, int]) -> bool:
    try:
        resolve_level(level)
    except ValueError:
        return False
    return True


class ModernLogger:
    """
    Mixin that exposes leveled logging methods bound to a named logger.
    """

    def __init__(self, name: Optional[str] = None, level: Union[str, int] = "info"):
        self._logger_name = "holocall.{0}".format(name or self.__class__.__name__)
        self._logger = logging.getLogger(self._logger_name)
        self._logger.setLevel(resolve_level(level))
        self._install_handler(self._logger)

    @staticmethod
    def _install_handler(logger: logging.Logger) -> None:
        with _HANDLER_LOCK:
            if getattr(logger, "_holocall_handler", False):
                return
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(handler)
            logger.propagate = False
            logger._holocall_handler = True  # type: ignore[attr-defined]

    @property
    def logger(self) -> logging.Logger:
        # Subclasses that skip ModernLogger.__init__ still get a usable logger.
        existing = self.__dict__.get("_logger")
        if existing is None:
            existing = logging.getLogger("holocall.{0}".format(self.__class__.__name__))
            self._logger = existing
        return existing

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.error(message, *args, **kwargs)

    def critical(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.critical(message, *args, **kwargs)
