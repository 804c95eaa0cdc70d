"""
Diagnostics - the engine's leveled log stream.
Errors always go out; debugging and function-call traces are gated by DebugLevel.
"""

from __future__ import annotations
from typing import Any, Optional
from binding.models import DebugLevel
import logging

# Parent of every binding.* module logger
ENGINE_LOGGER = "binding"


class Diagnostics:
    """Leveled message sink shared by the binding components."""

    def __init__(self, level: DebugLevel = DebugLevel.NONE, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(ENGINE_LOGGER)
        self.level = DebugLevel.NONE
        self.set_level(level)

    def set_level(self, level: DebugLevel):
        self.level = DebugLevel.parse(level)
        # Gated records are emitted at DEBUG, so open the logger up while any category is on
        if self.level is DebugLevel.NONE:
            self.logger.setLevel(logging.NOTSET)
        else:
            self.logger.setLevel(logging.DEBUG)

    def error(self, message: str):
        self.logger.error(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def debug(self, message: str):
        if self.level.debugging:
            self.logger.debug(message)

    def call(self, name: str, *args: Any):
        """Trace a function entry."""
        if self.level.function_calls:
            rendered = ", ".join(repr(a) for a in args)
            self.logger.debug(f"[CALL] {name}({rendered})")
