"""
debug.py - Debug and logging functionality for the Connect-N engine

All engine output goes through the shared ``debug`` instance, which wraps
the ``connectn`` logger. Messages carry a component tag ("search",
"policy", "worker", ...) so output can be narrowed to the parts of the
engine being investigated. Named timers measure decision times; they are
safe to use from the background worker thread.
"""

import logging
import sys
import threading
import time
from enum import Enum
from typing import Dict, Iterable, Optional, Set


class DebugLevel(Enum):
    NONE = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5


# Standard logging has no TRACE; trace messages go out as DEBUG with a prefix
LEVEL_MAP = {
    DebugLevel.NONE: logging.CRITICAL + 1,
    DebugLevel.ERROR: logging.ERROR,
    DebugLevel.WARNING: logging.WARNING,
    DebugLevel.INFO: logging.INFO,
    DebugLevel.DEBUG: logging.DEBUG,
    DebugLevel.TRACE: logging.DEBUG,
}

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class DebugManager:
    """Level, component and file configuration for engine logging."""

    def __init__(self, name: str = "connectn"):
        self._level = DebugLevel.WARNING
        self._enabled = True
        self._components: Set[str] = set()  # Empty means every component
        self._logger = logging.getLogger(name)
        self._logger.setLevel(LEVEL_MAP[self._level])
        self._attach_console()
        self._timers: Dict[str, float] = {}
        self._timer_lock = threading.Lock()

    def _attach_console(self) -> None:
        # Re-importing the module must not stack console handlers
        if any(getattr(h, "_connectn_console", False) for h in self._logger.handlers):
            return
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
        handler._connectn_console = True
        self._logger.addHandler(handler)

    def _replace_file_handler(self, path: Optional[str]) -> None:
        for handler in list(self._logger.handlers):
            if isinstance(handler, logging.FileHandler):
                self._logger.removeHandler(handler)
                handler.close()
        if path:
            handler = logging.FileHandler(path)
            handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            self._logger.addHandler(handler)

    @property
    def level(self) -> DebugLevel:
        return self._level

    def configure(self, level: DebugLevel = None,
                  enabled: bool = None,
                  log_file: str = None,
                  components: Iterable[str] = None):
        """
        Change logging settings; arguments left as None are unchanged.

        Args:
            level: Most verbose level to emit
            enabled: Master switch for all output
            log_file: Also write to this file ("" stops file output)
            components: Only emit for these components (empty for all)
        """
        if level is not None:
            self._level = level
            self._logger.setLevel(LEVEL_MAP[level])
        if enabled is not None:
            self._enabled = enabled
        if log_file is not None:
            self._replace_file_handler(log_file)
        if components is not None:
            self._components = set(components)

    def is_enabled_for(self, level: DebugLevel, component: str = None) -> bool:
        """Check whether a message at this level and component would be emitted."""
        if not self._enabled or level == DebugLevel.NONE or level.value > self._level.value:
            return False
        return not (component and self._components and component not in self._components)

    def log(self, level: DebugLevel, message: str, component: str = None):
        """
        Emit a message if the level and component pass the filters.

        Args:
            level: Severity of the message
            message: Text to log
            component: Engine component the message comes from
        """
        if not self.is_enabled_for(level, component):
            return
        if component:
            message = f"[{component}] {message}"
        if level == DebugLevel.TRACE:
            message = f"TRACE: {message}"
        self._logger.log(LEVEL_MAP[level], message)

    def error(self, message: str, component: str = None):
        self.log(DebugLevel.ERROR, message, component)

    def warning(self, message: str, component: str = None):
        self.log(DebugLevel.WARNING, message, component)

    def info(self, message: str, component: str = None):
        self.log(DebugLevel.INFO, message, component)

    def debug(self, message: str, component: str = None):
        self.log(DebugLevel.DEBUG, message, component)

    def trace(self, message: str, component: str = None):
        self.log(DebugLevel.TRACE, message, component)

    def start_timer(self, name: str):
        """Start (or restart) the timer called ``name``."""
        with self._timer_lock:
            self._timers[name] = time.perf_counter()

    def end_timer(self, name: str, component: str = None) -> Optional[float]:
        """
        Stop a timer and log how long it ran at DEBUG.

        Returns:
            Seconds since start_timer, or None for an unknown timer
        """
        with self._timer_lock:
            started = self._timers.pop(name, None)
        if started is None:
            self.warning(f"No running timer named '{name}'", "debug")
            return None

        elapsed = time.perf_counter() - started
        self.debug(f"{name} took {elapsed:.6f}s", component)
        return elapsed

    def set_from_string(self, level_str: str):
        """Set the level from a name such as "info" (used by the CLI)."""
        level = DebugLevel.__members__.get(level_str.upper())
        if level is None:
            self.warning(f"Ignoring unknown debug level '{level_str}'")
            return
        self.configure(level=level)


# Shared instance used throughout the package
debug = DebugManager()
