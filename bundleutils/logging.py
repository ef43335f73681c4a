# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Logging interface for bundleutils.

This module provides a configurable logging interface that library modules
can use for output. The logger can be configured globally or passed as a
parameter for better isolation.

The logger supports four kinds of output:
- Status: Always printed, colourised by level (info, warn, error, success)
- Blank: Always printed, an empty separator line
- Verbose: Only printed when verbose mode is enabled
- Debug: Only printed when debug mode is enabled (implies verbose)

Example:
    Configure global logger:
        ```python
        from bundleutils.logging import get_logger, set_global_logger

        logger = get_logger(verbose=True, debug=False)
        set_global_logger(logger)
        ```

    Use in library code:
        ```python
        from bundleutils.logging import get_global_logger

        logger = get_global_logger()
        logger.verbose("CONFIG", "Loading: .build/backend.production.py")
        logger.debug("CONFIG", "--- Final Merged Configuration ---")
        logger.status("success", "Runner", "Starting bundle process")
        ```

    Use with dependency injection:

        def my_function(logger=None):
            if logger is None:
                logger = get_global_logger()
            logger.verbose("MODULE", "Processing...")

Note:
    The default global logger is silent, so library functions won't print
    anything unless explicitly configured. The Runner plugin is the exception:
    it defaults to get_logger() so its status lines always reach the console.
"""

from __future__ import annotations

import os
import sys
from typing import Protocol

C_RESET = "\033[0m"

# Colour per status level
LEVEL_COLORS: dict[str, str] = {
    "info": "\033[90m",
    "warn": "\033[33m",
    "error": "\033[31m",
    "success": "\033[32m",
}


class Logger(Protocol):
    """Protocol for logger implementations."""

    def status(self, level: str, prefix: str, message: str) -> None:
        """Print a status line regardless of verbosity.

        Args:
            level: One of "info", "warn", "error" or "success".
            prefix: Message prefix (e.g., "Runner").
            message: Log message.
        """
        ...

    def blank(self) -> None:
        """Print an empty separator line."""
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message.

        Args:
            prefix: Message prefix (e.g., "CONFIG", "EXTERNALS").
            message: Log message.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message.

        Args:
            prefix: Message prefix (e.g., "CONFIG").
            message: Log message.
        """
        ...


def _color_enabled() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


class DefaultLogger:
    """Default logger implementation that prints to stdout.

    This logger respects verbose and debug flags. Status lines are always
    printed and are colourised when stdout is a terminal.
    """

    def __init__(
        self, verbose: bool = False, debug: bool = False, color: bool | None = None
    ) -> None:
        """Initialize logger with verbosity settings.

        Args:
            verbose: If True, print verbose messages.
            debug: If True, print debug messages (implies verbose).
            color: Force colour on or off. Default is None, which enables
                colour only for a terminal without NO_COLOR set.
        """
        self._verbose = verbose or debug
        self._debug = debug
        self._color = color

    def status(self, level: str, prefix: str, message: str) -> None:
        """Print a colourised status line."""
        line = f"[{prefix}] {message}"
        use_color = _color_enabled() if self._color is None else self._color
        if use_color and level in LEVEL_COLORS:
            line = f"{LEVEL_COLORS[level]}{line}{C_RESET}"
        print(line)

    def blank(self) -> None:
        """Print an empty separator line."""
        print()

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message (only when verbose mode is active)."""
        if self._verbose:
            print(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message (only when debug mode is active)."""
        if self._debug:
            print(f"[{prefix}] {message}")


class SilentLogger:
    """Logger that suppresses all output.

    Useful for programmatic usage when output is not desired.
    """

    def status(self, level: str, prefix: str, message: str) -> None:
        """Suppress status output."""
        pass

    def blank(self) -> None:
        """Suppress separator output."""
        pass

    def verbose(self, prefix: str, message: str) -> None:
        """Suppress verbose output."""
        pass

    def debug(self, prefix: str, message: str) -> None:
        """Suppress debug output."""
        pass


# Global logger instance (defaults to silent)
_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Get a logger instance with specified verbosity.

    Args:
        verbose: If True, logger will print verbose messages.
        debug: If True, logger will print debug messages (implies verbose).

    Returns:
        A logger instance configured with the specified verbosity.

    Example:
        Get a verbose logger:
            ```python
            logger = get_logger(verbose=True)
            logger.verbose("MODULE", "Processing...")
            ```
    """
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Get the global logger instance.

    Returns:
        The current global logger instance.

    Note:
        The default global logger is silent. Use set_global_logger() to
        configure it, or pass a logger instance directly to functions.
    """
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Set the global logger instance.

    Args:
        logger: Logger instance to use as the global logger.

    Example:
        Turn on loader output from a build script:
            ```python
            from bundleutils.logging import get_logger, set_global_logger

            set_global_logger(get_logger(verbose=True))
            ```

    Note:
        This affects all library functions that fall back to the global
        logger. For better isolation, pass logger instances directly to
        functions instead.
    """
    global _global_logger
    _global_logger = logger
