"""
Structured logging for expression evaluation.

Provides configurable log levels (silent, normal, verbose, debug)
with consistent formatting for progress updates, per-node matcher
traces, verdicts, and evaluation statistics.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, Dict, Optional, TextIO


class LogLevel(Enum):
    """
    Logging levels for the evaluator.

    SILENT:  No output at all.
    NORMAL:  Final verdict only.
    VERBOSE: Progress information and statistics.
    DEBUG:   One line per expression node visited by the matcher.
    """

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class EvaluationLogger:
    """
    Structured logger for expression evaluation.

    Output is filtered by the configured log level.

    Attributes:
        level: The minimum log level to display.
        stream: The output stream (defaults to stdout).
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        stream: TextIO = sys.stdout,
    ) -> None:
        """
        Initialize logger with level and output stream.

        Args:
            level: Minimum log level to display.
            stream: Output stream (default: sys.stdout).
        """
        self.level: LogLevel = level
        self.stream: TextIO = stream

    def enabled(self, level: LogLevel) -> bool:
        """True if messages at ``level`` would be written."""
        return self.level.value >= level.value

    def debug(self, message: str, **kwargs: Any) -> None:
        """
        Log a debug message (only shown at DEBUG level).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled(LogLevel.DEBUG):
            self._write(f"[DEBUG] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log an info message (shown at VERBOSE and DEBUG levels).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled(LogLevel.VERBOSE):
            self._write(f"[INFO] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def node_matched(
        self,
        operator: str,
        window: int,
        threshold: Optional[int],
        index: int,
        satisfied: bool,
        after: bool,
    ) -> None:
        """
        Log the outcome of matching one expression node (DEBUG level).

        Args:
            operator: Operator keyword of the node.
            window: Number of events visible to the node.
            threshold: Inherited threshold, or None for no constraint.
            index: Witness index reported by the node.
            satisfied: Whether the node was satisfied.
            after: The after-threshold flag reported by the node.
        """
        if self.enabled(LogLevel.DEBUG):
            bound = "none" if threshold is None else str(threshold)
            self._write(
                f"[MATCH] {operator} window={window} threshold={bound} "
                f"-> index={index} satisfied={satisfied} after={after}"
            )

    def verdict(self, satisfied: bool, index: int) -> None:
        """Log the final verdict (shown at NORMAL level and above)."""
        if self.enabled(LogLevel.NORMAL):
            if satisfied:
                self._write(f"SATISFIED (witness index {index})")
            else:
                self._write("NOT SATISFIED")

    def statistics(self, stats: Dict[str, Any]) -> None:
        """
        Log evaluation statistics (shown at VERBOSE level and above).

        Args:
            stats: Dictionary of statistic names to values.
        """
        if self.enabled(LogLevel.VERBOSE):
            self._write("=== Statistics ===")
            for key, value in stats.items():
                label = key.replace("_", " ").title()
                self._write(f"  {label}: {value}")

    def _write(self, message: str) -> None:
        """Write a line to the output stream."""
        self.stream.write(message + "\n")
