"""Console log formatter for operation logs.

Lines look like::

    14:02:11.532 10/17 | INFO     | middleware.logging   | <<< execute_command deploy@web1:22 -> exit=0 [41.7ms]

Colors are applied to the level, the logger component, and the parts of a
message an operator scans for: SSH targets, durations, non-zero exit codes
and fault names.
"""

import logging
import re
from datetime import datetime
from zoneinfo import ZoneInfo

RESET = "\033[0m"
DIM = "\033[2m"
BOLD = "\033[1m"

LEVEL_COLORS = {
    "DEBUG": "\033[90m",
    "INFO": "\033[92m",
    "WARNING": "\033[93m",
    "ERROR": "\033[91m",
    "CRITICAL": "\033[41m\033[37m" + BOLD,
}

# Longest prefix first
COMPONENT_COLORS = (
    ("hostops_mcp.services.session", "\033[95m"),
    ("hostops_mcp.services", "\033[94m"),
    ("hostops_mcp.tools", "\033[36m"),
    ("hostops_mcp.middleware", "\033[33m"),
    ("hostops_mcp.config", "\033[32m"),
    ("hostops_mcp", "\033[96m"),
)

HIGHLIGHTS = (
    (re.compile(r"\b\d+(?:\.\d+)?ms(?: SLOW!)?"), "\033[93m"),
    (re.compile(r"(?:[\w.\-]+@)?[\w.\-]+:\d{1,5}\b"), "\033[95m"),
    (re.compile(r"\bexit=[1-9]\d*\b"), "\033[91m"),
    (re.compile(r"\b\w+Fault(?:\[\w+\])?"), "\033[91m" + BOLD),
)

PACKAGE_PREFIX = "hostops_mcp."


class ColorfulFormatter(logging.Formatter):
    """Formatter with aligned columns and optional ANSI colors."""

    def __init__(self, use_colors: bool = True, tz: str = "UTC") -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to emit ANSI color codes.
            tz: IANA time zone name for timestamps.
        """
        super().__init__()
        self.use_colors = use_colors
        self.tz = ZoneInfo(tz)

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{RESET}" if self.use_colors else text

    def _highlight(self, message: str) -> str:
        if not self.use_colors:
            return message
        for pattern, color in HIGHLIGHTS:
            message = pattern.sub(lambda m, c=color: f"{c}{m.group(0)}{RESET}", message)
        return message

    def _component(self, name: str) -> str:
        color = next(
            (c for prefix, c in COMPONENT_COLORS if name.startswith(prefix)),
            "\033[37m",
        )
        short = name.removeprefix(PACKAGE_PREFIX)
        return self._paint(f"{short:<20}", color)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        return dt.strftime(datefmt or "%H:%M:%S") + f".{int(record.msecs):03d} " + dt.strftime("%m/%d")

    def format(self, record: logging.LogRecord) -> str:
        sep = self._paint("|", DIM)
        columns = [
            self._paint(self.formatTime(record), DIM),
            self._paint(f"{record.levelname:<8}", LEVEL_COLORS.get(record.levelname, "")),
            self._component(record.name),
            self._highlight(record.getMessage()),
        ]
        line = f" {sep} ".join(columns)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line
