"""Logger configuration from command-line flags.

Flags:
    --severity LEVEL   minimal level logged (debug, info, warning, error, critical)
    -q                 warnings only (-q), errors (-qq), critical (-qqq)
    -v, --verbose      more context per message (repeatable)
    --log-format FMT   simple (default), bracket or json

Example:
    >>> parser = argparse.ArgumentParser()
    >>> add_logger_arguments(parser)
    >>> params = logger_params_from_args(parser.parse_args(["-q", "--log-format", "json"]))
    >>> params.severity == logging.WARNING
    True
    >>> params.configure()
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from typing import Dict, Optional, TextIO

SEVERITIES: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

LOG_FORMATS = ("simple", "bracket", "json")

_QUIET_LEVELS = (logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL)


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, verbosity: int = 0):
        super().__init__()
        self._verbosity = verbosity

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
        }
        if self._verbosity >= 1:
            data["logger"] = record.name
        if self._verbosity >= 2:
            data["location"] = f"{record.module}:{record.lineno}"
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data)


def _text_format(log_format: str, verbosity: int) -> str:
    context = ""
    if verbosity >= 1:
        context = "%(name)s"
    if verbosity >= 2:
        context += " %(module)s:%(lineno)d"
    if log_format == "bracket":
        fmt = "[%(asctime)s][%(levelname)s]"
        if context:
            fmt += f"[{context}]"
        return fmt + " %(message)s"
    fmt = "%(levelname)s"
    if context:
        fmt += f" ({context})"
    return fmt + ": %(message)s"


@dataclass(frozen=True)
class LoggerParams:
    """Logger settings chosen on the command line.

    Attributes:
        severity: Minimal logging level.
        verbosity: Amount of context per message (0-3).
        log_format: One of "simple", "bracket", "json".
    """

    severity: int = logging.INFO
    verbosity: int = 0
    log_format: str = "simple"

    def formatter(self) -> logging.Formatter:
        if self.log_format == "json":
            return JsonFormatter(self.verbosity)
        return logging.Formatter(_text_format(self.log_format, self.verbosity))

    def configure(self, stream: Optional[TextIO] = None) -> logging.Handler:
        """Install a handler on the root logger with these settings.

        Replaces handlers installed by previous calls.
        """
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(self.formatter())
        logging.basicConfig(level=self.severity, handlers=[handler], force=True)
        return handler


def add_logger_arguments(parser: argparse.ArgumentParser) -> None:
    """Register the logging flags on ``parser``."""
    group = parser.add_argument_group("logging")
    group.add_argument(
        "--severity",
        choices=sorted(SEVERITIES),
        help="Control exactly which minimal severity level will be logged (used instead of -q)",
    )
    group.add_argument(
        "-q",
        dest="quiet",
        action="count",
        default=0,
        help="Print only warnings (-q) or errors (-qq)",
    )
    group.add_argument(
        "-v", "--verbose",
        dest="verbose",
        action="count",
        default=0,
        help="Controls the amount of information to display for each logged message",
    )
    group.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default="simple",
        help="Selects a format for the log: 'simple' (default), 'bracket' or 'json'",
    )


def logger_params_from_args(args: argparse.Namespace) -> LoggerParams:
    """Build LoggerParams from arguments registered by add_logger_arguments."""
    if args.severity is not None:
        severity = SEVERITIES[args.severity]
    else:
        severity = _QUIET_LEVELS[min(args.quiet, len(_QUIET_LEVELS) - 1)]
    return LoggerParams(
        severity=severity,
        verbosity=min(args.verbose, 3),
        log_format=args.log_format,
    )


__all__ = [
    "SEVERITIES",
    "LOG_FORMATS",
    "JsonFormatter",
    "LoggerParams",
    "add_logger_arguments",
    "logger_params_from_args",
]
