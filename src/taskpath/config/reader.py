"""The configuration reader contract.

A ConfigurationReader says how the configuration of a pipeline is built
from two sources: a document read from a file, and overrides given on
the command line. Two strategies implement it:

- docrec_configuration_reader: a typed default record, one CLI flag per
  field, priority merge of the sources (see taskpath.config.docrec).
- generic_configuration_reader: ``-o path=value`` patches applied to the
  document before decoding it (see taskpath.config.overrides).

Both return a MergeResult: warnings to report first, then either the
config or an error message.

Example:
    >>> reader = generic_configuration_reader(PipelineConfigSchema, "pipeline.yaml")
    >>> overrides = reader.parse_overrides(["-o", "data.x._data=1"])
    >>> result = reader.merge_with_file_source({"data": {"x": {"_data": 0}}}, overrides)
    >>> result.unwrap().data
    {'x': {'_data': 1}}
"""

import argparse
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from taskpath.config.errors import ConfigOverrideError
from taskpath.logger import LoggerParams, add_logger_arguments, logger_params_from_args

C = TypeVar("C")
D = TypeVar("D")
O = TypeVar("O")
P = TypeVar("P")


@dataclass
class MergeResult(Generic[C]):
    """Outcome of merging file and CLI sources.

    Attributes:
        warnings: Human readable warnings, in the order they were raised.
        config: The resulting config (None on error).
        error: Error message (None on success).
    """

    warnings: List[str] = field(default_factory=list)
    config: Optional[C] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> C:
        """Return the config, or raise ConfigOverrideError on failure."""
        if self.error is not None:
            raise ConfigOverrideError(self.error)
        return self.config  # type: ignore[return-value]

    def map(self, fn: Callable[[C], D]) -> "MergeResult[D]":
        if self.error is not None:
            return MergeResult(list(self.warnings), None, self.error)
        return MergeResult(list(self.warnings), fn(self.config))  # type: ignore[arg-type]


class OverridesParser(ABC, Generic[O]):
    """Declares CLI arguments and reads the overrides back from them."""

    @abstractmethod
    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """Register the arguments on ``parser``."""
        ...

    @abstractmethod
    def parse(self, args: argparse.Namespace) -> O:
        """Extract the overrides from parsed arguments."""
        ...


@dataclass(frozen=True)
class ConfigurationReader(Generic[C, O]):
    """How to override a configuration document from the command line.

    Attributes:
        overrides_parser: CLI arguments producing the overrides.
        is_null_overrides: True if no override was given on the CLI.
        merge_with_file_source: Merge a file-sourced document with the
            overrides. Returns warnings and the config or an error.
    """

    overrides_parser: OverridesParser[O]
    is_null_overrides: Callable[[O], bool]
    merge_with_file_source: Callable[[Any, O], MergeResult[C]]

    def parse_overrides(self, argv: Sequence[str], prog: Optional[str] = None) -> O:
        """Parse ``argv`` with a parser holding only this reader's arguments."""
        parser = argparse.ArgumentParser(prog=prog)
        self.overrides_parser.add_arguments(parser)
        return self.overrides_parser.parse(parser.parse_args(list(argv)))


class _PairParser(OverridesParser[Tuple[P, O]]):
    def __init__(self, first: OverridesParser[P], second: OverridesParser[O]):
        self._first = first
        self._second = second

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        self._first.add_arguments(parser)
        self._second.add_arguments(parser)

    def parse(self, args: argparse.Namespace) -> Tuple[P, O]:
        return self._first.parse(args), self._second.parse(args)


class LoggerParamsParser(OverridesParser[LoggerParams]):
    """Severity, verbosity and format flags of the logger."""

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        add_logger_arguments(parser)

    def parse(self, args: argparse.Namespace) -> LoggerParams:
        return logger_params_from_args(args)


def add_logging_params(
    reader: ConfigurationReader[C, O],
) -> ConfigurationReader[Tuple[LoggerParams, C], Tuple[LoggerParams, O]]:
    """Extend a reader so that it also parses the logging flags.

    The logging flags never count as overrides and never reach the
    configuration document.
    """

    def merge(document: Any, overrides: Tuple[LoggerParams, O]) -> MergeResult[Tuple[LoggerParams, C]]:
        params, inner = overrides
        return reader.merge_with_file_source(document, inner).map(lambda cfg: (params, cfg))

    return ConfigurationReader(
        overrides_parser=_PairParser(LoggerParamsParser(), reader.overrides_parser),
        is_null_overrides=lambda overrides: reader.is_null_overrides(overrides[1]),
        merge_with_file_source=merge,
    )


__all__ = [
    "MergeResult",
    "OverridesParser",
    "ConfigurationReader",
    "LoggerParamsParser",
    "add_logging_params",
]
