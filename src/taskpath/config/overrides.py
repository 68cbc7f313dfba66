"""Path-addressed overrides of a configuration document.

Overrides are ``path=value`` strings. The path is dotted (``a.b.c``),
the value is a YAML literal (``3``, ``hello``, ``[1, 2]``, ``{k: v}``,
``null``). Overrides are applied one after the other, each one seeing
the effect of the previous ones.

Applying an override:
- an existing field is replaced; if the coarse type of the value
  changes (string, number, bool, null, array, object) a warning is
  emitted
- a missing last segment is added as a new field, with a warning
- a missing intermediate segment is an error (PathNotFoundError)
- going through a value that is not a mapping is an error
  (MalformedPathError)

Documents are never mutated: every step builds new mappings along the
overridden path.

Example:
    >>> warnings, doc = override_config_from_key_values({"x": 1}, ["x=hello"])
    >>> doc
    {'x': 'hello'}
    >>> warnings
    ["`x': Overriding a number with a string"]
"""

import argparse
import logging
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
    get_origin,
)

import yaml
from pydantic import TypeAdapter, ValidationError

from taskpath.config.errors import (
    InvalidOverrideValueError,
    MalformedPathError,
    OverrideError,
    PathNotFoundError,
)
from taskpath.config.loader import parse_yaml
from taskpath.config.reader import ConfigurationReader, MergeResult, OverridesParser
from taskpath.locations.tree import path_from_dotted

logger = logging.getLogger(__name__)

C = TypeVar("C")

# (long flag, short flag or None, path prefix)
Shortcut = Tuple[str, Optional[str], str]

OVERRIDES_DEST = "config_overrides"


def json_type(value: Any) -> str:
    """Coarse type of a document value, with its article."""
    if isinstance(value, bool):
        return "a bool"
    if isinstance(value, (int, float)):
        return "a number"
    if isinstance(value, str):
        return "a string"
    if value is None:
        return "a null"
    if isinstance(value, dict):
        return "an object"
    if isinstance(value, (list, tuple)):
        return "an array"
    return f"a {type(value).__name__}"


@dataclass(frozen=True)
class Override:
    """A parsed ``path=value`` override.

    Attributes:
        path: Dotted path as given.
        segments: Path split on dots.
        value: Decoded YAML value.
    """

    path: str
    segments: Tuple[str, ...]
    value: Any


def parse_override(text: str) -> Override:
    """Parse ``path=value``. Only the first ``=`` separates.

    Raises:
        MalformedPathError: No ``=``, or an empty path segment.
        InvalidOverrideValueError: The value is not valid YAML.
    """
    if "=" not in text:
        raise MalformedPathError(text)
    path, raw = text.split("=", 1)
    segments = path_from_dotted(path)
    if not segments or any(not seg for seg in segments):
        raise MalformedPathError(path)
    try:
        value = parse_yaml(raw)
    except yaml.YAMLError as e:
        raise InvalidOverrideValueError(path, raw, str(e)) from e
    return Override(path, segments, value)


def _added_warning(path: str) -> str:
    return (
        f"`{path}': This field does not exist in config file, "
        f"it will be added (but beware of typos!)"
    )


def _type_change_warning(path: str, old: Any, new: Any) -> Optional[str]:
    old_type, new_type = json_type(old), json_type(new)
    if old_type == new_type:
        return None
    return f"`{path}': Overriding {old_type} with {new_type}"


def _do_override(
    current: Any,
    full_path: str,
    segments: Tuple[str, ...],
    value: Any,
) -> Tuple[List[str], Any]:
    if not segments:
        return [], value
    if not isinstance(current, dict):
        raise MalformedPathError(full_path, segments)

    key, rest = segments[0], segments[1:]
    updated: Dict[str, Any] = dict(current)

    if key in current:
        old = current[key]
        warnings, new = _do_override(old, full_path, rest, value)
        updated[key] = new
        warning = _type_change_warning(full_path, old, new)
        if warning is not None:
            warnings.append(warning)
        return warnings, updated

    if rest:
        raise PathNotFoundError(full_path, segments)
    updated[key] = value
    return [_added_warning(full_path)], updated


def apply_override(document: Any, override: Override) -> Tuple[List[str], Any]:
    """Apply one override. Returns (warnings, new document).

    Raises:
        OverridePathError: If the path does not fit the document.
    """
    return _do_override(document, override.path, override.segments, override.value)


def override_config_from_key_values(
    document: Any,
    overrides: Sequence[str],
    warnings: Optional[List[str]] = None,
) -> Tuple[List[str], Any]:
    """Fold ``path=value`` overrides over a document, left to right.

    Warnings are returned in the order they were raised. When a
    ``warnings`` list is given they are appended to it as each override
    is applied, so the caller keeps them if a later override fails.

    Raises:
        OverrideError: On the first override that cannot be applied.
            ``document`` is left untouched.
    """
    if warnings is None:
        warnings = []
    current = document
    for text in overrides:
        new_warnings, current = apply_override(current, parse_override(text))
        logger.debug(f"Applied override: {text}")
        warnings.extend(new_warnings)
    return warnings, current


def override_document(document: Any, overrides: Sequence[str]) -> MergeResult[Any]:
    """Like override_config_from_key_values, reporting errors in the result.

    Warnings raised before a failing override are kept.
    """
    warnings: List[str] = []
    try:
        _, config = override_config_from_key_values(document, overrides, warnings)
    except OverrideError as e:
        return MergeResult(warnings, None, str(e))
    return MergeResult(warnings, config)


Decoder = Callable[[Any], Any]


def make_decoder(target: Union[type, Any, Decoder]) -> Decoder:
    """Turn a type (pydantic model, dataclass, typing alias) or callable into a decoder."""
    if isinstance(target, type) or get_origin(target) is not None:
        return TypeAdapter(target).validate_python
    return target


def decode_document(decode: Decoder, document: Any) -> MergeResult[Any]:
    """Decode a document, turning decoding failures into an error result."""
    try:
        return MergeResult([], decode(document))
    except (ValidationError, ValueError, TypeError) as e:
        return MergeResult([], None, f"Failed to decode configuration: {e}")


class _AppendOverride(argparse.Action):
    """Appends ``prefix.value`` to a shared override list."""

    def __init__(self, option_strings: List[str], dest: str, prefix: str = "", **kwargs: Any):
        super().__init__(option_strings, dest, **kwargs)
        self.prefix = prefix

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: Optional[str] = None,
    ) -> None:
        items = list(getattr(namespace, self.dest, None) or [])
        items.append(f"{self.prefix}.{values}" if self.prefix else values)
        setattr(namespace, self.dest, items)


class KeyValueOverridesParser(OverridesParser[List[str]]):
    """``-o/--override path=value`` and its shortcut flags.

    All flags feed one list, in command-line order.

    Args:
        config_file: Name of the configuration, shown in the help text.
        shortcuts: (long, short, prefix) triples. ``--long p=v`` is the
            same as ``-o prefix.p=v``.
    """

    def __init__(self, config_file: str = "configuration file", shortcuts: Sequence[Shortcut] = ()):
        self._config_file = config_file
        self._shortcuts = list(shortcuts)

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        group = parser.add_argument_group("configuration overrides")
        group.add_argument(
            "-o", "--override",
            dest=OVERRIDES_DEST,
            action=_AppendOverride,
            metavar="yaml.path=YAML_VALUE",
            help=f"Override a field value in the {self._config_file} configuration.",
        )
        for long, short, prefix in self._shortcuts:
            flags = [f"--{long}"] + ([f"-{short}"] if short else [])
            group.add_argument(
                *flags,
                dest=OVERRIDES_DEST,
                action=_AppendOverride,
                prefix=prefix,
                metavar="yaml.path=YAML_VALUE",
                help=f"A shortcut for `-o {prefix}.yaml.path=YAML_VALUE'",
            )

    def parse(self, args: argparse.Namespace) -> List[str]:
        return list(getattr(args, OVERRIDES_DEST, None) or [])


def generic_configuration_reader(
    decode: Union[type, Any, Decoder],
    config_file: str = "configuration file",
    shortcuts: Sequence[Shortcut] = (),
) -> ConfigurationReader[Any, List[str]]:
    """Reader patching the document with ``path=value`` overrides.

    Makes no assumption on the config type beyond ``decode``: the
    overrides are applied to the raw document, which is decoded last.

    Args:
        decode: Config type (validated with pydantic) or decoding callable.
        config_file: Name of the configuration, shown in the help text.
        shortcuts: (long, short, prefix) shortcut flags.
    """
    decoder = make_decoder(decode)

    def merge(document: Any, overrides: List[str]) -> MergeResult[Any]:
        patched = override_document(document, overrides)
        if not patched.ok:
            return patched
        decoded = decode_document(decoder, patched.config)
        return MergeResult(patched.warnings + decoded.warnings, decoded.config, decoded.error)

    return ConfigurationReader(
        overrides_parser=KeyValueOverridesParser(config_file, shortcuts),
        is_null_overrides=lambda overrides: not overrides,
        merge_with_file_source=merge,
    )


__all__ = [
    "Shortcut",
    "OVERRIDES_DEST",
    "json_type",
    "Override",
    "parse_override",
    "apply_override",
    "override_config_from_key_values",
    "override_document",
    "Decoder",
    "make_decoder",
    "decode_document",
    "KeyValueOverridesParser",
    "generic_configuration_reader",
]
