"""Reading and writing pipeline configuration documents.

A configuration document is the "file source" of the override engine:
plain YAML values (JSON is valid YAML) with a mapping at the root.
Validation is left to the configuration reader, which runs after the
command-line overrides are applied.

String values may reference environment variables:
    ${NAME}            the variable must be set
    ${NAME:-fallback}  ``fallback`` is used when it is not

Example:
    >>> doc = load_config_document("pipeline.yaml")
    >>> doc["locations"]
    {'/': '/data/run1'}
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from taskpath.config.errors import ConfigLoadError

logger = logging.getLogger(__name__)

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class DocumentLoader(yaml.SafeLoader):
    """SafeLoader producing plain JSON-style values.

    Date-like scalars (``2024-01-01``) stay strings instead of becoming
    ``datetime.date`` objects.
    """


DocumentLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def parse_yaml(text: str) -> Any:
    """Parse YAML text into strings, numbers, bools, nulls, lists and dicts.

    Raises:
        yaml.YAMLError: If the text is not valid YAML.
    """
    return yaml.load(text, Loader=DocumentLoader)


def _env_value(match: "re.Match[str]") -> str:
    name, fallback = match.group(1), match.group(2)
    if name in os.environ:
        return os.environ[name]
    if fallback is None:
        raise KeyError(f"Environment variable '{name}' is not set and has no fallback")
    return fallback


def substitute_env_vars(value: Any) -> Any:
    """Expand ``${NAME}`` references in every string of a document.

    Mappings and lists are walked recursively. Other values are
    returned unchanged.

    Raises:
        KeyError: A referenced variable is unset and has no fallback.

    Example:
        >>> os.environ["DATA_ROOT"] = "/data"
        >>> substitute_env_vars({"locations": "${DATA_ROOT}/run1"})
        {'locations': '/data/run1'}
    """
    if isinstance(value, str):
        return ENV_VAR_PATTERN.sub(_env_value, value)
    if isinstance(value, dict):
        return {key: substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    return value


def _parse_document(text: str, origin: str, substitute_vars: bool) -> Dict[str, Any]:
    try:
        document: Optional[Any] = parse_yaml(text)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in {origin}: {e}") from e

    if document is None:
        raise ConfigLoadError(f"Empty configuration document: {origin}")
    if not isinstance(document, dict):
        raise ConfigLoadError(
            f"Configuration document {origin} must be a mapping, "
            f"got {type(document).__name__}"
        )
    if not substitute_vars:
        return document

    try:
        return substitute_env_vars(document)
    except KeyError as e:
        raise ConfigLoadError(f"Environment variable error in {origin}: {e}") from e


def load_config_document(
    path: Union[str, Path],
    substitute_vars: bool = True,
    missing_ok: bool = False,
) -> Dict[str, Any]:
    """Load the configuration document stored at ``path``.

    Args:
        path: YAML or JSON file.
        substitute_vars: Expand ``${NAME}`` references.
        missing_ok: Return ``{}`` when the file does not exist.

    Raises:
        ConfigLoadError: Unparsable content, or a root that is not a mapping.
        FileNotFoundError: The file does not exist and not ``missing_ok``.
    """
    path = Path(path)
    if not path.exists():
        if not missing_ok:
            raise FileNotFoundError(f"Configuration file not found: {path}")
        logger.debug(f"No configuration file at {path}, starting from an empty document")
        return {}

    document = _parse_document(path.read_text(encoding="utf-8"), str(path), substitute_vars)
    logger.debug(f"Loaded configuration document {path} ({len(document)} sections)")
    return document


def load_config_string(content: str, substitute_vars: bool = True) -> Dict[str, Any]:
    """Like load_config_document, on YAML text."""
    return _parse_document(content, "<string>", substitute_vars)


def write_config_document(path: Union[str, Path], document: Dict[str, Any]) -> Path:
    """Dump ``document`` as YAML, keeping section and key order."""
    path = Path(path)
    path.write_text(
        yaml.safe_dump(document, sort_keys=False, default_flow_style=False),
        encoding="utf-8",
    )
    logger.info(f"Wrote configuration document: {path}")
    return path


__all__ = [
    "ENV_VAR_PATTERN",
    "DocumentLoader",
    "parse_yaml",
    "substitute_env_vars",
    "load_config_document",
    "load_config_string",
    "write_config_document",
]
