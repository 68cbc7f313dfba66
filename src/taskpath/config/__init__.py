"""Configuration system for taskpath.

Builds the configuration of a pipeline run from:
- a YAML document read from a file (with ${VAR} substitution)
- overrides given on the command line

Two override strategies share the ConfigurationReader contract:
- docrec_configuration_reader: typed default record, one flag per field
- generic_configuration_reader: ``-o path=value`` document patches

Example:
    >>> from taskpath.config import (
    ...     load_config_document, generic_configuration_reader, PipelineConfigSchema,
    ... )
    >>> reader = generic_configuration_reader(PipelineConfigSchema, "pipeline.yaml")
    >>> overrides = reader.parse_overrides(["-o", "locations=/tmp/run"])
    >>> result = reader.merge_with_file_source(load_config_document("pipeline.yaml"), overrides)
    >>> for warning in result.warnings:
    ...     print(warning)
    >>> config = result.unwrap()
"""

from taskpath.config.errors import (
    ConfigError,
    ConfigLoadError,
    ConfigOverrideError,
    OverrideError,
    InvalidOverrideValueError,
    OverridePathError,
    MalformedPathError,
    PathNotFoundError,
)
from taskpath.config.loader import (
    load_config_document,
    load_config_string,
    write_config_document,
    substitute_env_vars,
    parse_yaml,
)
from taskpath.config.schema import (
    LayerEntrySchema,
    PipelineConfigSchema,
)
from taskpath.config.reader import (
    MergeResult,
    OverridesParser,
    ConfigurationReader,
    add_logging_params,
)
from taskpath.config.overrides import (
    Override,
    json_type,
    parse_override,
    apply_override,
    override_config_from_key_values,
    generic_configuration_reader,
)
from taskpath.config.docrec import (
    Source,
    DocField,
    DocRecord,
    SourcedDocField,
    docrec_configuration_reader,
)

__all__ = [
    # Errors
    "ConfigError",
    "ConfigLoadError",
    "ConfigOverrideError",
    "OverrideError",
    "InvalidOverrideValueError",
    "OverridePathError",
    "MalformedPathError",
    "PathNotFoundError",
    # Loader
    "load_config_document",
    "load_config_string",
    "write_config_document",
    "substitute_env_vars",
    "parse_yaml",
    # Schema models
    "LayerEntrySchema",
    "PipelineConfigSchema",
    # Reader contract
    "MergeResult",
    "OverridesParser",
    "ConfigurationReader",
    "add_logging_params",
    # Path overrides
    "Override",
    "json_type",
    "parse_override",
    "apply_override",
    "override_config_from_key_values",
    "generic_configuration_reader",
    # Documented records
    "Source",
    "DocField",
    "DocRecord",
    "SourcedDocField",
    "docrec_configuration_reader",
]
