"""taskpath - Resource trees and layered configuration for pipelines.

Pipeline stages declare the data they read and write as virtual files
in a tree. taskpath binds that tree to physical locations from a
configuration document, keeps small embedded values in the same
document, and merges command-line overrides into it.

Quick Start:
    >>> import taskpath as tp
    >>>
    >>> tree = tp.virtual_tree({
    ...     ("inputs", "table"): tp.VirtualFile.for_reading(dict, ext="csv"),
    ...     ("params", "threshold"): tp.VirtualFile.embedded(float, default=0.5),
    ... })
    >>> bound = tp.apply_mappings(tp.mapping_view(tree), tp.Loc("/data/run1"))
    >>> print(tp.physical_tree_report(bound))
    /inputs/table: /data/run1/inputs/table.csv - reading; reads dict; default ext .csv

For advanced usage, see:
- taskpath.locations: Loc, Layer, LocationTree
- taskpath.resources: virtual files, node states, mapping, split
- taskpath.config: documents, override strategies
- taskpath.cli: PipelineCLI
"""

try:
    from taskpath._version import __version__
except ImportError:
    __version__ = "0.0.0.dev0"

from taskpath.locations import (
    Loc,
    Layer,
    LocationTree,
)
from taskpath.resources import (
    VFIntent,
    VirtualFile,
    virtual_tree,
    merge_trees,
    apply_mappings,
    physical_tree_report,
    LocationMappings,
    mapping_view,
    embedded_view,
    ResourceTreeAndMappings,
    IncompatibleResourceError,
)
from taskpath.config import (
    generic_configuration_reader,
    docrec_configuration_reader,
    override_config_from_key_values,
    PipelineConfigSchema,
)
from taskpath.cli import PipelineCLI

__all__ = [
    "__version__",
    # Locations
    "Loc",
    "Layer",
    "LocationTree",
    # Resources
    "VFIntent",
    "VirtualFile",
    "virtual_tree",
    "merge_trees",
    "apply_mappings",
    "physical_tree_report",
    "LocationMappings",
    "mapping_view",
    "embedded_view",
    "ResourceTreeAndMappings",
    "IncompatibleResourceError",
    # Configuration
    "generic_configuration_reader",
    "docrec_configuration_reader",
    "override_config_from_key_values",
    "PipelineConfigSchema",
    # CLI
    "PipelineCLI",
]
