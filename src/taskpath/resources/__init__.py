"""Resource trees for pipeline construction.

Pipeline stages declare virtual files in a tree. The tree then goes
through three states:
- declaration (VirtualFileNode): what each stage needs
- location-bound (PhysicalFileNode): where each resource lives
- access-bound (DataAccessNode): how to read/write it at run time

Example:
    >>> from taskpath.resources import VirtualFile, virtual_tree, apply_mappings
    >>> from taskpath.locations import Loc
    >>> tree = virtual_tree({
    ...     ("inputs", "table"): VirtualFile.for_reading(dict, ext="csv"),
    ...     ("params",): VirtualFile.embedded(float, default=0.5),
    ... })
    >>> bound = apply_mappings(tree, Loc("/data"))
"""

from taskpath.resources.errors import (
    ResourceTreeError,
    IncompatibleResourceError,
    InvalidTransitionError,
    MappingDocumentError,
)
from taskpath.resources.vfile import (
    VFIntent,
    VFMetadata,
    VirtualFile,
    DataAccess,
    DataAccessDone,
    DidReadLoc,
    DidWriteLoc,
)
from taskpath.resources.nodes import (
    NULL_MARKER,
    ResourceTreeNode,
    VirtualFileNode,
    PhysicalFileNode,
    DataAccessNode,
    VirtualResourceTree,
    PhysicalResourceTree,
    DataResourceTree,
    merge_trees,
    virtual_tree,
    physical_tree_report,
)
from taskpath.resources.mapping import (
    LocationMappings,
    MappingSpec,
    mapping_spec_from_document,
    mapping_spec_to_document,
    apply_mappings,
    unbound_paths,
)
from taskpath.resources.split import (
    MAPPINGS_SECTION,
    EMBEDDED_DATA_SECTION,
    EMBEDDED_DATA_FIELD,
    mapping_view,
    embedded_view,
    embedded_data_document,
    mapping_section,
    read_embedded_data,
    ResourceTreeAndMappings,
)

__all__ = [
    # Errors
    "ResourceTreeError",
    "IncompatibleResourceError",
    "InvalidTransitionError",
    "MappingDocumentError",
    # Virtual files
    "VFIntent",
    "VFMetadata",
    "VirtualFile",
    "DataAccess",
    "DataAccessDone",
    "DidReadLoc",
    "DidWriteLoc",
    # Nodes and trees
    "NULL_MARKER",
    "ResourceTreeNode",
    "VirtualFileNode",
    "PhysicalFileNode",
    "DataAccessNode",
    "VirtualResourceTree",
    "PhysicalResourceTree",
    "DataResourceTree",
    "merge_trees",
    "virtual_tree",
    "physical_tree_report",
    # Mapping
    "LocationMappings",
    "MappingSpec",
    "mapping_spec_from_document",
    "mapping_spec_to_document",
    "apply_mappings",
    "unbound_paths",
    # Split
    "MAPPINGS_SECTION",
    "EMBEDDED_DATA_SECTION",
    "EMBEDDED_DATA_FIELD",
    "mapping_view",
    "embedded_view",
    "embedded_data_document",
    "mapping_section",
    "read_embedded_data",
    "ResourceTreeAndMappings",
]
