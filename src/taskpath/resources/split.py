"""Splitting a resource tree between mapped and embedded resources.

Resources declared with the EMBEDDED intent are small values (options,
parameters) written literally in the configuration document, under the
``data`` section. Every other resource is mapped to physical locations
through the ``locations`` section.

A pipeline configuration document therefore looks like:

    locations:
      /inputs/table: /data/run1/inputs/table.csv
      /outputs/report: /data/run1/outputs/report.md
    data:
      params:
        threshold:
          _data: 0.5
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from taskpath.locations.loc import LocLayers
from taskpath.locations.tree import TreePath
from taskpath.resources.mapping import (
    LocationMappings,
    MappingSpec,
    apply_mappings,
)
from taskpath.resources.nodes import (
    PhysicalResourceTree,
    VirtualFileNode,
    VirtualResourceTree,
)
from taskpath.resources.vfile import VFIntent

MAPPINGS_SECTION = "locations"
EMBEDDED_DATA_SECTION = "data"
EMBEDDED_DATA_FIELD = "_data"


def _is_embedded(node: VirtualFileNode) -> bool:
    return node.vfile is not None and node.vfile.intent is VFIntent.EMBEDDED


def mapping_view(tree: VirtualResourceTree) -> Optional[VirtualResourceTree]:
    """Keep every node except embedded resources."""
    return tree.filtered(lambda node: not _is_embedded(node))


def embedded_view(tree: VirtualResourceTree) -> Optional[VirtualResourceTree]:
    """Keep only embedded resources and the folders leading to them.

    Returns:
        The embedded subtree, or None if the tree embeds nothing.
    """
    return tree.filtered(
        lambda node: node.vfile is None or _is_embedded(node),
        collapse=lambda node: node.vfile is None,
    )


def _embedded_fields(tree: VirtualResourceTree) -> Dict[str, Any]:
    doc: Dict[str, Any] = {}
    vfile = tree.node.vfile
    if vfile is not None and vfile.default_value is not None:
        doc[EMBEDDED_DATA_FIELD] = vfile.default_value
    for name, sub in tree.children.items():
        doc[name] = _embedded_fields(sub)
    return doc


def embedded_data_document(tree: VirtualResourceTree) -> Dict[str, Any]:
    """Nested document holding the default values of embedded resources."""
    view = embedded_view(tree)
    if view is None:
        return {}
    return _embedded_fields(view)


def mapping_section(tree: VirtualResourceTree, spec: MappingSpec) -> LocationMappings:
    """Table of the resolved layers of every mapped resource.

    Resources the mapping leaves unmapped are listed with no layer, so that
    they show up in generated configuration files. The root of root mode
    is not recorded; every resource gets its own entry.
    """
    entries: Dict[TreePath, LocLayers] = {}
    view = mapping_view(tree)
    if view is None:
        return LocationMappings(entries)
    bound = apply_mappings(view, spec)
    for path, node in bound.walk():
        declared = view.lookup(path)
        if declared is None or declared.node.vfile is None:
            continue
        entries[path] = node.layers
    return LocationMappings(entries)


def _lookup_data(section: Mapping[str, Any], path: TreePath) -> Any:
    current: Any = section
    for seg in path:
        if not isinstance(current, Mapping) or seg not in current:
            return None
        current = current[seg]
    if isinstance(current, Mapping):
        return current.get(EMBEDDED_DATA_FIELD)
    return None


def read_embedded_data(
    tree: VirtualResourceTree,
    data_section: Optional[Mapping[str, Any]],
) -> Dict[TreePath, Any]:
    """Values of every embedded resource, read from a ``data`` section.

    Falls back to the resource's default value when the section has no
    ``_data`` field at its position.
    """
    view = embedded_view(tree)
    values: Dict[TreePath, Any] = {}
    if view is None:
        return values
    for path, node in view.walk():
        if node.vfile is None:
            continue
        value = _lookup_data(data_section or {}, path)
        values[path] = node.vfile.default_value if value is None else value
    return values


@dataclass(frozen=True)
class ResourceTreeAndMappings:
    """A declaration-state tree with the mapping to apply to it.

    Attributes:
        tree: Declaration-state tree of the pipeline.
        mappings: Root location or explicit mapping table.
    """

    tree: VirtualResourceTree
    mappings: MappingSpec

    def resolve(self) -> PhysicalResourceTree:
        return apply_mappings(self.tree, self.mappings)

    def to_document(self) -> Dict[str, Any]:
        """Configuration document with ``locations`` and ``data`` sections."""
        doc: Dict[str, Any] = {}
        if mapping_view(self.tree) is not None:
            doc[MAPPINGS_SECTION] = mapping_section(self.tree, self.mappings).to_document()
        data = embedded_data_document(self.tree)
        if data:
            doc[EMBEDDED_DATA_SECTION] = data
        return doc


__all__ = [
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
