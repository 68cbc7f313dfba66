"""Binding virtual resources to physical locations.

A mapping spec is either:
- a single root Loc: every path is mapped under the root, one segment
  per tree level (``root/inputs/table``), except resources
  declared with ``mapped_by_default=False``;
- a LocationMappings table: explicit layers per path. Its ``/`` entry,
  when present, is the root of the mapped-by-default paths the table
  does not list.

apply_mappings walks a declaration-state tree and binds every virtual
file to its layers. Paths the mapping does not cover become unbound
nodes. The function is pure: the same tree and spec always give equal
location-bound trees, so resolution results can be cached or computed
again at run time.

Example:
    >>> tree = virtual_tree({("inputs", "table"): VirtualFile.for_reading(dict, ext="csv")})
    >>> bound = apply_mappings(tree, Loc("/data"))
    >>> str(bound.lookup(("inputs", "table")).node).split(" - ")[0]
    '/data/inputs/table.csv'
"""

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from taskpath.locations.loc import Layer, Loc, LocLayers
from taskpath.locations.tree import TreePath, path_from_text, path_to_text
from taskpath.resources.errors import MappingDocumentError
from taskpath.resources.nodes import (
    PhysicalFileNode,
    PhysicalResourceTree,
    VirtualFileNode,
    VirtualResourceTree,
)
from taskpath.resources.vfile import VirtualFile


def parse_layer(entry: Any) -> Layer:
    """Parse one layer entry of a ``locations`` section.

    Accepted forms: ``"some/loc.ext"`` or ``{"loc": "some/loc", "ext": "ext"}``.
    """
    if isinstance(entry, str):
        return Layer.from_text(entry)
    if isinstance(entry, Mapping):
        loc = entry.get("loc")
        if not isinstance(loc, str):
            raise MappingDocumentError(f"Layer entry needs a 'loc' string: {entry!r}")
        ext = entry.get("ext")
        if ext is not None and not isinstance(ext, str):
            raise MappingDocumentError(f"Layer extension must be a string: {entry!r}")
        return Layer(Loc.from_text(loc), ext)
    raise MappingDocumentError(f"Invalid layer entry: {entry!r}")


def parse_layers(value: Any) -> LocLayers:
    """Parse a layer entry or a list of them. ``null`` means no layer."""
    if value is None:
        return ()
    if isinstance(value, list):
        return tuple(parse_layer(entry) for entry in value)
    return (parse_layer(value),)


class LocationMappings:
    """Explicit table of layers per tree path.

    Example:
        >>> m = LocationMappings.from_document({"/inputs/table": ["a/t.csv", "b/t"]})
        >>> m.get(("inputs", "table"))
        (Layer(loc=Loc(text='a/t'), ext='csv'), Layer(loc=Loc(text='b/t'), ext=None))
    """

    def __init__(self, entries: Optional[Mapping[TreePath, Iterable[Layer]]] = None):
        self._entries: Dict[TreePath, LocLayers] = {}
        for path, layers in (entries or {}).items():
            self._entries[tuple(path)] = tuple(layers)

    @classmethod
    def from_document(cls, section: Mapping[str, Any]) -> "LocationMappings":
        """Read a ``locations`` table keyed by slash-form paths.

        Raises:
            MappingDocumentError: If an entry is malformed.
        """
        if not isinstance(section, Mapping):
            raise MappingDocumentError(
                f"Location mappings must be a mapping, got {type(section).__name__}"
            )
        return cls({path_from_text(str(key)): parse_layers(value) for key, value in section.items()})

    def to_document(self) -> Dict[str, Any]:
        """Render as a ``locations`` table.

        Single layers are written as a plain string, chains as lists and
        paths without layers as null.
        """
        doc: Dict[str, Any] = {}
        for path, layers in self._entries.items():
            texts = [layer.to_text() for layer in layers]
            if not texts:
                doc[path_to_text(path)] = None
            else:
                doc[path_to_text(path)] = texts[0] if len(texts) == 1 else texts
        return doc

    def get(self, path: TreePath) -> Optional[LocLayers]:
        return self._entries.get(tuple(path))

    @property
    def root(self) -> Optional[LocLayers]:
        """Layers of the ``/`` entry, if the table has one."""
        return self._entries.get(())

    def merge(self, other: "LocationMappings") -> "LocationMappings":
        """Combine two tables. Layers of a shared path are concatenated."""
        entries: Dict[TreePath, LocLayers] = dict(self._entries)
        for path, layers in other._entries.items():
            entries[path] = entries.get(path, ()) + layers
        return LocationMappings(entries)

    def items(self) -> Iterator[Tuple[TreePath, LocLayers]]:
        return iter(self._entries.items())

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocationMappings):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"LocationMappings({self.to_document()!r})"


MappingSpec = Union[Loc, LocationMappings]


def mapping_spec_from_document(section: Any) -> MappingSpec:
    """Read a ``locations`` section: a root location string or a table."""
    if isinstance(section, str):
        return Loc.from_text(section)
    return LocationMappings.from_document(section)


def mapping_spec_to_document(spec: MappingSpec) -> Any:
    if isinstance(spec, Loc):
        return spec.to_text()
    return spec.to_document()


def root_layer(root: Loc, path: TreePath) -> Layer:
    """Derive the layer of ``path`` from a root location."""
    loc = root
    for seg in path:
        loc = loc / seg
    return Layer(loc)


def layers_for(path: TreePath, vfile: VirtualFile, spec: MappingSpec) -> Optional[LocLayers]:
    """Resolve the layers of one virtual file.

    A listed path uses its table entry (null leaves it unbound). Other
    paths are derived from the root, the ``/`` entry for a table, unless
    the resource is not mapped by default.

    Returns:
        The layers with their extension resolved, or None if the path
        is not mapped.
    """
    if isinstance(spec, LocationMappings) and path in spec:
        layers = spec.get(path)
        if not layers:
            return None
    elif not vfile.is_mapped_by_default():
        return None
    elif isinstance(spec, LocationMappings):
        if not spec.root:
            return None
        layers = tuple(root_layer(Loc.from_text(layer.to_text()), path) for layer in spec.root)
    else:
        layers = (root_layer(spec, path),)
    return tuple(layer.with_default_ext(vfile.default_ext) for layer in layers)


def apply_one_mapping(path: TreePath, node: VirtualFileNode, spec: MappingSpec) -> PhysicalFileNode:
    if node.vfile is None:
        return PhysicalFileNode()
    return node.bind(layers_for(path, node.vfile, spec))


def apply_mappings(tree: VirtualResourceTree, spec: MappingSpec) -> PhysicalResourceTree:
    """Bind every virtual file of ``tree`` according to ``spec``.

    Args:
        tree: Declaration-state tree.
        spec: Root location or explicit mapping table.

    Returns:
        Location-bound tree with the same shape. Unmapped virtual files
        become unbound nodes.
    """
    return tree.map_with_path(lambda path, node: apply_one_mapping(path, node, spec))


def unbound_paths(tree: PhysicalResourceTree, declared: VirtualResourceTree) -> List[TreePath]:
    """Paths that declare a virtual file but ended up without layers."""
    missing = []
    for path, node in declared.walk():
        if node.vfile is None:
            continue
        bound = tree.lookup(path)
        if bound is None or not bound.node.is_bound:
            missing.append(path)
    return missing


__all__ = [
    "parse_layer",
    "parse_layers",
    "LocationMappings",
    "MappingSpec",
    "mapping_spec_from_document",
    "mapping_spec_to_document",
    "root_layer",
    "layers_for",
    "apply_one_mapping",
    "apply_mappings",
    "unbound_paths",
]
