"""Resource tree nodes and their lifecycle states.

Each node of a resource tree is in one of three states:

- VirtualFileNode: built while the pipeline is assembled. Holds the
  virtual file declared at this path, if any.
- PhysicalFileNode: the virtual file bound to its location layers.
  Used to inspect and validate mappings.
- DataAccessNode: a concrete access function, built by the execution
  layer when the pipeline runs.

Nodes only move forward: VirtualFileNode -> PhysicalFileNode ->
DataAccessNode. Nodes without payload are grouping nodes ("folders").

Example:
    >>> node = VirtualFileNode(VirtualFile.for_reading(dict, ext="json"))
    >>> bound = node.bind((Layer(Loc("/data/params"), "json"),))
    >>> str(bound)
    '/data/params.json - reading; reads dict; default ext .json'
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, cast

from taskpath.locations.loc import LocLayers, render_layers
from taskpath.locations.tree import LocationTree, TreePath, path_to_text
from taskpath.resources.errors import (
    IncompatibleResourceError,
    InvalidTransitionError,
)
from taskpath.resources.vfile import AccessFn, DataAccess, VirtualFile

NULL_MARKER = "null"


class ResourceTreeNode(ABC):
    """Base class for the three node states."""

    @abstractmethod
    def merge(self, other: "ResourceTreeNode") -> "ResourceTreeNode":
        """Combine two nodes found at the same path."""
        ...

    @abstractmethod
    def is_mapped_by_default(self) -> bool:
        """Whether the node takes part in location mapping by default."""
        ...

    def _check_same_state(self, other: "ResourceTreeNode") -> None:
        if type(other) is not type(self):
            raise InvalidTransitionError(
                f"Cannot merge a {type(self).__name__} with a {type(other).__name__}"
            )


@dataclass(frozen=True)
class VirtualFileNode(ResourceTreeNode):
    """Declaration state.

    Attributes:
        vfile: The declared virtual file, or None for grouping nodes.
    """

    vfile: Optional[VirtualFile] = None

    def merge(self, other: ResourceTreeNode) -> "VirtualFileNode":
        self._check_same_state(other)
        other = cast(VirtualFileNode, other)
        if self.vfile is None:
            return other
        if other.vfile is None:
            return self
        return VirtualFileNode(self.vfile.merge(other.vfile))

    def is_mapped_by_default(self) -> bool:
        # Grouping nodes are always kept
        if self.vfile is None:
            return True
        return self.vfile.is_mapped_by_default()

    def bind(self, layers: Optional[LocLayers]) -> "PhysicalFileNode":
        """Move to the location-bound state.

        Args:
            layers: Resolved layers, or None to leave the node unbound.
        """
        if layers is None or self.vfile is None:
            return PhysicalFileNode()
        return PhysicalFileNode(self.vfile, tuple(layers))

    def __str__(self) -> str:
        return self.vfile.describe() if self.vfile is not None else ""


@dataclass(frozen=True)
class PhysicalFileNode(ResourceTreeNode):
    """Location-bound state.

    Attributes:
        vfile: The virtual file, or None if the node is unbound.
        layers: Fallback layers, most specific first.
    """

    vfile: Optional[VirtualFile] = None
    layers: LocLayers = ()

    @property
    def is_bound(self) -> bool:
        return self.vfile is not None

    def merge(self, other: ResourceTreeNode) -> "PhysicalFileNode":
        self._check_same_state(other)
        other = cast(PhysicalFileNode, other)
        if self.vfile is None:
            return other
        if other.vfile is None:
            return self
        return PhysicalFileNode(self.vfile.merge(other.vfile), self.layers + other.layers)

    def is_mapped_by_default(self) -> bool:
        return self.vfile is None or self.vfile.is_mapped_by_default()

    def bind_access(self, fn: AccessFn) -> "DataAccessNode":
        """Move to the access-bound state with ``fn`` as access function.

        Raises:
            InvalidTransitionError: If the node is not bound to any layer.
        """
        if self.vfile is None:
            raise InvalidTransitionError("Cannot bind data access to an unbound node")
        return DataAccessNode(DataAccess(self.vfile.read_type, self.vfile.write_type, fn))

    def __str__(self) -> str:
        if self.vfile is None:
            return NULL_MARKER
        return f"{render_layers(self.layers)} - {self.vfile.describe()}"


@dataclass(frozen=True)
class DataAccessNode(ResourceTreeNode):
    """Access-bound state.

    Attributes:
        access: The access function, or None for grouping nodes.
    """

    access: Optional[DataAccess] = None

    def merge(self, other: ResourceTreeNode) -> "DataAccessNode":
        self._check_same_state(other)
        other = cast(DataAccessNode, other)
        if self.access is None:
            return other
        if other.access is None:
            return self
        return DataAccessNode(self.access.merge(other.access))

    def is_mapped_by_default(self) -> bool:
        return True

    def __str__(self) -> str:
        return NULL_MARKER if self.access is None else "<data access>"


VirtualResourceTree = LocationTree[VirtualFileNode]
PhysicalResourceTree = LocationTree[PhysicalFileNode]
DataResourceTree = LocationTree[DataAccessNode]


def merge_nodes_at(path: TreePath, a: ResourceTreeNode, b: ResourceTreeNode) -> ResourceTreeNode:
    """Merge two nodes, attaching ``path`` to any incompatibility."""
    try:
        return a.merge(b)
    except IncompatibleResourceError as e:
        raise e.at(path) from e


def merge_trees(a: LocationTree, b: LocationTree) -> LocationTree:
    """Merge two resource trees of the same state path by path.

    Raises:
        IncompatibleResourceError: Naming the first conflicting path.
        InvalidTransitionError: If the trees hold nodes of different states.
    """
    return a.merge(b, merge_nodes_at)


def virtual_tree(nodes: dict) -> VirtualResourceTree:
    """Build a declaration-state tree from ``{path: VirtualFile}``.

    Several declarations can target one path by passing a list.
    """
    tree: VirtualResourceTree = LocationTree(VirtualFileNode())
    for path, decl in nodes.items():
        decls = decl if isinstance(decl, (list, tuple)) else [decl]
        for vf in decls:
            single = LocationTree.from_nodes({path: VirtualFileNode(vf)}, VirtualFileNode)
            tree = merge_trees(tree, single)
    return tree


def physical_tree_report(tree: PhysicalResourceTree) -> str:
    """Render every leaf and every bound node as ``/path: rendering``."""
    lines: List[str] = []

    def visit(path: TreePath, sub: PhysicalResourceTree) -> None:
        if sub.node.is_bound or (path and sub.is_leaf):
            lines.append(f"{path_to_text(path)}: {sub.node}")
        for name, child in sub.children.items():
            visit(path + (name,), child)

    visit((), tree)
    return "\n".join(lines)


__all__ = [
    "NULL_MARKER",
    "ResourceTreeNode",
    "VirtualFileNode",
    "PhysicalFileNode",
    "DataAccessNode",
    "VirtualResourceTree",
    "PhysicalResourceTree",
    "DataResourceTree",
    "merge_nodes_at",
    "merge_trees",
    "virtual_tree",
    "physical_tree_report",
]
