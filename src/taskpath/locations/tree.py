"""Trees addressed by paths of named segments.

A LocationTree holds one payload per node and an ordered mapping of
named children. Trees are treated as immutable values: every operation
returns a new tree and leaves its inputs untouched.

Paths have three spellings:
    - tuple of segments: ``("inputs", "table")``
    - slash form, used as mapping keys: ``/inputs/table``
    - dotted form, used on the command line: ``inputs.table``

Example:
    >>> tree = LocationTree.from_nodes({("a", "b"): 1}, empty=lambda: 0)
    >>> [(path_to_text(p), n) for p, n in tree.walk()]
    [('/', 0), ('/a', 0), ('/a/b', 1)]
"""

from dataclasses import dataclass, field
from typing import (
    Callable,
    Dict,
    Generic,
    Iterator,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
)

N = TypeVar("N")
M = TypeVar("M")

TreePath = Tuple[str, ...]


def path_to_text(path: TreePath) -> str:
    """Render a path in slash form (``/`` is the root)."""
    return "/" + "/".join(path)


def path_from_text(text: str) -> TreePath:
    """Parse a slash-form path. Empty segments are ignored."""
    return tuple(seg for seg in text.split("/") if seg)


def path_to_dotted(path: TreePath) -> str:
    return ".".join(path)


def path_from_dotted(text: str) -> TreePath:
    return tuple(text.split(".")) if text else ()


@dataclass(frozen=True)
class LocationTree(Generic[N]):
    """A node payload plus named subtrees.

    Attributes:
        node: Payload at this position.
        children: Subtrees by segment name, in insertion order.
    """

    node: N
    children: Dict[str, "LocationTree[N]"] = field(default_factory=dict)

    @classmethod
    def from_nodes(
        cls,
        nodes: Mapping[TreePath, N],
        empty: Callable[[], N],
    ) -> "LocationTree[N]":
        """Build a tree from a path -> payload mapping.

        Args:
            nodes: Payloads by path. The root path ``()`` is allowed.
            empty: Factory for the payload of intermediate nodes.
        """
        tree: LocationTree[N] = cls(empty())
        for path, node in nodes.items():
            tree = tree.insert(path, node, empty)
        return tree

    def lookup(self, path: TreePath) -> Optional["LocationTree[N]"]:
        """Return the subtree at ``path``, or None if absent."""
        current: LocationTree[N] = self
        for seg in path:
            sub = current.children.get(seg)
            if sub is None:
                return None
            current = sub
        return current

    def insert(
        self,
        path: TreePath,
        node: N,
        empty: Callable[[], N],
    ) -> "LocationTree[N]":
        """Return a copy with ``node`` set at ``path``.

        Missing intermediate nodes are created with ``empty()``. The
        children of a replaced node are kept.
        """
        if not path:
            return LocationTree(node, dict(self.children))
        head, rest = path[0], path[1:]
        sub = self.children.get(head)
        if sub is None:
            sub = LocationTree(empty())
        children = dict(self.children)
        children[head] = sub.insert(rest, node, empty)
        return LocationTree(self.node, children)

    def walk(self, prefix: TreePath = ()) -> Iterator[Tuple[TreePath, N]]:
        """Yield ``(path, payload)`` pairs in pre-order."""
        yield prefix, self.node
        for name, sub in self.children.items():
            yield from sub.walk(prefix + (name,))

    def map_with_path(
        self,
        fn: Callable[[TreePath, N], M],
        prefix: TreePath = (),
    ) -> "LocationTree[M]":
        """Apply ``fn(path, payload)`` to every node, keeping the shape."""
        return LocationTree(
            fn(prefix, self.node),
            {
                name: sub.map_with_path(fn, prefix + (name,))
                for name, sub in self.children.items()
            },
        )

    def merge(
        self,
        other: "LocationTree[N]",
        combine: Callable[[TreePath, N, N], N],
        prefix: TreePath = (),
    ) -> "LocationTree[N]":
        """Merge two trees. Nodes present in both are ``combine``d.

        Children only present on one side are kept as they are. Children
        of ``self`` come first, then the new ones of ``other``.
        """
        children = dict(self.children)
        for name, sub in other.children.items():
            if name in children:
                children[name] = children[name].merge(sub, combine, prefix + (name,))
            else:
                children[name] = sub
        return LocationTree(combine(prefix, self.node, other.node), children)

    def filtered(
        self,
        keep: Callable[[N], bool],
        collapse: Optional[Callable[[N], bool]] = None,
    ) -> Optional["LocationTree[N]"]:
        """Return the subtree of nodes satisfying ``keep``.

        A node that is not kept disappears with its whole subtree. When
        ``collapse`` is given, a kept node left without children vanishes
        too if ``collapse(node)`` holds.

        Returns:
            The filtered tree, or None if the root itself vanished.
        """
        if not keep(self.node):
            return None
        children: Dict[str, LocationTree[N]] = {}
        for name, sub in self.children.items():
            kept = sub.filtered(keep, collapse)
            if kept is not None:
                children[name] = kept
        if not children and collapse is not None and collapse(self.node):
            return None
        return LocationTree(self.node, children)

    @property
    def is_leaf(self) -> bool:
        return not self.children


__all__ = [
    "TreePath",
    "LocationTree",
    "path_to_text",
    "path_from_text",
    "path_to_dotted",
    "path_from_dotted",
]
