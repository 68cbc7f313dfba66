"""Errors raised while building and resolving resource trees.

All of them are configuration errors: they are raised once, while the
pipeline is assembled or its locations are resolved, and are never
retried.
"""

from typing import Optional

from taskpath.locations.tree import TreePath, path_to_text


class ResourceTreeError(Exception):
    """Base class for resource tree errors."""

    pass


class IncompatibleResourceError(ResourceTreeError):
    """Two virtual files declared at one path cannot be merged.

    Attributes:
        path: Tree path of the conflict (None when not known yet).
        detail: What did not match.
    """

    def __init__(self, detail: str, path: Optional[TreePath] = None):
        self.detail = detail
        self.path = path
        if path is None:
            super().__init__(detail)
        else:
            super().__init__(f"Incompatible resources at '{path_to_text(path)}': {detail}")

    def at(self, path: TreePath) -> "IncompatibleResourceError":
        """Return the same error located at ``path``."""
        return IncompatibleResourceError(self.detail, path)


class InvalidTransitionError(ResourceTreeError):
    """A node was combined or converted across lifecycle states."""

    pass


class MappingDocumentError(ResourceTreeError):
    """A ``locations`` section could not be read."""

    pass


__all__ = [
    "ResourceTreeError",
    "IncompatibleResourceError",
    "InvalidTransitionError",
    "MappingDocumentError",
]
